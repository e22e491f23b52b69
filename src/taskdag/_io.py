"""Loading and saving pipeline definitions as TOML.

A pipeline file declares one table per task::

    [tasks.build]
    data = { command = "make" }

    [tasks.test]
    after = "build"
    before = ["deploy"]

``before`` lists tasks that run after this one, ``after`` lists tasks that
run before it. Both accept a single name or a list of names.
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ._graph import DependencyGraph

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)


class PipelineFileError(Exception):
    """Error reading or validating a pipeline definition."""


class TaskSpec(BaseModel):
    """Declaration of a single task in a pipeline file."""

    model_config = ConfigDict(extra="forbid")

    before: str | list[str] = Field(default_factory=list)
    after: str | list[str] = Field(default_factory=list)
    data: dict[str, Any] = Field(default_factory=dict)


class PipelineSpec(BaseModel):
    """Contents of a pipeline file."""

    model_config = ConfigDict(extra="forbid")

    tasks: dict[str, TaskSpec] = Field(default_factory=dict)


def parse_pipeline(data: Mapping[str, Any], source: str = "<data>") -> DependencyGraph:
    """Build a graph from parsed pipeline data.

    Tasks are inserted in the order they appear in ``data``.

    Args:
        data: Parsed TOML document.
        source: Name used in error messages.

    Returns:
        A new DependencyGraph.

    Raises:
        PipelineFileError: If the data does not describe a pipeline.
        CycleError: If the declared dependencies contain a cycle.

    """
    try:
        spec = PipelineSpec.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid pipeline in {source}: {e}"
        raise PipelineFileError(msg) from e

    graph = DependencyGraph()
    for name, task in spec.tasks.items():
        if task.data:
            graph.insert_vertex(name, task.data)
        graph.insert_edges_for_task(name, run_before=task.before, run_after=task.after)
    logger.debug(f"Loaded {len(graph)} tasks from {source}")
    return graph


def load_pipeline(path: Path) -> DependencyGraph:
    """Load a pipeline TOML file into a graph.

    Raises:
        PipelineFileError: If the file cannot be read or is not a valid pipeline.
        CycleError: If the declared dependencies contain a cycle.

    """
    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        msg = f"Cannot read pipeline file {path}: {e}"
        raise PipelineFileError(msg) from e
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {path}: {e}"
        raise PipelineFileError(msg) from e

    return parse_pipeline(data, source=str(path))


def dump_pipeline(graph: DependencyGraph) -> dict[str, Any]:
    """Convert a graph to pipeline data.

    Every task is written with its direct dependencies under ``after``.
    Payloads are kept only when they are mappings.
    """
    tasks: dict[str, Any] = {}
    for vertex in graph:
        task: dict[str, Any] = {}
        if vertex.predecessors:
            task["after"] = vertex.predecessor_names
        if isinstance(vertex.payload, dict) and vertex.payload:
            task["data"] = vertex.payload
        tasks[vertex.name] = task
    return {"tasks": tasks}


def export_pipeline(graph: DependencyGraph, path: Path) -> None:
    """Write a graph to a pipeline TOML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as f:
        tomli_w.dump(dump_pipeline(graph), f)
    logger.debug(f"Exported pipeline to {path}")
