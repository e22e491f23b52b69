"""Dependency ordering and pipeline diagrams for named tasks."""

__all__ = [
    "CycleError",
    "DependencyGraph",
    "PipelineFileError",
    "TaskNames",
    "Vertex",
    "dump_pipeline",
    "export_pipeline",
    "load_pipeline",
    "parse_pipeline",
]

from ._graph import CycleError, DependencyGraph, TaskNames, Vertex
from ._io import PipelineFileError, dump_pipeline, export_pipeline, load_pipeline, parse_pipeline
