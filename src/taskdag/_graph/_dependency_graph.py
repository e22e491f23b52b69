"""Incrementally built dependency graph of named tasks."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from ._algorithms import CycleError, depth_first_visit, group_by_rank, longest_path_ranks
from ._render import render_order, render_pipeline

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator, Mapping

logger = logging.getLogger(__name__)

type TaskNames = str | Iterable[str] | None
"""A single task name, an ordered collection of names, or nothing."""

_UNSET: Any = object()


@dataclass(eq=False, slots=True)
class Vertex:
    """A named task in the dependency graph.

    Attributes:
        name: Unique task name, also the key in the graph registry.
        payload: Caller data attached to the task. Opaque to the graph.
        predecessors: Tasks this task depends on, keyed by name in insertion order.
            The vertices are owned by the graph, not by this vertex.
        has_successor: True once any task has been made to depend on this one.
        stage: 1-based rank assigned by ``DependencyGraph.compute_stages``.

    """

    name: str
    payload: Any = None
    predecessors: dict[str, Vertex] = field(default_factory=dict)
    has_successor: bool = False
    stage: int | None = None

    @property
    def predecessor_names(self) -> list[str]:
        """Names of direct dependencies in the order they were declared."""
        return list(self.predecessors)

    def __repr__(self) -> str:
        return f"Vertex(name={self.name!r}, predecessors={self.predecessor_names!r}, stage={self.stage!r})"


def _as_names(value: TaskNames) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


class DependencyGraph:
    """A directed acyclic graph of tasks, built one vertex and edge at a time.

    An edge ``(a, b)`` means "b depends on a": ``a`` is ordered before ``b``.
    Every edge insertion is checked for cycles before the graph is touched,
    so the graph is acyclic after every call.

    Example:
        >>> graph = DependencyGraph()
        >>> graph.insert_edge("build", "test")
        >>> graph.insert_edge("test", "deploy")
        >>> graph.print_graph()
        'build --> test --> deploy'

    """

    __slots__ = ("_vertices",)

    def __init__(self) -> None:
        self._vertices: dict[str, Vertex] = {}

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    def insert_vertex(self, name: str, payload: Any = _UNSET) -> Vertex | None:
        """Register a task, or return the already registered one.

        Args:
            name: Task name. Empty names are ignored.
            payload: Data to attach. Replaces the existing payload of a known
                task when given, even if it is ``None``.

        Returns:
            The vertex for ``name``, or ``None`` if ``name`` is empty.

        """
        if not name:
            return None

        vertex = self._vertices.get(name)
        if vertex is not None:
            if payload is not _UNSET:
                vertex.payload = payload
            return vertex

        vertex = Vertex(name=name, payload=None if payload is _UNSET else payload)
        self._vertices[name] = vertex
        logger.debug(f"Inserted vertex '{name}'")
        return vertex

    def insert_edge(self, dependency: str, dependent: str) -> None:
        """Declare that ``dependent`` must be ordered after ``dependency``.

        Missing endpoints are created. Self loops, empty names and edges that
        already exist are ignored.

        Args:
            dependency: Task that must come first.
            dependent: Task that depends on ``dependency``.

        Raises:
            CycleError: If ``dependency`` already depends, directly or
                transitively, on ``dependent``. The graph is left unchanged.

        """
        if not dependency or not dependent or dependency == dependent:
            return

        existing = self._vertices.get(dependent)
        if existing is not None and dependency in existing.predecessors:
            return

        # A cycle needs both endpoints to exist already
        if dependency in self._vertices and dependent in self._vertices:
            self._check_cycle(dependency, dependent)

        self.insert_vertex(dependency)
        self.insert_vertex(dependent)
        from_vertex = self._vertices[dependency]
        to_vertex = self._vertices[dependent]

        from_vertex.has_successor = True
        to_vertex.predecessors[dependency] = from_vertex
        logger.debug(f"Inserted edge '{dependency}' -> '{dependent}'")

    def insert_edges_for_task(
        self,
        name: str,
        payload: Any = _UNSET,
        run_before: TaskNames = None,
        run_after: TaskNames = None,
    ) -> None:
        """Register a task together with the tasks it runs before and after.

        Args:
            name: Task name.
            payload: Data to attach to the task. Left unchanged when omitted.
            run_before: Tasks that depend on ``name``.
            run_after: Tasks that ``name`` depends on.

        Raises:
            CycleError: If one of the declared edges would close a cycle.
                Edges inserted earlier in the same call are kept.

        """
        self.insert_vertex(name, payload)
        for later in _as_names(run_before):
            self.insert_edge(name, later)
        for earlier in _as_names(run_after):
            self.insert_edge(earlier, name)

    def _check_cycle(self, dependency: str, dependent: str) -> None:
        def reject(name: str, path: tuple[str, ...]) -> None:
            if name == dependent:
                logger.debug(f"Rejected edge '{dependency}' -> '{dependent}'")
                raise CycleError(path)

        depth_first_visit(dependency, self._resolved_predecessors, reject, set())

    # -------------------------------------------------------------------------
    # Traversal and stages
    # -------------------------------------------------------------------------

    def _resolved_predecessors(self, name: str) -> list[str]:
        return [p for p in self._vertices[name].predecessors if p in self._vertices]

    def topological_sort(self, callback: Callable[[Vertex, tuple[str, ...]], None]) -> None:
        """Call ``callback`` once per task, dependencies first.

        Stages are recomputed before the walk. Walks start from every task
        nothing depends on, in insertion order, and share one visited set.

        Args:
            callback: Called as ``callback(vertex, path)`` where ``path`` is the
                active walk from its starting task down to ``vertex``.

        Raises:
            CycleError: If the graph contains a cycle.

        """
        self.compute_stages()

        visited: set[str] = set()
        for vertex in self.leaves():
            depth_first_visit(
                vertex.name,
                self._resolved_predecessors,
                lambda name, path: callback(self._vertices[name], path),
                visited,
            )

    def compute_stages(self) -> dict[str, int]:
        """Assign every task its stage: the length of its longest dependency chain.

        Tasks without dependencies are in stage 1. Cached stages are always
        discarded and recomputed.

        Returns:
            Mapping from task name to stage.

        """
        ranks = longest_path_ranks(self._vertices, self._resolved_predecessors)
        for name, vertex in self._vertices.items():
            vertex.stage = ranks[name]
        return ranks

    def order(self) -> list[str]:
        """Return task names in topological order."""
        names: list[str] = []
        self.topological_sort(lambda vertex, _path: names.append(vertex.name))
        return names

    def stages(self) -> list[list[str]]:
        """Return task names grouped by stage, lowest stage first."""
        order = self.order()
        return group_by_rank(order, self.compute_stages())

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def print_graph(self) -> str:
        """Render the topological order as ``"A --> B --> C"``."""
        result = render_order(self.order())
        logger.debug(result)
        return result

    def print_pipeline(self) -> str:
        """Render the stages as an ASCII box diagram, one column per stage."""
        return render_pipeline(self.stages(), max((len(name) for name in self._vertices), default=0))

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def names(self) -> list[str]:
        """Task names in first-insertion order."""
        return list(self._vertices)

    @property
    def vertices(self) -> Mapping[str, Vertex]:
        """Read-only view of the registry, in first-insertion order."""
        return MappingProxyType(self._vertices)

    def get(self, name: str) -> Vertex | None:
        """Get the vertex for ``name`` if it is registered."""
        return self._vertices.get(name)

    def predecessors(self, name: str) -> list[str]:
        """Get direct dependencies of a task, in declaration order."""
        vertex = self._vertices.get(name)
        return [] if vertex is None else vertex.predecessor_names

    def successors(self, name: str) -> list[str]:
        """Get tasks that directly depend on ``name``, in insertion order."""
        return [v.name for v in self._vertices.values() if name in v.predecessors]

    def roots(self) -> list[Vertex]:
        """Get tasks with no dependencies."""
        return [v for v in self._vertices.values() if not v.predecessors]

    def leaves(self) -> list[Vertex]:
        """Get tasks nothing depends on."""
        return [v for v in self._vertices.values() if not v.has_successor]

    def ancestors(self, name: str) -> frozenset[str]:
        """Get all transitive dependencies of a task."""
        visited: set[str] = set()
        stack = self.predecessors(name)
        while stack:
            current = stack.pop()
            if current not in visited:
                visited.add(current)
                stack.extend(self.predecessors(current))
        return frozenset(visited)

    def descendants(self, name: str) -> frozenset[str]:
        """Get all tasks that transitively depend on ``name``."""
        visited: set[str] = set()
        stack = self.successors(name)
        while stack:
            current = stack.pop()
            if current not in visited:
                visited.add(current)
                stack.extend(self.successors(current))
        return frozenset(visited)

    def __len__(self) -> int:
        """Return the number of tasks in the graph."""
        return len(self._vertices)

    def __contains__(self, name: object) -> bool:
        """Check if a task is in the graph."""
        return name in self._vertices

    def __iter__(self) -> Iterator[Vertex]:
        """Iterate over vertices in first-insertion order."""
        return iter(self._vertices.values())
