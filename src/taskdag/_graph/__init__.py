"""Graph module providing the task dependency graph.

This module contains:
- DependencyGraph: An incrementally built, always acyclic task graph
- depth_first_visit: Post-order walk used for ordering and cycle checks
- render_order / render_pipeline: Plain-text renderings
"""

from ._algorithms import CycleError, depth_first_visit, group_by_rank, longest_path_ranks
from ._dependency_graph import DependencyGraph, TaskNames, Vertex
from ._render import render_order, render_pipeline

__all__ = [
    "CycleError",
    "DependencyGraph",
    "TaskNames",
    "Vertex",
    "depth_first_visit",
    "group_by_rank",
    "longest_path_ranks",
    "render_order",
    "render_pipeline",
]
