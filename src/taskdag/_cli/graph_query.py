"""Graph query functions for CLI commands.

These are the functional core - no I/O, no Rich rendering.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from taskdag._graph import DependencyGraph


@dataclass(slots=True)
class TreeNode:
    """A node in a dependency tree for rendering."""

    name: str
    children: list[TreeNode] = field(default_factory=list)

    def walk(self) -> Iterator[TreeNode]:
        """Yield this node and all descendants in pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


def get_dependency_tree(
    graph: DependencyGraph,
    name: str,
    *,
    invert: bool = False,
    max_depth: int | None = None,
) -> TreeNode:
    """Build a dependency tree for visualization.

    Each task appears at most once; a dependency shared by several tasks is
    listed under the first one that reaches it.

    Args:
        graph: The graph containing the task.
        name: The root task of the tree.
        invert: If False, show what the task depends on.
                If True, show what depends on the task.
        max_depth: Maximum depth to traverse (None for unlimited).

    Returns:
        TreeNode representing the dependency tree.

    Raises:
        KeyError: If the task is not found.

    """
    if name not in graph:
        msg = f"Task not found: {name}"
        raise KeyError(msg)

    neighbors = graph.successors if invert else graph.predecessors

    root = TreeNode(name=name)
    visited: set[str] = {name}
    stack = [(root, 0, iter(neighbors(name)))]

    while stack:
        node, depth, pending = stack[-1]
        if max_depth is not None and depth >= max_depth:
            stack.pop()
            continue
        for neighbor in pending:
            if neighbor not in visited:
                visited.add(neighbor)
                child = TreeNode(name=neighbor)
                node.children.append(child)
                stack.append((child, depth + 1, iter(neighbors(neighbor))))
                break
        else:
            stack.pop()

    return root
