"""Graph algorithms for dependency graph operations."""

from collections.abc import Callable, Hashable, Iterable, Mapping, MutableSet


class CycleError(ValueError):
    """Raised when a dependency would close, or already closes, a cycle.

    Attributes:
        path: Names along the offending walk, ending with the name that
            closes the cycle.

    """

    def __init__(self, path: Iterable[str]) -> None:
        self.path = tuple(path)
        super().__init__(f"cycle detected: {' --> '.join(self.path)}")


def depth_first_visit[T: Hashable](
    start: T,
    predecessors: Callable[[T], Iterable[T]],
    callback: Callable[[T, tuple[T, ...]], None],
    visited: MutableSet[T],
) -> None:
    """Walk the predecessors of ``start`` depth-first and emit nodes in post-order.

    A node is passed to ``callback`` only after every one of its transitive
    predecessors has been emitted. Nodes already in ``visited`` are skipped,
    so sharing one set across several calls emits each node exactly once.

    Args:
        start: Node to start the walk from.
        predecessors: Returns the direct dependencies of a node, in order.
        callback: Called as ``callback(node, path)`` where ``path`` is the
            active walk from ``start`` down to ``node`` (inclusive).
        visited: Nodes already emitted. Updated in place.

    Raises:
        CycleError: If the walk meets a node that is still on the active path.

    Example:
        >>> preds = {"a": [], "b": ["a"], "c": ["b"]}
        >>> order = []
        >>> depth_first_visit("c", preds.__getitem__, lambda n, _: order.append(n), set())
        >>> order
        ['a', 'b', 'c']

    """
    if start in visited:
        return

    path: list[T] = [start]
    on_stack: set[T] = {start}
    visited.add(start)
    # One pending-predecessor iterator per node on the active path
    frames = [iter(predecessors(start))]

    while frames:
        for node in frames[-1]:
            if node in on_stack:
                raise CycleError(str(n) for n in [*path, node])
            if node in visited:
                continue
            visited.add(node)
            on_stack.add(node)
            path.append(node)
            frames.append(iter(predecessors(node)))
            break
        else:
            frames.pop()
            callback(path[-1], tuple(path))
            on_stack.discard(path.pop())


def longest_path_ranks[T: Hashable](
    nodes: Iterable[T],
    predecessors: Callable[[T], Iterable[T]],
) -> dict[T, int]:
    """Rank every node by the length of the longest dependency chain ending at it.

    Nodes without predecessors get rank 1; every other node gets one more than
    the highest rank among its predecessors.

    Args:
        nodes: All nodes to rank. Predecessors outside this collection are
            ranked as well.
        predecessors: Returns the direct dependencies of a node.

    Returns:
        Mapping from node to its 1-based rank, in post-order.

    Raises:
        CycleError: If the graph contains a cycle.

    """
    ranks: dict[T, int] = {}

    def assign(node: T, _path: tuple[T, ...]) -> None:
        ranks[node] = 1 + max((ranks[p] for p in predecessors(node)), default=0)

    visited: set[T] = set()
    for node in nodes:
        depth_first_visit(node, predecessors, assign, visited)
    return ranks


def group_by_rank[T: Hashable](order: Iterable[T], ranks: Mapping[T, int]) -> list[list[T]]:
    """Group nodes into stages by rank, keeping ``order`` inside each stage.

    Args:
        order: Nodes in topological order.
        ranks: Rank of every node in ``order``.

    Returns:
        One list per rank, lowest rank first.

    """
    groups: dict[int, list[T]] = {}
    for node in order:
        groups.setdefault(ranks[node], []).append(node)
    return [groups[rank] for rank in sorted(groups)]
