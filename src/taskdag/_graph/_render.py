"""Plain-text renderings of a dependency graph."""

from collections.abc import Sequence

ORDER_SEPARATOR = " --> "
STAGE_ARROW = " -> "
_STAGE_GAP = " " * len(STAGE_ARROW)


def render_order(names: Sequence[str]) -> str:
    """Join task names in execution order.

    Example:
        >>> render_order(["a", "b", "c"])
        'a --> b --> c'

    """
    return ORDER_SEPARATOR.join(names)


def _cell(name: str | None, width: int) -> tuple[str, str, str]:
    if name is None:
        blank = " " * (width + 2)
        return blank, blank, blank
    border = "+" + "-" * width + "+"
    return border, "|" + f" {name}".ljust(width) + "|", border


def render_pipeline(stages: Sequence[Sequence[str]], name_length: int) -> str:
    """Render stages as columns of boxed task names.

    The first row holds the first task of every stage, linked by arrows.
    Further rows stack the remaining tasks of each stage below it, leaving a
    blank cell where a stage has run out of tasks.

    Args:
        stages: Task names grouped by stage, lowest stage first.
        name_length: Length of the longest task name in the graph. Every
            cell is two characters wider than this.

    Returns:
        The diagram with trailing whitespace stripped from every line, or an
        empty string when there are no stages.

    Example:
        >>> print(render_pipeline([["a"], ["b", "c"]], 1))
        +---+    +---+
        | a | -> | b |
        +---+    +---+
                 +---+
                 | c |
                 +---+

    """
    if not stages:
        return ""

    width = name_length + 2
    depth = max(len(stage) for stage in stages)
    lines: list[str] = []

    for row in range(depth):
        cells = [_cell(stage[row] if row < len(stage) else None, width) for stage in stages]
        for line in range(3):
            # Arrows only link the first task of each stage
            joiner = STAGE_ARROW if row == 0 and line == 1 else _STAGE_GAP
            lines.append(joiner.join(cell[line] for cell in cells).rstrip())

    return "\n".join(lines)
