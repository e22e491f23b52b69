"""Rich rendering utilities for graph commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

if TYPE_CHECKING:
    from rich.console import Console

    from taskdag._graph import DependencyGraph

    from .graph_query import TreeNode


def render_stage_table(graph: DependencyGraph, console: Console) -> None:
    """Render the stages of a graph as a Rich table.

    Args:
        graph: Graph to render.
        console: Rich Console to output to.

    """
    stages = graph.stages()
    if not stages:
        console.print("[dim]Pipeline has no tasks[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Stage", justify="right", style="bold")
    table.add_column("Tasks")
    table.add_column("Count", justify="right", style="yellow")

    for number, names in enumerate(stages, start=1):
        table.add_row(str(number), ", ".join(escape(name) for name in names), str(len(names)))

    console.print(table)


def render_summary(graph: DependencyGraph, console: Console, title: str) -> None:
    """Render a summary panel with task, edge and stage counts.

    Args:
        graph: Graph to summarize.
        console: Rich Console to output to.
        title: Panel title.

    """
    edge_count = sum(len(vertex.predecessors) for vertex in graph)
    stages = graph.stages()

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Tasks", justify="right")
    table.add_column("Dependencies", justify="right")
    table.add_column("Stages", justify="right")
    table.add_column("Widest stage", justify="right")
    table.add_row(
        str(len(graph)),
        str(edge_count),
        str(len(stages)),
        str(max((len(names) for names in stages), default=0)),
    )

    console.print(
        Panel(
            table,
            title=f"[bold]{escape(title)}[/bold]",
            subtitle=f"[dim]{len(graph.roots())} entry tasks, {len(graph.leaves())} exit tasks[/dim]",
            border_style="cyan",
        ),
    )


def render_tree(tree_node: TreeNode, console: Console) -> None:
    """Render a dependency tree using Rich Tree.

    Args:
        tree_node: TreeNode root to render.
        console: Rich Console to output to.

    """
    rich_tree = Tree(f"[bold]{escape(tree_node.name)}[/bold]")
    stack = [(rich_tree, tree_node)]
    while stack:
        parent, node = stack.pop()
        for child in node.children:
            stack.append((parent.add(escape(child.name)), child))
    console.print(rich_tree)
