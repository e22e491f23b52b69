import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from taskdag._graph import CycleError, DependencyGraph
from taskdag._io import PipelineFileError, export_pipeline, load_pipeline

from .config import ConfigError, get_config
from .graph_query import get_dependency_tree
from .graph_render import render_stage_table, render_summary, render_tree

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)
# Console for stdout (results)
out_console = Console()

PipelineArgument = Annotated[
    Path | None,
    typer.Argument(help="Path to pipeline TOML file (defaults to the pipeline configured in pyproject.toml)"),
]


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output"),
) -> None:
    """Order and visualize task pipelines."""
    log_level = logging.DEBUG if verbose else logging.INFO

    # Configure rich logging handler to output to stderr
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                show_time=False,
                show_path=verbose,
                rich_tracebacks=True,
            ),
        ],
    )


def _resolve_pipeline_path(path: Path | None) -> Path:
    """Use the given path, or fall back to the configured pipeline."""
    if path is not None:
        return path

    try:
        config = get_config()
    except ConfigError as e:
        err_console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    if config.pipeline is None:
        err_console.print("[red]✗ No pipeline given and no \\[tool.taskdag].pipeline configured[/red]")
        raise typer.Exit(code=1)

    logger.debug(f"Using pipeline from configuration: {config.pipeline}")
    return config.pipeline


def _load_graph(path: Path | None) -> tuple[Path, DependencyGraph]:
    """Load the pipeline, reporting errors and exiting with code 1 on failure."""
    pipeline_path = _resolve_pipeline_path(path)
    try:
        graph = load_pipeline(pipeline_path)
    except PipelineFileError as e:
        err_console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e
    except CycleError as e:
        err_console.print(f"[red]✗ Invalid dependencies in {pipeline_path}: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e
    return pipeline_path, graph


@app.command()
def order(pipeline: PipelineArgument = None) -> None:
    """Print the tasks in execution order."""
    _, graph = _load_graph(pipeline)
    out_console.print(graph.print_graph(), markup=False, highlight=False, soft_wrap=True)


@app.command("pipeline")
def pipeline_command(pipeline: PipelineArgument = None) -> None:
    """Print the stages of the pipeline as a box diagram."""
    _, graph = _load_graph(pipeline)
    out_console.print(graph.print_pipeline(), markup=False, highlight=False, soft_wrap=True)


@app.command()
def stages(pipeline: PipelineArgument = None) -> None:
    """Show the tasks that can run in parallel at each stage."""
    _, graph = _load_graph(pipeline)
    render_stage_table(graph, out_console)


@app.command()
def check(pipeline: PipelineArgument = None) -> None:
    """Check that a pipeline file is valid and free of cycles."""
    err_console.print()
    pipeline_path = _resolve_pipeline_path(pipeline)
    err_console.print(f"[cyan]Loading pipeline from:[/cyan] {pipeline_path}")
    _, graph = _load_graph(pipeline_path)
    err_console.print()

    render_summary(graph, err_console, title=f"Pipeline: {pipeline_path.name}")

    err_console.print()
    err_console.print("[green]✓ Pipeline is valid[/green]")
    err_console.print()


@app.command()
def tree(
    task: Annotated[str, typer.Argument(help="Task whose dependencies are shown")],
    pipeline: PipelineArgument = None,
    *,
    invert: Annotated[
        bool,
        typer.Option("--invert", help="Show the tasks that depend on TASK instead"),
    ] = False,
    depth: Annotated[
        int | None,
        typer.Option("--depth", min=0, help="Maximum depth to show"),
    ] = None,
) -> None:
    """Show the dependency tree of a task.

    Each task is listed once; a dependency shared by several tasks appears
    under the first of them.
    """
    _, graph = _load_graph(pipeline)
    try:
        tree_node = get_dependency_tree(graph, task, invert=invert, max_depth=depth)
    except KeyError as e:
        err_console.print(f"[red]Error: Task not found: {escape(task)}[/red]")
        raise typer.Exit(code=1) from e
    render_tree(tree_node, out_console)


@app.command()
def init(
    *,
    output: Annotated[
        Path,
        typer.Option("-o", "--output", help="Path to output pipeline TOML file"),
    ],
) -> None:
    """Generate a sample pipeline file."""
    err_console.print()

    graph = DependencyGraph()
    graph.insert_edges_for_task("checkout", {"command": "git pull"})
    graph.insert_edges_for_task("lint", {"command": "ruff check ."}, run_after="checkout")
    graph.insert_edges_for_task("build", {"command": "uv build"}, run_after="checkout")
    graph.insert_edges_for_task("test", {"command": "pytest"}, run_after=["build", "lint"])
    graph.insert_edges_for_task("publish", {"command": "uv publish"}, run_after="test")

    err_console.print(f"[cyan]Writing sample pipeline to:[/cyan] {output}")
    export_pipeline(graph, output)

    err_console.print()
    err_console.print("[green]✓ Sample pipeline generated[/green]")
    err_console.print()


def main() -> None:
    app()
