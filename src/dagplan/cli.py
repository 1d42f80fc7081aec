"""Command-line interface for dagplan."""

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import DagplanConfig, load_config
from .dependency.options import SortOptions
from .dependency.strdag import StringDAG
from .dependency.topology import Topology
from .models.definition import load_definition
from .observability import LogContext, configure_logging, get_logger
from .utils.exceptions import DAGError

app = typer.Typer(
    name="dagplan",
    help="dagplan - parallelism-aware execution plans for dependency graphs",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)


def _setup(config_file: Path | None, log_level: str | None, json_logs: bool) -> DagplanConfig:
    """Load configuration and configure logging; exit with code 1 on bad config."""
    try:
        config = load_config(config_file)
    except (FileNotFoundError, ValueError, TypeError) as e:
        console.print(f"[red]ERROR: Invalid configuration:[/red] {escape(str(e))}")
        raise typer.Exit(code=1) from e

    configure_logging(
        level=log_level or config.logging.level,
        json_logs=json_logs or config.logging.json_logs,
        log_file=config.logging.file,
    )
    return config


def _load_graph(graph_file: Path) -> StringDAG:
    """Load a definition file into a graph; exit with code 1 on failure."""
    try:
        return load_definition(graph_file).to_dag()
    except DAGError as e:
        console.print(f"[red]ERROR: Could not load graph:[/red] {escape(str(e))}")
        raise typer.Exit(code=1) from e


def _render_plan(topology: Topology) -> None:
    """Print the plan as a table followed by the one-line form."""
    table = Table(title="Execution Plan")
    table.add_column("Level", justify="right", style="cyan")
    table.add_column("Nodes (parallel)", style="green")
    table.add_column("Count", justify="right")

    for index, level in enumerate(topology.keys()):
        table.add_row(str(index), escape(", ".join(str(k) for k in level)), str(len(level)))

    console.print(table)
    console.print(f"\n[bold]Plan:[/bold] {escape(str(topology))}")


@app.command()
def plan(
    graph_file: Path = typer.Argument(..., help="Graph definition file (YAML)", exists=True),
    only: list[str] | None = typer.Option(
        None, "--only", "-o", help="Restrict the plan to this node (repeatable)"
    ),
    with_dependencies: bool = typer.Option(
        False, "--with-dependencies", help="Pull unselected dependencies into the plan"
    ),
    without_dependencies: bool = typer.Option(
        False, "--without-dependencies", help="Leave unselected dependencies out of the plan"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print levels as JSON"),
    config_file: Path | None = typer.Option(None, "--config", "-c", help="Configuration file"),
    log_level: str | None = typer.Option(
        None, "--log-level", help="Log verbosity: TRACE, DEBUG, INFO, WARNING, ERROR"
    ),
    json_logs: bool = typer.Option(False, "--json-logs", help="Render logs as JSON"),
) -> None:
    """
    Compute the leveled execution plan of a graph.

    Nodes on the same level do not depend on each other and can run in parallel.

    Examples:
        dagplan plan services.yaml
        dagplan plan services.yaml --only db --only mesh --with-dependencies
        dagplan plan services.yaml --json
    """
    if with_dependencies and without_dependencies:
        console.print(
            "[red]ERROR:[/red] --with-dependencies and --without-dependencies "
            "are mutually exclusive"
        )
        raise typer.Exit(code=2)

    config = _setup(config_file, log_level, json_logs)
    graph = _load_graph(graph_file)

    if with_dependencies or without_dependencies:
        policy = SortOptions(
            with_dependencies=with_dependencies, without_dependencies=without_dependencies
        )
    else:
        policy = config.plan.sort_options()

    with LogContext(graph=str(graph_file)):
        try:
            topology = graph.plan(policy, only=list(only or []))
        except DAGError as e:
            logger.debug("Planning failed", error=str(e), error_type=type(e).__name__)
            console.print(f"[red]ERROR: Planning failed:[/red] {escape(str(e))}")
            raise typer.Exit(code=1) from e

    if as_json:
        typer.echo(json.dumps(topology.keys()))
        return

    _render_plan(topology)


@app.command()
def dot(
    graph_file: Path = typer.Argument(..., help="Graph definition file (YAML)", exists=True),
    output_file: Path | None = typer.Option(
        None, "--output", "-o", help="Output file (default: stdout)"
    ),
    config_file: Path | None = typer.Option(None, "--config", "-c", help="Configuration file"),
    log_level: str | None = typer.Option(
        None, "--log-level", help="Log verbosity: TRACE, DEBUG, INFO, WARNING, ERROR"
    ),
    json_logs: bool = typer.Option(False, "--json-logs", help="Render logs as JSON"),
) -> None:
    """
    Export the graph in Graphviz DOT format.

    Examples:
        dagplan dot services.yaml | dot -Tpng -o services.png
        dagplan dot services.yaml -o services.dot
    """
    _setup(config_file, log_level, json_logs)
    graph = _load_graph(graph_file)

    if output_file is None:
        typer.echo(graph.to_dot(), nl=False)
        return

    output_file.parent.mkdir(parents=True, exist_ok=True)
    with open(output_file, "w", encoding="utf-8") as f:
        graph.write_dot_to(f)
    console.print(f"[green]Wrote diagram to {output_file}[/green]")


@app.command()
def validate(
    graph_file: Path = typer.Argument(..., help="Graph definition file (YAML)", exists=True),
    config_file: Path | None = typer.Option(None, "--config", "-c", help="Configuration file"),
    log_level: str | None = typer.Option(
        None, "--log-level", help="Log verbosity: TRACE, DEBUG, INFO, WARNING, ERROR"
    ),
    json_logs: bool = typer.Option(False, "--json-logs", help="Render logs as JSON"),
) -> None:
    """
    Check a graph for undefined nodes and cycles.

    Examples:
        dagplan validate services.yaml
    """
    _setup(config_file, log_level, json_logs)
    graph = _load_graph(graph_file)

    try:
        topology = graph.sort()
    except DAGError as e:
        console.print(f"[red]ERROR: Validation failed:[/red] {escape(str(e))}")
        raise typer.Exit(code=1) from e

    console.print(
        f"[green]Validation successful![/green] {len(graph)} node(s) in {len(topology)} level(s)"
    )


if __name__ == "__main__":
    app()
