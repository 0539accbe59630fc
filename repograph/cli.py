"""CLI entry point for Repograph."""

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Annotated, TypeVar

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from repograph.core.exceptions import RepographError
from repograph.core.graph import (
    CYCLE,
    Failure,
    FailureKind,
    GraphStore,
    analysis,
    get_default_facts_path,
    load_graph,
    pathfinding,
    traversal,
)
from repograph.core.graph.traversal import Direction
from repograph.core.portfolio import (
    build_cross_repo_graph,
    dependency_depth,
    find_dependency_versions,
    find_shared_dependencies,
    find_version_conflicts,
    get_all_dependents,
    impact_analysis,
    load_portfolio,
    suggest_upgrade_order,
)
from repograph.core.portfolio import find_cycles as find_repo_cycles
from repograph.manifests import scan_portfolio

T = TypeVar("T")

app = typer.Typer(
    name="repograph",
    help="Query call graphs and cross-repo dependency graphs.",
    no_args_is_help=True,
)
portfolio_app = typer.Typer(
    help="Analyze dependencies across a portfolio of repositories.",
    no_args_is_help=True,
)
app.add_typer(portfolio_app, name="portfolio")

console = Console()
err_console = Console(stderr=True)

_RISK_STYLES = {"low": "green", "medium": "yellow", "high": "red", "critical": "bold red"}

GraphPath = Annotated[
    Path | None,
    typer.Option(
        "--graph",
        "-g",
        envvar="REPOGRAPH_GRAPH",
        help="Facts file to load (default: .repograph/graph.json)",
    ),
]
PortfolioPath = Annotated[
    Path | None,
    typer.Option(
        "--portfolio", "-p", envvar="REPOGRAPH_PORTFOLIO", help="Portfolio JSON file"
    ),
]
ScanDir = Annotated[
    Path | None,
    typer.Option("--scan", "-s", help="Directory whose child repos are scanned for manifests"),
]
OutputJson = Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logs")] = False,
) -> None:
    """Query call graphs and cross-repo dependency graphs."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def get_graph(path: Path | None) -> GraphStore:
    """Load the facts file, exiting with an error message if it is unusable."""
    facts_path = path or get_default_facts_path(Path(".").resolve())
    try:
        return load_graph(facts_path)
    except RepographError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


def get_portfolio(portfolio: Path | None, scan: Path | None) -> GraphStore:
    """Build the cross-repo graph from a portfolio file or a scanned directory."""
    if portfolio is None and scan is None:
        err_console.print("[red]Error:[/red] pass --portfolio FILE or --scan DIR")
        raise typer.Exit(1)
    try:
        manifests = scan_portfolio(scan) if scan is not None else load_portfolio(portfolio)
    except RepographError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    return build_cross_repo_graph(manifests)


def unwrap(result: T | Failure, output_json: bool) -> T:
    """Return a successful query result, or report the failure and exit."""
    if isinstance(result, Failure):
        if output_json:
            print(json.dumps(result.to_dict()))
        else:
            console.print(f"[red]{result.kind.value}:[/red] {result.detail}")
        raise typer.Exit(1)
    return result


def node_to_dict(graph: GraphStore, node_id: str) -> dict[str, str]:
    """Convert a node id to a JSON-serializable summary."""
    node = graph.get_node(node_id)
    if node is None:
        return {"id": node_id, "name": node_id, "type": ""}
    return {"id": node.id, "name": node.name, "type": node.type}


def format_node(graph: GraphStore, node_id: str) -> str:
    """Format a node as `name (id)`, or just the id when they match."""
    node = graph.get_node(node_id)
    if node is None or node.name == node_id:
        return f"[cyan]{node_id}[/]"
    return f"[cyan]{node.name}[/] [dim]({node_id})[/]"


def _related(
    graph: GraphStore, node_id: str, direction: Direction, transitive: bool, depth: int | None
) -> list[str] | Failure:
    if transitive:
        return traversal.transitive(graph, node_id, analysis.CALL_EDGES, direction, depth)
    if node_id not in graph:
        return Failure(FailureKind.NODE_NOT_FOUND, node_id)
    step = graph.callees if direction == "outgoing" else graph.callers
    return list(dict.fromkeys(step(node_id)))


def _print_related(
    graph: GraphStore, node_id: str, related: list[str], key: str, output_json: bool
) -> None:
    if output_json:
        result = {
            "node": node_to_dict(graph, node_id),
            key: [node_to_dict(graph, r) for r in related],
        }
        print(json.dumps(result))
        return

    console.print(f"\n[bold]{format_node(graph, node_id)}[/]")
    if not related:
        console.print(f"  [dim]No {key} found[/]")
        return
    console.print(f"  [green]{key.capitalize()}:[/]")
    for node in related:
        console.print(f"    {format_node(graph, node)}")


@app.command()
def stats(graph_path: GraphPath = None, output_json: OutputJson = False) -> None:
    """Show node and edge counts."""
    result = get_graph(graph_path).stats()

    if output_json:
        print(json.dumps(result.to_dict()))
        return

    console.print(f"Nodes: {result.node_count}")
    for node_type, count in sorted(result.nodes_by_type.items()):
        console.print(f"  [dim]{node_type}:[/] {count}")
    console.print(f"Edges: {result.edge_count}")
    for edge_type, count in sorted(result.edges_by_type.items()):
        console.print(f"  [dim]{edge_type}:[/] {count}")


@app.command()
def callers(
    name: Annotated[str, typer.Argument(help="Function id")],
    transitive: Annotated[
        bool, typer.Option("--transitive", "-t", help="Include indirect callers")
    ] = False,
    depth: Annotated[
        int | None,
        typer.Option("--depth", "-d", help="Hops beyond direct callers (with --transitive)"),
    ] = None,
    graph_path: GraphPath = None,
    output_json: OutputJson = False,
) -> None:
    """Show what calls a function (who calls this?)."""
    graph = get_graph(graph_path)
    related = unwrap(_related(graph, name, "incoming", transitive, depth), output_json)
    _print_related(graph, name, related, "callers", output_json)


@app.command()
def callees(
    name: Annotated[str, typer.Argument(help="Function id")],
    transitive: Annotated[
        bool, typer.Option("--transitive", "-t", help="Include indirect callees")
    ] = False,
    depth: Annotated[
        int | None,
        typer.Option("--depth", "-d", help="Hops beyond direct callees (with --transitive)"),
    ] = None,
    graph_path: GraphPath = None,
    output_json: OutputJson = False,
) -> None:
    """Show what a function calls (what does this call?)."""
    graph = get_graph(graph_path)
    related = unwrap(_related(graph, name, "outgoing", transitive, depth), output_json)
    _print_related(graph, name, related, "callees", output_json)


@app.command()
def path(
    source: Annotated[str, typer.Argument(help="Function to start from")],
    target: Annotated[str, typer.Argument(help="Function to reach")],
    max_depth: Annotated[
        int, typer.Option("--depth", "-d", help="Maximum number of calls")
    ] = pathfinding.DEFAULT_MAX_DEPTH,
    graph_path: GraphPath = None,
    output_json: OutputJson = False,
) -> None:
    """Show the shortest call chain between two functions."""
    graph = get_graph(graph_path)
    chain = unwrap(pathfinding.call_chain(graph, source, target, max_depth), output_json)

    if output_json:
        print(json.dumps({"path": [node_to_dict(graph, n) for n in chain]}))
        return

    for i, node in enumerate(chain):
        prefix = "  " if i == 0 else "  └─ " if i == len(chain) - 1 else "  ├─ "
        console.print(f"{prefix}{format_node(graph, node)}")
    console.print(f"\n[dim]Calls: {len(chain) - 1}[/]")


@app.command()
def cycles(
    max_cycles: Annotated[
        int | None, typer.Option("--max", "-m", help="Stop after this many cycles")
    ] = None,
    graph_path: GraphPath = None,
    output_json: OutputJson = False,
) -> None:
    """Find recursive call cycles."""
    found = analysis.find_cycles(get_graph(graph_path), max_cycles)

    if output_json:
        print(json.dumps({"cycles": found}))
        return

    if not found:
        console.print("[green]No cycles found[/]")
        return
    for cycle in found:
        console.print(" → ".join(f"[cyan]{n}[/]" for n in [*cycle, cycle[0]]))
    console.print(f"\n[dim]Cycles: {len(found)}[/]")


@app.command()
def hot(
    limit: Annotated[
        int, typer.Option("--limit", "-n", help="Number of functions to show")
    ] = analysis.DEFAULT_HOT_PATH_LIMIT,
    graph_path: GraphPath = None,
    output_json: OutputJson = False,
) -> None:
    """Show the most connected functions."""
    ranked = analysis.hot_paths(get_graph(graph_path), limit)

    if output_json:
        print(json.dumps([asdict(r) for r in ranked]))
        return

    table = Table("Function", "Id", "Connectivity")
    for r in ranked:
        table.add_row(r.name, r.id, str(r.connectivity))
    console.print(table)


@app.command()
def depth(
    name: Annotated[str | None, typer.Argument(help="Function id (default: all)")] = None,
    graph_path: GraphPath = None,
    output_json: OutputJson = False,
) -> None:
    """Show how deep the call chain below a function goes."""
    graph = get_graph(graph_path)

    if name is not None:
        result = unwrap(analysis.call_depth(graph, name), output_json)
        if output_json:
            print(json.dumps({"node": node_to_dict(graph, name), "depth": result}))
        else:
            console.print(f"{format_node(graph, name)}: {result}")
        return

    depths = analysis.all_call_depths(graph)
    if output_json:
        print(json.dumps(depths))
        return

    table = Table("Function", "Depth")
    for node_id, value in sorted(depths.items()):
        shown = "[yellow]cycle[/]" if value == CYCLE else str(value)
        table.add_row(node_id, shown)
    console.print(table)


def _print_nodes(graph: GraphStore, node_ids: list[str], empty: str, output_json: bool) -> None:
    if output_json:
        print(json.dumps([node_to_dict(graph, n) for n in node_ids]))
        return
    if not node_ids:
        console.print(f"[dim]{empty}[/]")
        return
    for node_id in node_ids:
        console.print(f"  {format_node(graph, node_id)}")


@app.command("entry-points")
def entry_points(graph_path: GraphPath = None, output_json: OutputJson = False) -> None:
    """Show functions nothing calls."""
    graph = get_graph(graph_path)
    found = [n.id for n in analysis.entry_points(graph)]
    _print_nodes(graph, found, "No entry points found", output_json)


@app.command()
def leaves(graph_path: GraphPath = None, output_json: OutputJson = False) -> None:
    """Show functions that call nothing."""
    graph = get_graph(graph_path)
    found = [n.id for n in analysis.leaf_functions(graph)]
    _print_nodes(graph, found, "No leaf functions found", output_json)


@app.command()
def module(
    name: Annotated[str, typer.Argument(help="Module id")],
    graph_path: GraphPath = None,
    output_json: OutputJson = False,
) -> None:
    """Show internal vs. external calls of a module's functions."""
    graph = get_graph(graph_path)
    result = unwrap(analysis.module_call_stats(graph, name), output_json)

    if output_json:
        print(json.dumps(asdict(result)))
        return

    console.print(f"\n[bold]{format_node(graph, name)}[/]")
    console.print(f"  Functions: {result.function_count}")
    console.print(f"  Internal calls: {result.internal_calls}")
    console.print(f"  External calls: {result.external_calls}")
    console.print(f"  External dependencies: {result.external_dependencies}")
    console.print(f"  Cohesion: {result.cohesion:.2f}")


@portfolio_app.command()
def impact(
    repo: Annotated[str, typer.Argument(help="Repo that changes")],
    portfolio: PortfolioPath = None,
    scan: ScanDir = None,
    output_json: OutputJson = False,
) -> None:
    """Show which repos are affected by a change to a repo."""
    graph = get_portfolio(portfolio, scan)
    result = unwrap(impact_analysis(graph, repo), output_json)

    if output_json:
        print(json.dumps(result.to_dict()))
        return

    style = _RISK_STYLES[result.risk_level.value]
    console.print(f"\n[bold cyan]{repo}[/] risk: [{style}]{result.risk_level.value}[/]")
    console.print(f"  Directly affected: {', '.join(result.directly_affected) or '-'}")
    console.print(f"  Transitively affected: {', '.join(result.transitively_affected) or '-'}")


@portfolio_app.command()
def shared(
    min_count: Annotated[
        int, typer.Option("--min-count", "-m", help="Minimum number of repos")
    ] = 2,
    portfolio: PortfolioPath = None,
    scan: ScanDir = None,
    output_json: OutputJson = False,
) -> None:
    """Show dependencies used by several repos."""
    found = find_shared_dependencies(get_portfolio(portfolio, scan), min_count)

    if output_json:
        print(json.dumps([s.to_dict() for s in found]))
        return

    table = Table("Dependency", "Repos", "Used by")
    for s in found:
        table.add_row(s.dependency, str(s.count), ", ".join(s.used_by))
    console.print(table)


@portfolio_app.command()
def versions(
    portfolio: PortfolioPath = None,
    scan: ScanDir = None,
    output_json: OutputJson = False,
) -> None:
    """Show the version constraints declared for each dependency."""
    found = find_dependency_versions(get_portfolio(portfolio, scan))

    if output_json:
        print(json.dumps([v.to_dict() for v in found]))
        return

    for entry in found:
        console.print(f"[cyan]{entry.dependency}[/]")
        for d in entry.declarations:
            dev = " [dim](dev)[/]" if d.dev else ""
            console.print(f"  {d.repo}: {d.version}{dev}")


@portfolio_app.command()
def conflicts(
    portfolio: PortfolioPath = None,
    scan: ScanDir = None,
    output_json: OutputJson = False,
) -> None:
    """Show dependencies declared with different major versions."""
    found = find_version_conflicts(get_portfolio(portfolio, scan))

    if output_json:
        print(json.dumps([c.to_dict() for c in found]))
        return

    if not found:
        console.print("[green]No version conflicts[/]")
        return
    for conflict in found:
        majors = ", ".join(str(m) for m in conflict.majors)
        console.print(f"[yellow]{conflict.dependency}[/] [dim](majors {majors})[/]")
        for d in conflict.declarations:
            console.print(f"  {d.repo}: {d.version}")


@portfolio_app.command()
def order(
    portfolio: PortfolioPath = None,
    scan: ScanDir = None,
    output_json: OutputJson = False,
) -> None:
    """Show the order to upgrade repos in, dependencies first."""
    result = unwrap(suggest_upgrade_order(get_portfolio(portfolio, scan)), output_json)

    if output_json:
        print(json.dumps({"order": result}))
        return

    for i, repo in enumerate(result, 1):
        console.print(f"  {i}. [cyan]{repo}[/]")


@portfolio_app.command("cycles")
def portfolio_cycles(
    max_cycles: Annotated[
        int | None, typer.Option("--max", "-m", help="Stop after this many cycles")
    ] = None,
    portfolio: PortfolioPath = None,
    scan: ScanDir = None,
    output_json: OutputJson = False,
) -> None:
    """Find circular dependencies between repos."""
    found = find_repo_cycles(get_portfolio(portfolio, scan), max_cycles)

    if output_json:
        print(json.dumps({"cycles": found}))
        return

    if not found:
        console.print("[green]No circular dependencies[/]")
        return
    for cycle in found:
        console.print(" → ".join(f"[cyan]{n}[/]" for n in [*cycle, cycle[0]]))


@portfolio_app.command("depth")
def portfolio_depth(
    repo: Annotated[str, typer.Argument(help="Repo to measure")],
    portfolio: PortfolioPath = None,
    scan: ScanDir = None,
    output_json: OutputJson = False,
) -> None:
    """Show the longest chain of repo-to-repo dependencies below a repo."""
    result = unwrap(dependency_depth(get_portfolio(portfolio, scan), repo), output_json)

    if output_json:
        print(json.dumps({"repo": repo, "depth": result}))
    else:
        console.print(f"[cyan]{repo}[/]: {result}")


@portfolio_app.command()
def dependents(
    repo: Annotated[str, typer.Argument(help="Repo whose dependents to list")],
    include_dev: Annotated[
        bool, typer.Option("--include-dev", help="Follow dev dependencies too")
    ] = False,
    portfolio: PortfolioPath = None,
    scan: ScanDir = None,
    output_json: OutputJson = False,
) -> None:
    """Show every repo that depends on a repo, directly or not."""
    result = unwrap(
        get_all_dependents(get_portfolio(portfolio, scan), repo, include_dev), output_json
    )

    if output_json:
        print(json.dumps({"repo": repo, "dependents": result}))
        return

    if not result:
        console.print("[dim]No dependents[/]")
    for name in result:
        console.print(f"  [cyan]{name}[/]")


if __name__ == "__main__":
    app()
