"""CLI entry point for flowgraph-layout."""

import json
import logging
import sys

import click

from flowgraph_layout import layout_graph
from flowgraph_layout.config import LayoutConfig
from flowgraph_layout.ir.graph import GraphIR
from flowgraph_layout.strategy import LayoutStrategy


@click.command()
@click.argument("input", required=False, type=click.Path(exists=True))
@click.option("--algorithm", "-a", "algorithm", type=str, default=None, help="layered, constraint-layered or force-directed")
@click.option("--direction", "-d", "direction", type=str, default=None, help="Direction (TB, BT, LR, RL)")
@click.option("--ranksep", "ranksep", type=float, default=None, help="Spacing between ranks")
@click.option("--nodesep", "nodesep", type=float, default=None, help="Spacing between entities of a rank")
@click.option("--edge-type", "edge_type", type=str, default=None, help="Edge rendering hint passed to the output")
@click.option("--seed", "seed", type=int, default=None, help="Seed for the force-directed layout")
@click.option("--columns", "columns", type=int, default=None, help="Grid columns for declarations")
@click.option("--output", "-o", "output", type=str, default=None, help="Write output to this file instead of stdout")
@click.option("--indent", "indent", type=int, default=2, help="JSON indentation")
@click.option("--verbose", "-v", "verbose", is_flag=True, help="Log layout diagnostics to stderr")
def main(
    input: str | None,
    algorithm: str | None,
    direction: str | None,
    ranksep: float | None,
    nodesep: float | None,
    edge_type: str | None,
    seed: int | None,
    columns: int | None,
    output: str | None,
    indent: int,
    verbose: bool,
) -> None:
    """Lay out a call graph (JSON) and print node positions as JSON."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if input:
        try:
            with open(input) as f:
                text = f.read()
        except OSError as e:
            click.echo(f"error: cannot read '{input}': {e}", err=True)
            sys.exit(1)
    else:
        text = sys.stdin.read()

    try:
        payload = json.loads(text) if text.strip() else {}
    except json.JSONDecodeError as e:
        click.echo(f"error: invalid graph JSON: {e}", err=True)
        sys.exit(1)

    if not isinstance(payload, dict):
        click.echo("error: graph JSON must be an object with 'nodes' and 'edges'", err=True)
        sys.exit(1)

    strategy_data = dict(payload.get("strategy") or {})
    for key, value in (
        ("algorithm", algorithm),
        ("direction", direction),
        ("ranksep", ranksep),
        ("nodesep", nodesep),
        ("edgeType", edge_type),
    ):
        if value is not None:
            strategy_data[key] = value
    strategy = LayoutStrategy.from_dict(strategy_data)

    config = LayoutConfig(seed=seed)
    if columns is not None:
        config.declaration_columns = max(1, columns)

    try:
        gir = GraphIR.from_dict(payload, config)
    except ValueError as e:
        click.echo(f"error: {e}", err=True)
        sys.exit(1)

    result = layout_graph(gir, strategy, config)
    rendered = json.dumps(result.to_dict(), indent=indent)

    if output:
        try:
            with open(output, "w") as f:
                f.write(rendered)
        except OSError as e:
            click.echo(f"error: cannot write '{output}': {e}", err=True)
            sys.exit(1)
    else:
        click.echo(rendered)


if __name__ == "__main__":
    main()
