"""CLI entry point for layered-layout."""

import json
import logging
import sys

import click

from layered_layout import layout_document
from layered_layout.errors import LayoutError


@click.command()
@click.argument("input", required=False, type=click.Path(exists=True))
@click.option("--rankdir", "-r", "rankdir", type=str, default=None, help="Override rank direction (TB, BT, LR, RL)")
@click.option(
    "--ranker",
    "ranker",
    type=str,
    default=None,
    help="Override ranker (network-simplex, tight-tree, longest-path)",
)
@click.option("--align", "align", type=str, default=None, help="Pin x to one alignment (UL, UR, DL, DR)")
@click.option("--indent", "indent", type=int, default=2, help="JSON indentation (0 for compact output)")
@click.option("--output", "-o", "output", type=str, default=None, help="Write output to this file instead of stdout")
@click.option("--verbose", "-v", "verbose", is_flag=True, help="Log every pipeline stage to stderr")
def main(
    input: str | None,
    rankdir: str | None,
    ranker: str | None,
    align: str | None,
    indent: int,
    output: str | None,
    verbose: bool,
) -> None:
    """Lay out a JSON graph document and print it with coordinates."""
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
        doc = json.loads(text)
    except ValueError as e:
        click.echo(f"error: invalid JSON: {e}", err=True)
        sys.exit(1)

    try:
        result = layout_document(doc, rankdir=rankdir, ranker=ranker, align=align)
    except LayoutError as e:
        click.echo(f"error: {e}", err=True)
        sys.exit(1)

    rendered = json.dumps(result, indent=indent or None) + "\n"

    if output:
        try:
            with open(output, "w") as f:
                f.write(rendered)
        except OSError as e:
            click.echo(f"error: cannot write '{output}': {e}", err=True)
            sys.exit(1)
    else:
        click.echo(rendered, nl=False)


if __name__ == "__main__":
    main()
