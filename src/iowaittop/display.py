"""Plain-text frame rendering for iowaittop."""

from collections.abc import Iterable

import click

from iowaittop.models import Row

SEPARATOR = "---"
HEADER = "IOWAIT-COUNT  PID     NAME"
UNKNOWN_NAME = "???"


def format_row(row: Row) -> str:
    """Format one ranked process as a table line."""
    name = row.name if row.name else UNKNOWN_NAME
    return f"{row.delta:>12}  {row.pid:>6}  {name}"


def format_frame(rows: Iterable[Row]) -> list[str]:
    """Return the lines of one frame: separator, header, then one per row."""
    return [SEPARATOR, HEADER, *(format_row(row) for row in rows)]


def render_frame(rows: Iterable[Row]) -> None:
    """Write one frame to stdout."""
    for line in format_frame(rows):
        click.echo(line)
