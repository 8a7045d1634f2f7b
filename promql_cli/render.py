"""Write query tables to the terminal with rich."""

import sys

from rich import box
from rich.console import Console
from rich.table import Table as RichTable
from rich.text import Text

from promql_cli.table import Table


def make_console(out) -> Console:
    # Label values may contain "[...]", never treat cells as markup
    return Console(file=out, highlight=False, markup=False, emoji=False)


def to_rich(table: Table) -> RichTable:
    rich_table = RichTable(box=box.ASCII, show_header=True, header_style=None, show_edge=True)
    for name in table.header:
        rich_table.add_column(Text(name), justify="left", no_wrap=True)
    for row in table.rows:
        rich_table.add_row(*(Text(cell) for cell in row))
    return rich_table


def render_table(table: Table, console: Console) -> None:
    """Print a table and its row count, or "Empty result"."""
    if not table.rows:
        console.print("Empty result\n")
        return
    rich_table = to_rich(table)
    # Never crop cells to the terminal width
    natural = console.measure(rich_table, options=console.options.update(max_width=sys.maxsize))
    console.width = max(console.width, natural.maximum)
    console.print(rich_table, crop=False)
    console.print(f"{len(table.rows)} values in result\n")
