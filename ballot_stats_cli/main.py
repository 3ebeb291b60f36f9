#!/usr/bin/env python3
"""
ballot-stats - governance participation audit

Main entrypoint for the ballot-stats command-line tool.
"""

import typer
from rich.console import Console
from rich.table import Table

from ballot_stats_cli.commands import count, events

app = typer.Typer(
    name="ballot-stats",
    help="Ballot participation statistics for POA governance contracts",
    add_completion=False,
)

console = Console()

app.command("count")(count.count_command)
app.command("events")(events.events_command)


@app.command()
def version():
    """Show version information."""
    from ballot_stats import __version__ as engine_version
    from ballot_stats_cli import __version__

    table = Table(show_header=False, box=None)
    table.add_row("[bold]ballot-stats CLI[/bold]", f"v{__version__}")
    table.add_row("Engine", f"v{engine_version}")
    table.add_row("Protocols", "v1, v2")

    console.print(table)


def main():
    """Main entrypoint."""
    app()


if __name__ == "__main__":
    main()
