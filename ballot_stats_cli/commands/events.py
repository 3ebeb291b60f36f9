"""
Events command: list the classified governance event stream.
"""

import json
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.table import Table

from ballot_stats.chain.registry import ContractRegistry
from ballot_stats.chain.source import LATEST
from ballot_stats.chain.web3_source import DEFAULT_URL
from ballot_stats.core.errors import BallotStatsError
from ballot_stats.core.events import (
    BallotCreated,
    DomainEvent,
    FullSetReplace,
    KeyChange,
    PendingSetInitiated,
)
from ballot_stats.logging_config import setup_logging
from ballot_stats.replay import EventClassifier

from . import count

console = Console()
err_console = Console(stderr=True)


def _summary(event: DomainEvent) -> str:
    if isinstance(event, KeyChange):
        return f"{event.action} {event.key}"
    if isinstance(event, FullSetReplace):
        return f"{len(event.new_set)} voters"
    if isinstance(event, PendingSetInitiated):
        return f"{len(event.candidate_set)} candidates"
    if isinstance(event, BallotCreated):
        return f"id={event.ballot_id} type={event.ballot_type} creator={event.creator}"
    return ""


def events_command(
    url: str = typer.Argument(DEFAULT_URL, envvar="BALLOT_STATS_RPC_URL", help="The JSON-RPC endpoint"),
    contracts: str = typer.Option(
        count.DEFAULT_CONTRACTS,
        "--contracts",
        "-c",
        envvar="BALLOT_STATS_CONTRACTS",
        help="JSON file with the contract addresses",
    ),
    to_block: Optional[int] = typer.Option(None, "--to-block", min=0, help="Last block to list"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    List ballot and voter-set events in stream order, without tallying.

    Events decoded correctly but emitted by unregistered contracts are listed
    as dropped.

    Examples:
        ballot-stats events
        ballot-stats events --to-block 5000000 --json
    """
    setup_logging()
    try:
        registry = ContractRegistry.from_json(contracts)
        chain = count.connect_chain(url)
        classifier = EventClassifier(registry)
        raws = chain.query(classifier.topic_filter(), 0, LATEST if to_block is None else to_block)

        rows: List[Dict[str, Any]] = []
        for raw in raws:
            event = classifier.classify(raw)
            rows.append(
                {
                    "block_number": raw.block_number,
                    "log_index": raw.log_index,
                    "contract": str(raw.address),
                    "type": event.type if event is not None else None,
                    "version": event.version if event is not None else None,
                    "summary": _summary(event) if event is not None else "dropped",
                }
            )

        if json_output:
            print(json.dumps({"events": rows, "count": len(rows), "dropped": classifier.dropped}, indent=2))
        else:
            table = Table(title="Governance events")
            table.add_column("Block", style="cyan", justify="right")
            table.add_column("Type", style="green")
            table.add_column("Version")
            table.add_column("Contract", style="yellow")
            table.add_column("Details")
            for row in rows:
                table.add_row(
                    str(row["block_number"]),
                    row["type"] or "[dim]-[/dim]",
                    row["version"] or "-",
                    row["contract"],
                    row["summary"],
                )
            console.print(table)
            console.print(f"\n[bold]Total events:[/bold] {len(rows)} ([dim]{classifier.dropped} dropped[/dim])")

        raise typer.Exit(0)

    except BallotStatsError as e:
        if json_output:
            print(json.dumps({"error": str(e), "type": type(e).__name__}))
        else:
            err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)
