"""
Count command: replay ballots and print per-voter participation.
"""

import json
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from ballot_stats.chain.registry import ContractRegistry
from ballot_stats.chain.source import LATEST
from ballot_stats.chain.web3_source import DEFAULT_URL, Web3Chain
from ballot_stats.core.clock import SystemClock
from ballot_stats.core.errors import BallotStatsError
from ballot_stats.logging_config import get_logger, setup_logging
from ballot_stats.replay import LoggingObserver, TallyConfig, run_audit
from ballot_stats.stats import build_report, report_digest
from ballot_stats.stats.report import BAND_CRITICAL, BAND_NORMAL, BAND_PERFECT, BAND_WARNING

from ..observer import ConsoleObserver
from ..period import parse_period

console = Console()
err_console = Console(stderr=True)

DEFAULT_CONTRACTS = "contracts/core.json"

BAND_STYLES = {
    BAND_CRITICAL: "bright_red",
    BAND_WARNING: "bright_yellow",
    BAND_NORMAL: "white",
    BAND_PERFECT: "bright_green",
}

# Replaced in tests with an in-memory chain.
connect_chain = Web3Chain.connect
clock = SystemClock()


def count_command(
    url: str = typer.Argument(DEFAULT_URL, envvar="BALLOT_STATS_RPC_URL", help="The JSON-RPC endpoint"),
    contracts: str = typer.Option(
        DEFAULT_CONTRACTS,
        "--contracts",
        "-c",
        envvar="BALLOT_STATS_CONTRACTS",
        help="JSON file with the contract addresses",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="More detailed output"),
    block: int = typer.Option(0, "--block", "-b", min=0, help="Ignore ballots before this block"),
    period: Optional[str] = typer.Option(
        None, "--period", "-p", help="Ignore ballots older than this, e.g. '30 days'"
    ),
    to_block: Optional[int] = typer.Option(None, "--to-block", min=0, help="Last block to replay"),
    show_all: bool = typer.Option(False, "--all", help="Include voters without resolved metadata"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Count ballots and votes, and print how many ballots each voter missed.

    Examples:
        ballot-stats count
        ballot-stats count http://127.0.0.1:8545 -c contracts/core.json
        ballot-stats count --period "30 days" --verbose
        ballot-stats count --block 1000000 --json
    """
    setup_logging(level="DEBUG" if verbose else None)
    logger = get_logger(__name__, trace_id=url)

    try:
        registry = ContractRegistry.from_json(contracts)
        min_time = clock.now() - parse_period(period) if period else None
        config = TallyConfig(min_block=block, min_time=min_time)
        observer = ConsoleObserver(err_console) if verbose else LoggingObserver()

        chain = connect_chain(url)
        result = run_audit(
            chain,
            registry,
            config=config,
            observer=observer,
            to_block=LATEST if to_block is None else to_block,
            clock=clock,
        )
        report = build_report(result.stats, include_unresolved=show_all)
        logger.info("Counted %d ballots for %d voters", result.ballots, len(result.stats))

        if json_output:
            output = report.to_dict()
            output.update(
                {
                    "success": True,
                    "digest": report_digest(report),
                    "ballots": result.ballots,
                    "skipped_ballots": result.skipped_ballots,
                    "events_applied": result.applied,
                    "events_dropped": result.dropped,
                    "unexpected_voters": [str(a) for a in result.unexpected_voters],
                    "node_stale": result.stale,
                }
            )
            print(json.dumps(output, indent=2))
        else:
            if verbose:
                err_console.print()
            table = Table(show_edge=False, box=None)
            table.add_column("Missed", justify="right")
            table.add_column("%", justify="right")
            table.add_column("Voting key")
            table.add_column("Mining key")
            table.add_column("Name")
            for line in report.lines:
                table.add_row(
                    line.ratio(),
                    f"{line.missed_percent:5.1f}%",
                    str(line.voting_address),
                    str(line.mining_key) if line.mining_key is not None else "-",
                    line.display_name or "-",
                    style=BAND_STYLES[line.band],
                )
            console.print(table)
            if result.stale and not verbose:
                err_console.print(
                    "[yellow]WARNING: The node is not fully synchronized. Stats may be inaccurate.[/yellow]"
                )

        raise typer.Exit(0)

    except BallotStatsError as e:
        if json_output:
            print(json.dumps({"error": str(e), "type": type(e).__name__}))
        else:
            err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)
