"""
Verbose trace output for the terminal.
"""

from rich.console import Console
from rich.markup import escape

from ballot_stats.replay import observer as kinds
from ballot_stats.replay.observer import ReplayObserver, TraceEvent


def _short_list(values) -> str:
    return ", ".join(f"[cyan]{escape(v)}[/cyan]" for v in values)


class ConsoleObserver(ReplayObserver):
    """Prints one line per replay step, like `• #123 BallotCreated {...}`."""

    def __init__(self, console: Console) -> None:
        self.console = console

    def emit(self, trace: TraceEvent) -> None:
        d = trace.detail
        prefix = f"• [bold]#{trace.block_number}[/bold]" if trace.block_number is not None else "•"
        k = trace.kind
        if k == kinds.SET_REPLACED:
            msg = f"ChangeFinalized {{ new_set: {_short_list(d['new_set'])} }}"
        elif k == kinds.PENDING_SET:
            msg = (
                f"InitiateChange {{ parent_hash: {d['parent_hash'][:10]}…, "
                f"new_set: {_short_list(d['candidate_set'])} }}"
            )
        elif k == kinds.PENDING_RESOLVED:
            msg = f"  previous candidate set resolved to: {_short_list(d['new_set'])}"
        elif k == kinds.KEY_ADDED:
            msg = f"VotingKeyChanged {{ added: [cyan]{d['key']}[/cyan] }}"
        elif k == kinds.KEY_REMOVED:
            msg = f"VotingKeyChanged {{ removed: [cyan]{d['key']}[/cyan] }}"
        elif k == kinds.KEY_MISSING:
            msg = f"VotingKeyChanged {{ removed: [cyan]{d['key']}[/cyan] }} [dim](was not a voter)[/dim]"
        elif k == kinds.KEY_ACTION_UNKNOWN:
            msg = f"[yellow]VotingKeyChanged with unknown action {escape(repr(d['action']))}[/yellow]"
        elif k == kinds.BALLOT_SKIPPED:
            msg = f"Ballot {d['ballot_id']} too old; skipping"
        elif k == kinds.BALLOT_COUNTED:
            msg = (
                f"BallotCreated {{ id: {d['ballot_id']}, ballot_type: {d['ballot_type']}, "
                f"creator: {d['creator']} }} ({d['version']}) "
                f"voted: {len(d['voted'])}/{d['eligible']}"
            )
        elif k == kinds.UNEXPECTED_VOTER:
            msg = f"  [yellow]Unexpected voter {d['voter']}[/yellow]"
        elif k == kinds.EVENT_DROPPED:
            msg = f"[dim]Event from unregistered contract {d['address']} dropped[/dim]"
        elif k == kinds.NODE_STALE:
            msg = "[yellow]WARNING: The node is not fully synchronized. Stats may be inaccurate.[/yellow]"
        elif k == kinds.ENRICHMENT_FAILED:
            msg = f"[red]{escape(d['reason'])}[/red]"
        else:
            msg = escape(f"{k} {d}")
        self.console.print(f"{prefix} {msg}", highlight=False)
