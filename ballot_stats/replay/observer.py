"""
Structured trace events emitted by the replay.

The reducer never prints. It reports what it did to an observer, and the
caller decides how (or whether) to present it.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

KEY_ADDED = "key_added"
KEY_REMOVED = "key_removed"
KEY_MISSING = "key_missing"
KEY_ACTION_UNKNOWN = "key_action_unknown"
SET_REPLACED = "set_replaced"
PENDING_SET = "pending_set"
PENDING_RESOLVED = "pending_resolved"
EVENT_DROPPED = "event_dropped"
BALLOT_SKIPPED = "ballot_skipped"
BALLOT_COUNTED = "ballot_counted"
UNEXPECTED_VOTER = "unexpected_voter"
NODE_STALE = "node_stale"
ENRICHMENT_FAILED = "enrichment_failed"


@dataclass(frozen=True)
class TraceEvent:
    """
    One step of the replay.

    Fields:
        kind: One of the module-level kind constants
        block_number: Block of the event that caused the step, if any
        detail: Kind-specific values (addresses rendered as strings)
    """
    kind: str
    block_number: Optional[int] = None
    detail: Dict[str, Any] = field(default_factory=dict)


class ReplayObserver:
    """Base observer; ignores everything."""

    def emit(self, trace: TraceEvent) -> None:
        pass


NullObserver = ReplayObserver


class RecordingObserver(ReplayObserver):
    """Keeps every trace in memory."""

    def __init__(self) -> None:
        self.events: List[TraceEvent] = []

    def emit(self, trace: TraceEvent) -> None:
        self.events.append(trace)

    def kinds(self) -> List[str]:
        return [t.kind for t in self.events]

    def of_kind(self, kind: str) -> List[TraceEvent]:
        return [t for t in self.events if t.kind == kind]


class LoggingObserver(ReplayObserver):
    """Forwards traces to a logger at DEBUG level."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or logging.getLogger("ballot_stats.trace")

    def emit(self, trace: TraceEvent) -> None:
        self.logger.debug(
            "%s", trace.kind, extra={"block_number": trace.block_number, "detail": trace.detail}
        )
