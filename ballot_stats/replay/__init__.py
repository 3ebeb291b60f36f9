"""
Replay of governance events into voter statistics.

Replay must be deterministic: the same stream always produces the same
stats and the same report.
"""

from .classifier import EventClassifier, EventDecoder, STREAM_DECODERS, VOTE_DECODERS, classify
from .voters import VoterSetTracker
from .tally import BallotOutcome, BallotTally, TallyConfig
from .enricher import Enricher, EnrichmentSummary
from .observer import (
    LoggingObserver,
    NullObserver,
    RecordingObserver,
    ReplayObserver,
    TraceEvent,
)
from .runner import MAX_BLOCK_AGE, AuditResult, check_synced, run_audit

__all__ = [
    "EventClassifier",
    "EventDecoder",
    "STREAM_DECODERS",
    "VOTE_DECODERS",
    "classify",
    "VoterSetTracker",
    "BallotOutcome",
    "BallotTally",
    "TallyConfig",
    "Enricher",
    "EnrichmentSummary",
    "LoggingObserver",
    "NullObserver",
    "RecordingObserver",
    "ReplayObserver",
    "TraceEvent",
    "MAX_BLOCK_AGE",
    "AuditResult",
    "check_synced",
    "run_audit",
]
