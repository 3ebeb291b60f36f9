"""
Replay runner: reconstruct voter sets and tally ballots from the log stream.

The stream is consumed strictly in block order. Any transport or decoding
failure aborts the whole run; no partial report is ever produced.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..chain.registry import ContractRegistry
from ..chain.source import LATEST, BlockRef, Chain
from ..core.address import Address
from ..core.clock import SystemClock
from ..core.errors import EmptyStreamError
from ..core.events import BallotCreated, FullSetReplace, KeyChange, PendingSetInitiated
from ..core.reducer import Reducer
from ..stats.aggregator import StatsAggregator
from .classifier import EventClassifier
from .enricher import Enricher, EnrichmentSummary
from .observer import EVENT_DROPPED, NODE_STALE, NullObserver, ReplayObserver, TraceEvent
from .tally import BallotTally, TallyConfig
from .voters import VoterSetTracker

logger = logging.getLogger(__name__)

# The maximum age in seconds of the latest block.
MAX_BLOCK_AGE = 60 * 60


@dataclass
class AuditResult:
    """
    Result of an audit run.

    Fields:
        stats: Per-voter statistics (frozen when enrichment ran)
        voters: Voter set after the last event, in address order
        applied: Number of domain events applied
        dropped: Events decoded but emitted by unregistered contracts
        ballots: Number of ballots counted
        skipped_ballots: Ballots filtered out by TallyConfig
        unexpected_voters: Voters inserted because they voted while untracked
        enrichment: Enrichment summary, None when enrichment was disabled
        stale: True when the node's latest block looked outdated
    """
    stats: StatsAggregator
    voters: Tuple[Address, ...] = ()
    applied: int = 0
    dropped: int = 0
    ballots: int = 0
    skipped_ballots: int = 0
    unexpected_voters: List[Address] = field(default_factory=list)
    enrichment: Optional[EnrichmentSummary] = None
    stale: bool = False


def check_synced(chain: Chain, clock=None, observer: Optional[ReplayObserver] = None) -> bool:
    """
    Warn if the node's latest block is older than MAX_BLOCK_AGE.

    Returns:
        True when the node looks stale
    """
    clock = clock or SystemClock()
    observer = observer or NullObserver()
    latest = chain.latest_block()
    latest_ts = chain.block_timestamp(latest)
    logger.debug("Latest block #%d at %d", latest, latest_ts)
    if latest_ts < clock.now() - MAX_BLOCK_AGE:
        logger.warning("The node is not fully synchronized. Stats may be inaccurate.")
        observer.emit(TraceEvent(kind=NODE_STALE, block_number=latest, detail={"latest_timestamp": latest_ts}))
        return True
    return False


def run_audit(
    chain: Chain,
    registry: ContractRegistry,
    config: TallyConfig = TallyConfig(),
    observer: Optional[ReplayObserver] = None,
    to_block: BlockRef = LATEST,
    clock=None,
    enrich: bool = True,
) -> AuditResult:
    """
    Replay every governance event up to to_block and count ballots.

    Args:
        chain: Log source and read-only caller
        registry: Contract addresses per protocol version
        config: Ballot filters
        observer: Receives structured trace events
        to_block: Last block of the window (inclusive)
        clock: Time source for the freshness check
        enrich: Resolve mining keys and identities after the replay

    Returns:
        AuditResult

    Raises:
        TransportError: On any RPC failure
        UnrecognizedEventError: If a log matches no known decoder
        EmptyStreamError: If the query returned no events at all
    """
    observer = observer or NullObserver()
    stale = check_synced(chain, clock, observer)

    stats = StatsAggregator()
    classifier = EventClassifier(registry)
    tracker = VoterSetTracker(chain, registry, observer)
    tally = BallotTally(tracker, stats, chain, registry, config, observer, to_block)

    reducer = Reducer()
    reducer.register(KeyChange, tracker.apply_key_change)
    reducer.register(FullSetReplace, tracker.apply_full_set)
    reducer.register(PendingSetInitiated, tracker.apply_pending_set)
    reducer.register(BallotCreated, tally.on_ballot)

    logger.debug("Collecting events...")
    raws = chain.query(classifier.topic_filter(), 0, to_block)
    if not raws:
        raise EmptyStreamError()

    applied = 0
    for raw in raws:
        event = classifier.classify(raw)
        if event is None:
            observer.emit(
                TraceEvent(
                    kind=EVENT_DROPPED,
                    block_number=raw.block_number,
                    detail={"address": str(raw.address)},
                )
            )
            continue
        reducer.apply(event)
        applied += 1

    result = AuditResult(
        stats=stats,
        voters=tracker.snapshot(),
        applied=applied,
        dropped=classifier.dropped,
        ballots=len(tally.outcomes),
        skipped_ballots=tally.skipped,
        unexpected_voters=[a for o in tally.outcomes for a in o.unexpected],
        stale=stale,
    )

    if enrich:
        result.enrichment = Enricher(chain, registry, observer).enrich(stats)
    return result
