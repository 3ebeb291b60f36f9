"""
BallotTally: correlates each ballot with its votes and counts eligibility.
"""

import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Tuple

from ..chain.registry import ContractRegistry
from ..chain.source import LATEST, BlockRef, LogSource
from ..core.address import Address
from ..core.errors import UnrecognizedEventError
from ..core.events import BallotCreated, Vote
from ..stats.aggregator import StatsAggregator
from .classifier import VOTE_DECODERS, EventClassifier
from .observer import (
    BALLOT_COUNTED,
    BALLOT_SKIPPED,
    UNEXPECTED_VOTER,
    NullObserver,
    ReplayObserver,
    TraceEvent,
)
from .voters import VoterSetTracker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TallyConfig:
    """
    Caller-supplied ballot filters.

    Fields:
        min_block: Ballots created before this block are skipped
        min_time: Ballots whose block is older than this unix time are skipped
    """
    min_block: int = 0
    min_time: Optional[int] = None


@dataclass(frozen=True)
class BallotOutcome:
    ballot_id: int
    block_number: int
    eligible: Tuple[Address, ...]
    voted: FrozenSet[Address]
    unexpected: Tuple[Address, ...]


class BallotTally:
    """
    Handles BallotCreated events.

    Eligibility is the tracker's voter set at the moment the ballot is
    processed, after every earlier key change has been applied, plus any
    unexpected voters found among the ballot's votes.
    """

    def __init__(
        self,
        tracker: VoterSetTracker,
        stats: StatsAggregator,
        source: LogSource,
        registry: ContractRegistry,
        config: TallyConfig = TallyConfig(),
        observer: Optional[ReplayObserver] = None,
        to_block: BlockRef = LATEST,
    ) -> None:
        self.tracker = tracker
        self.stats = stats
        self.source = source
        self.registry = registry
        self.config = config
        self.observer = observer or NullObserver()
        self.to_block = to_block
        self.outcomes: List[BallotOutcome] = []
        self.skipped = 0
        self._vote_classifiers: Dict[str, EventClassifier] = {
            version: EventClassifier(registry, (decoder,)) for version, decoder in VOTE_DECODERS.items()
        }

    def is_too_old(self, ballot: BallotCreated) -> bool:
        if ballot.block_number < self.config.min_block:
            return True
        if self.config.min_time is not None:
            return self.source.block_timestamp(ballot.block_number) < self.config.min_time
        return False

    def fetch_votes(self, ballot: BallotCreated) -> List[Vote]:
        """
        Votes cast in this ballot on the same contract instance.

        Raises:
            TransportError: If the log query fails
            UnrecognizedEventError: If a returned log is not a vote of the
                ballot's protocol version
        """
        classifier = self._vote_classifiers.get(ballot.version)
        if classifier is None:
            raise UnrecognizedEventError(
                None, f"no vote decoder for protocol version {ballot.version!r}"
            )
        decoder = classifier.decoders[0]
        raws = self.source.query(
            decoder.definition.topic_filter(ballot.ballot_id),
            0,
            self.to_block,
            addresses=[ballot.contract],
        )
        votes = []
        for raw in raws:
            vote = classifier.classify(raw)
            if vote is None or vote.contract != ballot.contract:
                continue
            votes.append(vote)
        return votes

    def on_ballot(self, ballot: BallotCreated) -> Optional[BallotOutcome]:
        if self.is_too_old(ballot):
            logger.debug("Ballot %d at block #%d too old; skipping", ballot.ballot_id, ballot.block_number)
            self.skipped += 1
            self._trace(BALLOT_SKIPPED, ballot.block_number, ballot_id=ballot.ballot_id)
            return None

        voted = set()
        unexpected = []
        for vote in self.fetch_votes(ballot):
            if vote.voter in voted:
                continue
            voted.add(vote.voter)
            if self.tracker.insert(vote.voter):
                unexpected.append(vote.voter)
                logger.info("Unexpected voter %s in ballot %d", vote.voter, ballot.ballot_id)
                self._trace(UNEXPECTED_VOTER, ballot.block_number, ballot_id=ballot.ballot_id, voter=str(vote.voter))

        eligible = self.tracker.snapshot()
        self.stats.add_ballot(eligible, voted)

        outcome = BallotOutcome(
            ballot_id=ballot.ballot_id,
            block_number=ballot.block_number,
            eligible=eligible,
            voted=frozenset(voted),
            unexpected=tuple(unexpected),
        )
        self.outcomes.append(outcome)
        self._trace(
            BALLOT_COUNTED,
            ballot.block_number,
            ballot_id=ballot.ballot_id,
            ballot_type=ballot.ballot_type,
            creator=str(ballot.creator),
            version=ballot.version,
            eligible=len(eligible),
            voted=[str(a) for a in sorted(voted)],
        )
        return outcome

    def _trace(self, kind: str, block_number: int, **detail) -> None:
        self.observer.emit(TraceEvent(kind=kind, block_number=block_number, detail=detail))
