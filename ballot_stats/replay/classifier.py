"""
Event classification: raw log -> typed domain event.

Decoders are tried in a fixed priority order, newest protocol generation
first and the legacy pending-set event last. The first decoder that parses
the payload and whose version/kind is registered for the emitting address
wins. A payload that parses but comes from an unregistered address is dropped
silently; one that parses under no decoder is fatal.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

from ..chain import abi
from ..chain.filters import TopicFilter
from ..chain.registry import (
    KEYS_MANAGER,
    NETWORK_CONSENSUS,
    V1,
    V2,
    VOTING,
    ContractRegistry,
)
from ..core.errors import UnrecognizedEventError
from ..core.events import (
    BallotCreated,
    DomainEvent,
    FullSetReplace,
    KeyChange,
    PendingSetInitiated,
    RawEvent,
    Vote,
)

Builder = Callable[[RawEvent, str, Dict[str, Any]], DomainEvent]


@dataclass(frozen=True)
class EventDecoder:
    """An event fragment bound to the deployment it is trusted from."""
    definition: abi.EventDefinition
    version: str
    kind: str
    build: Builder

    def decode(self, raw: RawEvent) -> Optional[DomainEvent]:
        values = self.definition.decode(raw)
        if values is None:
            return None
        return self.build(raw, self.version, values)


def _key_change(raw: RawEvent, version: str, v: Dict[str, Any]) -> DomainEvent:
    return KeyChange(
        block_number=raw.block_number,
        contract=raw.address,
        version=version,
        action=v["action"],
        key=v["key"],
    )


def _full_set(raw: RawEvent, version: str, v: Dict[str, Any]) -> DomainEvent:
    return FullSetReplace(
        block_number=raw.block_number,
        contract=raw.address,
        version=version,
        new_set=frozenset(v["newSet"]),
    )


def _pending_set(raw: RawEvent, version: str, v: Dict[str, Any]) -> DomainEvent:
    return PendingSetInitiated(
        block_number=raw.block_number,
        contract=raw.address,
        version=version,
        parent_hash=v["parentHash"],
        candidate_set=tuple(v["newSet"]),
    )


def _ballot(raw: RawEvent, version: str, v: Dict[str, Any]) -> DomainEvent:
    return BallotCreated(
        block_number=raw.block_number,
        contract=raw.address,
        version=version,
        ballot_id=v["id"],
        ballot_type=v["ballotType"],
        creator=v["creator"],
    )


def _vote(raw: RawEvent, version: str, v: Dict[str, Any]) -> DomainEvent:
    return Vote(
        block_number=raw.block_number,
        contract=raw.address,
        version=version,
        ballot_id=v["id"],
        voter=v["voter"],
        decision=v["decision"],
        time=v["time"],
    )


STREAM_DECODERS: Tuple[EventDecoder, ...] = (
    EventDecoder(abi.VOTING_KEY_CHANGED, V2, KEYS_MANAGER, _key_change),
    EventDecoder(abi.BALLOT_CREATED, V2, VOTING, _ballot),
    EventDecoder(abi.CHANGE_FINALIZED, V2, NETWORK_CONSENSUS, _full_set),
    EventDecoder(abi.BALLOT_CREATED, V1, VOTING, _ballot),
    EventDecoder(abi.CHANGE_FINALIZED, V1, NETWORK_CONSENSUS, _full_set),
    EventDecoder(abi.INITIATE_CHANGE, V1, NETWORK_CONSENSUS, _pending_set),
)

VOTE_DECODERS: Mapping[str, EventDecoder] = {
    V2: EventDecoder(abi.VOTE_V2, V2, VOTING, _vote),
    V1: EventDecoder(abi.VOTE_V1, V1, VOTING, _vote),
}


class EventClassifier:
    """
    Ordered list of typed decoders checked against a contract registry.

    Usage:
        classifier = EventClassifier(registry)
        event = classifier.classify(raw)   # None when dropped
    """

    def __init__(
        self,
        registry: ContractRegistry,
        decoders: Sequence[EventDecoder] = STREAM_DECODERS,
    ) -> None:
        self.registry = registry
        self.decoders = tuple(decoders)
        self.dropped = 0

    def topic_filter(self) -> TopicFilter:
        """OR of every decoder's topic-0, for a single combined log query."""
        combined = self.decoders[0].definition.topic_filter()
        for decoder in self.decoders[1:]:
            combined = combined.or_(decoder.definition.topic_filter())
        return combined

    def classify(self, raw: RawEvent) -> Optional[DomainEvent]:
        """
        Decode a raw log.

        Returns:
            The domain event, or None when the payload is valid but its
            emitter is not registered for any decoder that parsed it

        Raises:
            UnrecognizedEventError: If no decoder parses the payload
        """
        parsed = False
        for decoder in self.decoders:
            event = decoder.decode(raw)
            if event is None:
                continue
            parsed = True
            if self.registry.is_registered(raw.address, decoder.version, decoder.kind):
                return event
        if not parsed:
            raise UnrecognizedEventError(raw)
        self.dropped += 1
        return None


def classify(raw: RawEvent, registry: ContractRegistry) -> Optional[DomainEvent]:
    """Classify one stream event with the default decoder order."""
    return EventClassifier(registry).classify(raw)
