"""
Event model for the replay.

RawEvent is what the log source returns. Domain events are the closed set of
typed records the classifier produces from raw events.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Tuple

from .address import Address


@dataclass(frozen=True)
class RawEvent:
    """
    Undecoded log record.

    Fields:
        block_number: Block that emitted the log
        address: Emitting contract
        topics: Ordered 32-byte topics (topic 0 is the event signature)
        data: ABI-encoded non-indexed parameters
        log_index: Position of the log within its block
    """
    block_number: int
    address: Address
    topics: Tuple[bytes, ...] = ()
    data: bytes = b""
    log_index: int = 0


class KeyAction(str, Enum):
    ADD = "added"
    REMOVE = "removed"


@dataclass(frozen=True)
class DomainEvent:
    """
    Common fields of every decoded event.

    Fields:
        block_number: Block that emitted the log
        contract: Emitting contract address
        version: Protocol generation of the decoder that accepted the log
    """
    block_number: int
    contract: Address
    version: str

    @property
    def type(self) -> str:
        return type(self).__name__


@dataclass(frozen=True)
class KeyChange(DomainEvent):
    """A voting key was added to or removed from the authorized set."""
    action: str
    key: Address


@dataclass(frozen=True)
class FullSetReplace(DomainEvent):
    """The whole authorized set was replaced atomically."""
    new_set: FrozenSet[Address] = field(default_factory=frozenset)


@dataclass(frozen=True)
class PendingSetInitiated(DomainEvent):
    """Legacy: a candidate set was proposed, to take effect on the next one."""
    parent_hash: bytes = b""
    candidate_set: Tuple[Address, ...] = ()


@dataclass(frozen=True)
class BallotCreated(DomainEvent):
    ballot_id: int
    ballot_type: int
    creator: Address


@dataclass(frozen=True)
class Vote(DomainEvent):
    ballot_id: int
    voter: Address
    decision: int
    time: int
