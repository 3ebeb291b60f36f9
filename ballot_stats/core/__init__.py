"""
Core replay primitives.

This module provides the foundational types for the ballot replay:
- Address: 20-byte account identifier
- RawEvent / domain events: undecoded logs and their typed decodings
- Reducer: ordered dispatch of domain events to handlers
- Canonical: deterministic serialization
- Clock: injectable time source
"""

from .address import Address, ZERO_ADDRESS
from .events import (
    RawEvent,
    DomainEvent,
    KeyAction,
    KeyChange,
    FullSetReplace,
    PendingSetInitiated,
    BallotCreated,
    Vote,
)
from .reducer import Reducer
from .canonical import canonicalize, canonical_json_bytes
from .clock import SystemClock, DeterministicClock
from .errors import (
    BallotStatsError,
    TransportError,
    UnrecognizedEventError,
    EmptyStreamError,
    EnrichmentError,
    ConfigError,
    InvalidTransitionError,
)

__all__ = [
    "Address",
    "ZERO_ADDRESS",
    "RawEvent",
    "DomainEvent",
    "KeyAction",
    "KeyChange",
    "FullSetReplace",
    "PendingSetInitiated",
    "BallotCreated",
    "Vote",
    "Reducer",
    "canonicalize",
    "canonical_json_bytes",
    "SystemClock",
    "DeterministicClock",
    "BallotStatsError",
    "TransportError",
    "UnrecognizedEventError",
    "EmptyStreamError",
    "EnrichmentError",
    "ConfigError",
    "InvalidTransitionError",
]
