"""
Chain access interfaces.

Defines the contracts the replay needs from its transport: ordered log
queries, block timestamps and read-only calls against the latest state.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Union

from ..core.address import Address
from ..core.events import RawEvent
from .filters import TopicFilter

BlockRef = Union[int, str]

LATEST = "latest"


class LogSource(ABC):
    """
    Abstract log query interface.

    All implementations must guarantee:
    - Results in the chain's native order (block number, then log index)
    - Topic positions combined with logical OR inside a position
    - Failures surfaced as TransportError, never as partial results
    """

    @abstractmethod
    def query(
        self,
        topic_filter: TopicFilter,
        from_block: BlockRef = 0,
        to_block: BlockRef = LATEST,
        addresses: Optional[Iterable[Address]] = None,
    ) -> List[RawEvent]:
        """
        Return every log matching the filter in the block range.

        Args:
            topic_filter: Topic positions to match
            from_block: First block (inclusive)
            to_block: Last block (inclusive) or "latest"
            addresses: Restrict to logs emitted by these contracts (None = any)

        Raises:
            TransportError: If the query fails
        """
        ...

    @abstractmethod
    def block_timestamp(self, block: BlockRef) -> int:
        """
        Return the unix timestamp of a block.

        Raises:
            TransportError: If the block cannot be fetched
        """
        ...

    @abstractmethod
    def latest_block(self) -> int:
        ...


class ReadOnlyCall(ABC):
    """Read-only contract calls evaluated against the latest known state."""

    @abstractmethod
    def call(self, contract: Address, selector: bytes, args: bytes = b"") -> bytes:
        """
        Execute a view call.

        Args:
            contract: Contract to call
            selector: 4-byte function selector
            args: ABI-encoded arguments

        Returns:
            Raw return data

        Raises:
            TransportError: If the call cannot be executed
        """
        ...


class Chain(LogSource, ReadOnlyCall):
    """A transport that provides both logs and calls."""
    pass
