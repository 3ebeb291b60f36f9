"""
In-memory chain used for tests and offline replays.
"""

from typing import Dict, Iterable, List, Optional, Tuple, Union

from ..core.address import Address
from ..core.errors import TransportError
from ..core.events import RawEvent
from .filters import TopicFilter
from .source import LATEST, BlockRef, Chain

CallResult = Union[bytes, Exception]


class InMemoryChain(Chain):
    """
    Chain backed by plain Python containers.

    Logs are kept in (block_number, log_index, insertion) order. Calls are
    answered from a table of (contract, calldata) -> return data; a registered
    exception is raised instead, so transport failures can be simulated.
    Unknown calls return empty data, like a call to an address without code.
    """

    def __init__(self, latest_block: Optional[int] = None) -> None:
        self._logs: List[Tuple[int, RawEvent]] = []
        self._timestamps: Dict[int, int] = {}
        self._calls: Dict[Tuple[Address, bytes], CallResult] = {}
        self._latest = latest_block
        self.queries: List[TopicFilter] = []
        self.call_log: List[Tuple[Address, bytes]] = []
        self.fail_queries: Optional[Exception] = None

    def add_log(self, raw: RawEvent) -> RawEvent:
        self._logs.append((len(self._logs), raw))
        return raw

    def add_logs(self, raws: Iterable[RawEvent]) -> None:
        for raw in raws:
            self.add_log(raw)

    def logs(self) -> List[RawEvent]:
        return [raw for _, raw in self._logs]

    def set_block_time(self, block_number: int, timestamp: int) -> None:
        self._timestamps[block_number] = timestamp

    def set_call(self, contract: Address, calldata: bytes, result: CallResult) -> None:
        self._calls[(contract, calldata)] = result

    def latest_block(self) -> int:
        if self._latest is not None:
            return self._latest
        return max((raw.block_number for _, raw in self._logs), default=0)

    def _resolve(self, block: BlockRef) -> int:
        if block == LATEST:
            return self.latest_block()
        if block == "earliest":
            return 0
        if isinstance(block, int):
            return block
        raise TransportError(f"unsupported block reference: {block!r}")

    def query(
        self,
        topic_filter: TopicFilter,
        from_block: BlockRef = 0,
        to_block: BlockRef = LATEST,
        addresses: Optional[Iterable[Address]] = None,
    ) -> List[RawEvent]:
        if self.fail_queries is not None:
            raise TransportError(f"eth_getLogs failed: {self.fail_queries}") from self.fail_queries
        self.queries.append(topic_filter)
        lo, hi = self._resolve(from_block), self._resolve(to_block)
        allowed = set(addresses) if addresses is not None else None
        ordered = sorted(self._logs, key=lambda item: (item[1].block_number, item[1].log_index, item[0]))
        return [
            raw
            for _, raw in ordered
            if lo <= raw.block_number <= hi
            and (allowed is None or raw.address in allowed)
            and topic_filter.matches(raw.topics)
        ]

    def block_timestamp(self, block: BlockRef) -> int:
        number = self._resolve(block)
        if number not in self._timestamps:
            raise TransportError(f"unknown block #{number}")
        return self._timestamps[number]

    def call(self, contract: Address, selector: bytes, args: bytes = b"") -> bytes:
        calldata = selector + args
        self.call_log.append((contract, calldata))
        result = self._calls.get((contract, calldata), b"")
        if isinstance(result, Exception):
            if isinstance(result, TransportError):
                raise result
            raise TransportError(f"eth_call failed: {result}") from result
        return result
