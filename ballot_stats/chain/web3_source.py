"""
JSON-RPC chain access built on web3.

Every RPC failure is converted into TransportError. There are no retries:
the replay is all-or-nothing, and timeouts are left to the HTTP provider.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar

from requests.exceptions import RequestException
from web3 import Web3
from web3.exceptions import Web3Exception

from ..core.address import Address
from ..core.errors import TransportError
from ..core.events import RawEvent
from .filters import TopicFilter
from .source import LATEST, BlockRef, Chain

logger = logging.getLogger(__name__)

DEFAULT_URL = "http://127.0.0.1:8545"
DEFAULT_TIMEOUT_S = 60

T = TypeVar("T")

_TRANSPORT_ERRORS = (Web3Exception, RequestException, ValueError, OSError)


def _block_param(block: BlockRef) -> Any:
    return block if isinstance(block, str) else int(block)


class Web3Chain(Chain):
    """
    Chain reached through a web3 HTTP provider.

    Usage:
        chain = Web3Chain.connect("http://127.0.0.1:8545")
        logs = chain.query(filter, 0, "latest")
    """

    def __init__(self, w3: Web3) -> None:
        self.w3 = w3

    @classmethod
    def connect(cls, url: str = DEFAULT_URL, timeout_s: int = DEFAULT_TIMEOUT_S) -> "Web3Chain":
        provider = Web3.HTTPProvider(url, request_kwargs={"timeout": timeout_s})
        return cls(Web3(provider))

    def _rpc(self, what: str, fn: Callable[[], T]) -> T:
        try:
            return fn()
        except _TRANSPORT_ERRORS as e:
            logger.debug("RPC %s failed: %s", what, e)
            raise TransportError(f"{what} failed: {e}") from e

    def query(
        self,
        topic_filter: TopicFilter,
        from_block: BlockRef = 0,
        to_block: BlockRef = LATEST,
        addresses: Optional[Iterable[Address]] = None,
    ) -> List[RawEvent]:
        params: Dict[str, Any] = {
            "fromBlock": _block_param(from_block),
            "toBlock": _block_param(to_block),
            "topics": topic_filter.to_rpc(),
        }
        if addresses is not None:
            params["address"] = [a.checksum for a in addresses]

        logs = self._rpc("eth_getLogs", lambda: self.w3.eth.get_logs(params))
        events = []
        for log in logs:
            if log.get("blockNumber") is None:
                raise TransportError("event is missing block number")
            events.append(
                RawEvent(
                    block_number=int(log["blockNumber"]),
                    address=Address.parse(log["address"]),
                    topics=tuple(bytes(t) for t in log["topics"]),
                    data=bytes(log["data"]),
                    log_index=int(log.get("logIndex") or 0),
                )
            )
        events.sort(key=lambda ev: (ev.block_number, ev.log_index))
        return events

    def block_timestamp(self, block: BlockRef) -> int:
        blk = self._rpc(f"eth_getBlockByNumber({block})", lambda: self.w3.eth.get_block(_block_param(block)))
        return int(blk["timestamp"])

    def latest_block(self) -> int:
        return int(self._rpc("eth_blockNumber", lambda: self.w3.eth.block_number))

    def call(self, contract: Address, selector: bytes, args: bytes = b"") -> bytes:
        tx = {"to": contract.checksum, "data": "0x" + (selector + args).hex()}
        return bytes(self._rpc(f"eth_call({contract.short()})", lambda: self.w3.eth.call(tx, LATEST)))
