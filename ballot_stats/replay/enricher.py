"""
Enricher: resolves mining keys and validator names after the replay.

Per-voter failures are logged and skipped. Only a transport failure while
fetching an identity aborts the run.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..chain import abi
from ..chain.registry import KEYS_MANAGER, VALIDATOR_METADATA, ContractRegistry
from ..chain.source import ReadOnlyCall
from ..core.address import Address
from ..core.errors import EnrichmentError, TransportError
from ..stats.aggregator import StatsAggregator, ValidatorIdentity
from .observer import ENRICHMENT_FAILED, NullObserver, ReplayObserver, TraceEvent

logger = logging.getLogger(__name__)


@dataclass
class EnrichmentSummary:
    resolved: int = 0
    failed: List[Tuple[Address, str]] = field(default_factory=list)


class Enricher:
    def __init__(
        self,
        caller: ReadOnlyCall,
        registry: ContractRegistry,
        observer: Optional[ReplayObserver] = None,
    ) -> None:
        self.caller = caller
        self.registry = registry
        self.observer = observer or NullObserver()

    def mining_key_for(self, voter: Address) -> Address:
        """
        Raises:
            EnrichmentError: On lookup failure or a zero result
        """
        fn = abi.GET_MINING_KEY_BY_VOTING
        contract = self.registry.newest(KEYS_MANAGER)
        try:
            data = self.caller.call(contract, fn.selector, fn.encode_args(voter))
            (mining_key,) = fn.decode_output(data)
        except (TransportError, ValueError) as e:
            raise EnrichmentError(f"failed to find mining key for voter {voter}: {e}") from e
        if mining_key.is_zero():
            raise EnrichmentError(f"voter {voter} has no mining key")
        return mining_key

    def identity_for(self, mining_key: Address) -> ValidatorIdentity:
        """
        Raises:
            TransportError: If the call itself fails
            EnrichmentError: If no identity is recorded for the key
        """
        fn = abi.VALIDATORS
        contract = self.registry.newest(VALIDATOR_METADATA)
        data = self.caller.call(contract, fn.selector, fn.encode_args(mining_key))
        try:
            first, last = fn.decode_output(data)
        except ValueError as e:
            raise EnrichmentError(f"no validator metadata for mining key {mining_key}: {e}") from e
        identity = ValidatorIdentity.from_words(first, last)
        if not identity.display_name:
            raise EnrichmentError(f"validator metadata for mining key {mining_key} is empty")
        return identity

    def enrich(self, stats: StatsAggregator) -> EnrichmentSummary:
        """
        Resolve metadata for every voter in stats, then freeze stats.

        Raises:
            TransportError: If an identity lookup cannot be executed
        """
        summary = EnrichmentSummary()
        for voter in list(stats):
            try:
                mining_key = self.mining_key_for(voter)
            except EnrichmentError as e:
                self._failed(summary, voter, str(e))
                continue

            try:
                identity = self.identity_for(mining_key)
            except EnrichmentError as e:
                stats.set_metadata(voter, mining_key, None)
                self._failed(summary, voter, str(e))
                continue

            stats.set_metadata(voter, mining_key, identity)
            summary.resolved += 1

        stats.freeze()
        return summary

    def _failed(self, summary: EnrichmentSummary, voter: Address, reason: str) -> None:
        logger.warning("%s", reason)
        summary.failed.append((voter, reason))
        self.observer.emit(TraceEvent(kind=ENRICHMENT_FAILED, detail={"voter": str(voter), "reason": reason}))
