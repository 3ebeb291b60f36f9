"""
VoterSetTracker: the currently authorized set of voting keys.

Mutated only by key changes, full-set replacements, resolved legacy pending
sets and the tally's self-healing insertions. Iteration for output is always
sorted.
"""

import logging
from typing import Iterable, Iterator, List, Optional, Set, Tuple

from ..chain import abi
from ..chain.registry import KEYS_MANAGER, ContractRegistry
from ..chain.source import ReadOnlyCall
from ..core.address import Address
from ..core.errors import ConfigError
from ..core.events import FullSetReplace, KeyAction, KeyChange, PendingSetInitiated
from .observer import (
    KEY_ACTION_UNKNOWN,
    KEY_ADDED,
    KEY_MISSING,
    KEY_REMOVED,
    PENDING_RESOLVED,
    PENDING_SET,
    SET_REPLACED,
    NullObserver,
    ReplayObserver,
    TraceEvent,
)

logger = logging.getLogger(__name__)


def _addrs(addresses: Iterable[Address]) -> List[str]:
    return [str(a) for a in sorted(addresses)]


class VoterSetTracker:
    """
    Authorized voter set plus the one-slot legacy pending buffer.

    The legacy two-phase flow (PendingSetInitiated) commits the *previous*
    candidate set when a new one arrives, resolving each candidate mining key
    to its voting key through the keys manager. Whether this reconstructs
    historical voter sets exactly has never been verified; it is kept for
    compatibility with chains that only emit the legacy event.
    """

    def __init__(
        self,
        caller: Optional[ReadOnlyCall] = None,
        registry: Optional[ContractRegistry] = None,
        observer: Optional[ReplayObserver] = None,
        initial: Iterable[Address] = (),
    ) -> None:
        self.caller = caller
        self.registry = registry
        self.observer = observer or NullObserver()
        self._voters: Set[Address] = set(initial)
        self.pending: Optional[Tuple[Address, ...]] = None

    def __contains__(self, address: object) -> bool:
        return address in self._voters

    def __len__(self) -> int:
        return len(self._voters)

    def __iter__(self) -> Iterator[Address]:
        return iter(self.snapshot())

    def snapshot(self) -> Tuple[Address, ...]:
        """Current voters in address order."""
        return tuple(sorted(self._voters))

    def insert(self, address: Address) -> bool:
        """Add a voter; returns False if it was already tracked."""
        if address in self._voters:
            return False
        self._voters.add(address)
        return True

    def apply_key_change(self, event: KeyChange) -> None:
        try:
            action = KeyAction(event.action)
        except ValueError:
            logger.warning(
                "Ignoring key change with unknown action %r for %s at block #%d",
                event.action,
                event.key,
                event.block_number,
            )
            self._trace(KEY_ACTION_UNKNOWN, event.block_number, action=event.action, key=str(event.key))
            return

        if action is KeyAction.ADD:
            self._voters.add(event.key)
            self._trace(KEY_ADDED, event.block_number, key=str(event.key))
        elif event.key in self._voters:
            self._voters.remove(event.key)
            self._trace(KEY_REMOVED, event.block_number, key=str(event.key))
        else:
            logger.info("Removed key %s was not in the voter set (block #%d)", event.key, event.block_number)
            self._trace(KEY_MISSING, event.block_number, key=str(event.key))

    def apply_full_set(self, event: FullSetReplace) -> None:
        self._voters = set(event.new_set)
        self._trace(SET_REPLACED, event.block_number, new_set=_addrs(event.new_set))

    def apply_pending_set(self, event: PendingSetInitiated) -> None:
        self._trace(
            PENDING_SET,
            event.block_number,
            parent_hash="0x" + bytes(event.parent_hash).hex(),
            candidate_set=[str(a) for a in event.candidate_set],
        )
        if self.pending is not None:
            resolved = self._resolve(self.pending)
            self._voters = set(resolved)
            self._trace(PENDING_RESOLVED, event.block_number, new_set=_addrs(resolved))
        self.pending = tuple(event.candidate_set)

    def _resolve(self, mining_keys: Iterable[Address]) -> List[Address]:
        """
        Map candidate mining keys to voting keys; zero results are dropped.

        Raises:
            TransportError: If a lookup call fails
            ConfigError: If no keys manager is registered
        """
        if self.caller is None or self.registry is None:
            raise ConfigError("pending-set resolution needs a caller and a registry")
        keys_manager = self.registry.newest(KEYS_MANAGER)
        fn = abi.GET_VOTING_BY_MINING
        voters = []
        for mining_key in mining_keys:
            data = self.caller.call(keys_manager, fn.selector, fn.encode_args(mining_key))
            try:
                (voter,) = fn.decode_output(data)
            except ValueError:
                logger.warning("No voting key for mining key %s", mining_key)
                continue
            if voter.is_zero():
                continue
            voters.append(voter)
        return voters

    def _trace(self, kind: str, block_number: int, **detail) -> None:
        self.observer.emit(TraceEvent(kind=kind, block_number=block_number, detail=detail))
