"""
Builders for ABI-encoded logs on an in-memory chain.
"""

from typing import Iterable, List, Optional

from eth_abi import encode

from ballot_stats.chain import abi
from ballot_stats.chain.memory import InMemoryChain
from ballot_stats.chain.registry import (
    KEYS_MANAGER,
    NETWORK_CONSENSUS,
    V1,
    V2,
    VALIDATOR_METADATA,
    VOTING,
    ContractRegistry,
)
from ballot_stats.core.address import Address
from ballot_stats.core.clock import DeterministicClock
from ballot_stats.core.events import RawEvent

GENESIS_TS = 1_500_000_000
BLOCK_TIME = 5


def addr(n: int) -> Address:
    return Address(n.to_bytes(20, "big"))


VOTING_V1 = addr(0xC1)
VOTING_V2 = addr(0xC2)
KEYS_V1 = addr(0xD1)
KEYS_V2 = addr(0xD2)
METADATA_V2 = addr(0xE2)
CONSENSUS = addr(0xF0)
ROGUE = addr(0xBAD)

A = addr(0xA)
B = addr(0xB)
C = addr(0xC)
D = addr(0xD)


def block_ts(block_number: int) -> int:
    return GENESIS_TS + block_number * BLOCK_TIME


def clock_at(block_number: int) -> DeterministicClock:
    return DeterministicClock(block_ts(block_number))


def make_registry() -> ContractRegistry:
    registry = ContractRegistry()
    registry.register(VOTING_V1, V1, VOTING)
    registry.register(VOTING_V2, V2, VOTING)
    registry.register(KEYS_V1, V1, KEYS_MANAGER)
    registry.register(KEYS_V2, V2, KEYS_MANAGER)
    registry.register(METADATA_V2, V2, VALIDATOR_METADATA)
    registry.register(CONSENSUS, V1, NETWORK_CONSENSUS)
    registry.register(CONSENSUS, V2, NETWORK_CONSENSUS)
    return registry


def make_chain(logs: Iterable[RawEvent] = (), latest_block: Optional[int] = None) -> InMemoryChain:
    """Chain holding the logs, with a timestamp for every log block and the latest block."""
    chain = InMemoryChain(latest_block=latest_block)
    chain.add_logs(logs)
    for raw in chain.logs():
        chain.set_block_time(raw.block_number, block_ts(raw.block_number))
    latest = chain.latest_block()
    chain.set_block_time(latest, block_ts(latest))
    return chain


def key_change(block: int, key: Address, action: str = "added", contract: Address = KEYS_V2) -> RawEvent:
    return abi.VOTING_KEY_CHANGED.encode_log(block, contract, key=key, miningKey=addr(0x1000 + key.raw[-1]), action=action)


def change_finalized(block: int, voters: Iterable[Address], contract: Address = CONSENSUS) -> RawEvent:
    return abi.CHANGE_FINALIZED.encode_log(block, contract, newSet=list(voters))


def initiate_change(
    block: int,
    candidates: Iterable[Address],
    contract: Address = CONSENSUS,
    parent_hash: bytes = b"\x11" * 32,
) -> RawEvent:
    return abi.INITIATE_CHANGE.encode_log(block, contract, parentHash=parent_hash, newSet=list(candidates))


def ballot_created(
    block: int,
    ballot_id: int,
    contract: Address = VOTING_V2,
    ballot_type: int = 1,
    creator: Address = A,
) -> RawEvent:
    return abi.BALLOT_CREATED.encode_log(block, contract, id=ballot_id, ballotType=ballot_type, creator=creator)


def vote(
    block: int,
    ballot_id: int,
    voter: Address,
    contract: Address = VOTING_V2,
    decision: int = 1,
    log_index: int = 0,
) -> RawEvent:
    params = dict(id=ballot_id, decision=decision, voter=voter, time=block_ts(block))
    if contract == VOTING_V1:
        return abi.VOTE_V1.encode_log(block, contract, log_index, **params)
    return abi.VOTE_V2.encode_log(block, contract, log_index, voterMiningKey=addr(0x2000), **params)


def mining_key_of(voter: Address) -> Address:
    return addr(0x5000 + voter.raw[-1])


def set_mining_key(chain: InMemoryChain, voter: Address, mining_key: Address, keys_manager: Address = KEYS_V2) -> None:
    fn = abi.GET_MINING_KEY_BY_VOTING
    chain.set_call(keys_manager, fn.selector + fn.encode_args(voter), fn.encode_output(mining_key))


def set_voting_key(chain: InMemoryChain, mining_key: Address, voter: Address, keys_manager: Address = KEYS_V2) -> None:
    fn = abi.GET_VOTING_BY_MINING
    chain.set_call(keys_manager, fn.selector + fn.encode_args(mining_key), fn.encode_output(voter))


def set_identity(chain: InMemoryChain, mining_key: Address, first: str, last: str, metadata: Address = METADATA_V2) -> None:
    fn = abi.VALIDATORS
    # The real getter returns a longer tuple; only the leading names are read.
    data = encode(
        ["bytes32", "bytes32", "bytes32", "string", "uint256"],
        [first.encode().ljust(32, b"\x00"), last.encode().ljust(32, b"\x00"), b"\x00" * 32, "Main St", 12345],
    )
    chain.set_call(metadata, fn.selector + fn.encode_args(mining_key), data)


def enrich_all(chain: InMemoryChain, voters: Iterable[Address]) -> List[Address]:
    """Register mining keys and names for every voter; returns the mining keys."""
    keys = []
    for voter in voters:
        mk = mining_key_of(voter)
        set_mining_key(chain, voter, mk)
        set_identity(chain, mk, f"Val{voter.raw[-1]:02x}", "Idator")
        keys.append(mk)
    return keys
