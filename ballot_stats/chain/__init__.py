"""
Chain access: ABI fragments, topic filters, transports and the contract
registry.

This module provides:
- LogSource / ReadOnlyCall: transport interfaces
- InMemoryChain: container-backed chain (tests, offline replays)
- Web3Chain: JSON-RPC chain via web3
- ContractRegistry: address -> protocol version and contract kind
"""

from .filters import TopicFilter
from .source import LATEST, Chain, LogSource, ReadOnlyCall
from .memory import InMemoryChain
from .registry import (
    ContractInfo,
    ContractRegistry,
    V1,
    V2,
    VERSIONS,
    VOTING,
    KEYS_MANAGER,
    VALIDATOR_METADATA,
    NETWORK_CONSENSUS,
)

__all__ = [
    "TopicFilter",
    "LATEST",
    "Chain",
    "LogSource",
    "ReadOnlyCall",
    "InMemoryChain",
    "ContractInfo",
    "ContractRegistry",
    "V1",
    "V2",
    "VERSIONS",
    "VOTING",
    "KEYS_MANAGER",
    "VALIDATOR_METADATA",
    "NETWORK_CONSENSUS",
]
