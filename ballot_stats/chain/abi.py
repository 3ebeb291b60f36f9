"""
ABI definitions for the governance contracts.

Covers the events the replay consumes and the view functions it calls. Only
the fragments used here are described; decoding goes through eth_abi so the
payload layout matches what the contracts emit.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError, EncodingError
from eth_utils import keccak

from ..core.address import Address
from ..core.events import RawEvent
from .filters import TopicFilter


def _is_static(abi_type: str) -> bool:
    return not (abi_type.endswith("]") or abi_type in ("string", "bytes"))


def _to_python(abi_type: str, value: Any) -> Any:
    if abi_type == "address":
        return Address.parse(value)
    if abi_type == "address[]":
        return tuple(Address.parse(v) for v in value)
    return value


def _to_abi(value: Any) -> Any:
    if isinstance(value, Address):
        return value.checksum
    if isinstance(value, (list, tuple)):
        return [_to_abi(v) for v in value]
    return value


@dataclass(frozen=True)
class EventInput:
    name: str
    type: str
    indexed: bool = False


@dataclass(frozen=True)
class EventDefinition:
    """
    A single event fragment.

    decode() returns None whenever the log does not have this event's shape
    (different signature, topic count or payload length), and a dict of
    parameter name -> value otherwise.
    """
    name: str
    inputs: Tuple[EventInput, ...]

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(i.type for i in self.inputs)})"

    @property
    def topic0(self) -> bytes:
        return keccak(text=self.signature)

    @property
    def indexed_inputs(self) -> Tuple[EventInput, ...]:
        return tuple(i for i in self.inputs if i.indexed)

    @property
    def data_inputs(self) -> Tuple[EventInput, ...]:
        return tuple(i for i in self.inputs if not i.indexed)

    def topic_filter(self, *indexed_values: Any) -> TopicFilter:
        """
        Filter for this event, optionally pinning leading indexed parameters.

        Example:
            VOTE_V2.topic_filter(7)  # votes of ballot 7
        """
        slots = [self.topic0]
        for inp, value in zip(self.indexed_inputs, indexed_values):
            slots.append(None if value is None else encode([inp.type], [_to_abi(value)]))
        return TopicFilter.of(*slots)

    def decode(self, raw: RawEvent) -> Optional[Dict[str, Any]]:
        if not raw.topics or raw.topics[0] != self.topic0:
            return None
        indexed = self.indexed_inputs
        if len(raw.topics) != 1 + len(indexed):
            return None

        data_types = [i.type for i in self.data_inputs]
        if all(_is_static(t) for t in data_types) and len(raw.data) != 32 * len(data_types):
            return None

        values: Dict[str, Any] = {}
        try:
            for inp, topic in zip(indexed, raw.topics[1:]):
                values[inp.name] = _to_python(inp.type, decode([inp.type], topic)[0])
            decoded = decode(data_types, raw.data) if data_types else ()
        except (DecodingError, ValueError, OverflowError):
            return None
        for inp, value in zip(self.data_inputs, decoded):
            values[inp.name] = _to_python(inp.type, value)
        return values

    def encode_log(self, block_number: int, address: Address, log_index: int = 0, **params: Any) -> RawEvent:
        """Build a RawEvent carrying this event with the given parameters."""
        topics = [self.topic0]
        for inp in self.indexed_inputs:
            topics.append(encode([inp.type], [_to_abi(params[inp.name])]))
        data = b""
        if self.data_inputs:
            data = encode(
                [i.type for i in self.data_inputs],
                [_to_abi(params[i.name]) for i in self.data_inputs],
            )
        return RawEvent(
            block_number=block_number,
            address=address,
            topics=tuple(topics),
            data=data,
            log_index=log_index,
        )


@dataclass(frozen=True)
class FunctionDefinition:
    """A view function: selector, argument encoding and output decoding."""
    name: str
    inputs: Tuple[str, ...]
    outputs: Tuple[str, ...]

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.inputs)})"

    @property
    def selector(self) -> bytes:
        return keccak(text=self.signature)[:4]

    def encode_args(self, *args: Any) -> bytes:
        try:
            return encode(list(self.inputs), [_to_abi(a) for a in args])
        except EncodingError as e:
            raise ValueError(f"cannot encode arguments for {self.signature}: {e}") from e

    def decode_output(self, data: bytes) -> Tuple[Any, ...]:
        """
        Decode return data.

        When every output is static only the leading words are read, so a
        fragment may describe a prefix of a longer return tuple.

        Raises:
            ValueError: If the data is too short or malformed
        """
        if all(_is_static(t) for t in self.outputs):
            data = data[: 32 * len(self.outputs)]
        try:
            values = decode(list(self.outputs), data)
        except DecodingError as e:
            raise ValueError(f"cannot decode output of {self.signature}: {e}") from e
        return tuple(_to_python(t, v) for t, v in zip(self.outputs, values))

    def encode_output(self, *values: Any) -> bytes:
        return encode(list(self.outputs), [_to_abi(v) for v in values])


def _inputs(*params: Sequence[Any]) -> Tuple[EventInput, ...]:
    return tuple(EventInput(*p) for p in params)


# KeysManager (v2)
VOTING_KEY_CHANGED = EventDefinition(
    "VotingKeyChanged",
    _inputs(("key", "address"), ("miningKey", "address", True), ("action", "string")),
)

# VotingToChangeKeys (v1 and v2 share the BallotCreated signature)
BALLOT_CREATED = EventDefinition(
    "BallotCreated",
    _inputs(("id", "uint256", True), ("ballotType", "uint256", True), ("creator", "address", True)),
)

VOTE_V1 = EventDefinition(
    "Vote",
    _inputs(("id", "uint256", True), ("decision", "uint256"), ("voter", "address", True), ("time", "uint256")),
)

VOTE_V2 = EventDefinition(
    "Vote",
    _inputs(
        ("id", "uint256", True),
        ("decision", "uint256"),
        ("voter", "address", True),
        ("time", "uint256"),
        ("voterMiningKey", "address"),
    ),
)

# PoaNetworkConsensus
CHANGE_FINALIZED = EventDefinition("ChangeFinalized", _inputs(("newSet", "address[]")))

INITIATE_CHANGE = EventDefinition(
    "InitiateChange",
    _inputs(("parentHash", "bytes32", True), ("newSet", "address[]")),
)

# KeysManager views
GET_VOTING_BY_MINING = FunctionDefinition("getVotingByMining", ("address",), ("address",))
GET_MINING_KEY_BY_VOTING = FunctionDefinition("getMiningKeyByVoting", ("address",), ("address",))

# ValidatorMetadata.validators(miningKey) returns a longer tuple; firstName and
# lastName are its two leading words.
VALIDATORS = FunctionDefinition("validators", ("address",), ("bytes32", "bytes32"))
