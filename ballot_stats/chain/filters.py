"""
Positional log topic filters.

A filter holds up to four topic positions. Each position is either None
(match anything) or a tuple of accepted 32-byte values. Two filters can be
OR-combined so that one log query returns several event kinds while the node
keeps its native block order.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

TopicSlot = Optional[Tuple[bytes, ...]]


def _merge_slot(a: TopicSlot, b: TopicSlot) -> TopicSlot:
    if a is None or b is None:
        return None
    merged = list(a)
    for value in b:
        if value not in merged:
            merged.append(value)
    return tuple(merged)


@dataclass(frozen=True)
class TopicFilter:
    topic0: TopicSlot = None
    topic1: TopicSlot = None
    topic2: TopicSlot = None
    topic3: TopicSlot = None

    @classmethod
    def of(cls, *slots: Union[None, bytes, Sequence[bytes]]) -> "TopicFilter":
        """
        Build a filter from positional values.

        Each value may be None, a single topic, or a sequence of alternatives.
        """
        if len(slots) > 4:
            raise ValueError("a log has at most four topics")
        norm: List[TopicSlot] = []
        for slot in slots:
            if slot is None:
                norm.append(None)
            elif isinstance(slot, (bytes, bytearray)):
                norm.append((bytes(slot),))
            else:
                norm.append(tuple(bytes(v) for v in slot))
        norm.extend([None] * (4 - len(norm)))
        return cls(*norm)

    @property
    def slots(self) -> Tuple[TopicSlot, TopicSlot, TopicSlot, TopicSlot]:
        return (self.topic0, self.topic1, self.topic2, self.topic3)

    def or_(self, other: "TopicFilter") -> "TopicFilter":
        """
        Return the disjunction of both filters: a position accepts every
        value either filter accepts, and "any" wins over a value list.
        """
        return TopicFilter(*(_merge_slot(a, b) for a, b in zip(self.slots, other.slots)))

    def matches(self, topics: Sequence[bytes]) -> bool:
        for pos, slot in enumerate(self.slots):
            if slot is None:
                continue
            if pos >= len(topics) or topics[pos] not in slot:
                return False
        return True

    def to_rpc(self) -> List[Union[None, str, List[str]]]:
        """Render as the `topics` member of an eth_getLogs filter object."""
        out: List[Union[None, str, List[str]]] = []
        for slot in self.slots:
            if slot is None:
                out.append(None)
            elif len(slot) == 1:
                out.append("0x" + slot[0].hex())
            else:
                out.append(["0x" + v.hex() for v in slot])
        while out and out[-1] is None:
            out.pop()
        return out
