"""
20-byte account address value type.
"""

from dataclasses import dataclass

from eth_utils import to_checksum_address


@dataclass(frozen=True, order=True)
class Address:
    """
    Opaque 20-byte identifier.

    Ordered by raw bytes so voter sets and reports sort the same way on
    every run. Rendered as an EIP-55 checksum string.
    """
    raw: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.raw, (bytes, bytearray)) or len(self.raw) != 20:
            raise ValueError(f"address must be 20 bytes, got {self.raw!r}")
        if isinstance(self.raw, bytearray):
            object.__setattr__(self, "raw", bytes(self.raw))

    @classmethod
    def parse(cls, text: str) -> "Address":
        """
        Parse a 40-digit hexadecimal string, with or without the 0x prefix.

        Raises:
            ValueError: If the string is not a valid address
        """
        s = text.strip()
        if s[:2].lower() == "0x":
            s = s[2:]
        if len(s) != 40:
            raise ValueError(f"invalid address: {text!r}")
        try:
            return cls(bytes.fromhex(s))
        except ValueError as e:
            raise ValueError(f"invalid address: {text!r}") from e

    @classmethod
    def from_topic(cls, topic: bytes) -> "Address":
        """Take the address from the low 20 bytes of a 32-byte log topic."""
        if len(topic) != 32:
            raise ValueError(f"topic must be 32 bytes, got {len(topic)}")
        return cls(bytes(topic[-20:]))

    def is_zero(self) -> bool:
        return self.raw == ZERO_ADDRESS.raw

    @property
    def checksum(self) -> str:
        return to_checksum_address(self.raw)

    def short(self) -> str:
        """Shortened form for traces, e.g. 0x2b1d…d1bf."""
        h = self.raw.hex()
        return f"0x{h[:4]}…{h[-4:]}"

    def __str__(self) -> str:
        return self.checksum

    def __repr__(self) -> str:
        return f"Address({self.checksum})"


ZERO_ADDRESS = Address(b"\x00" * 20)
