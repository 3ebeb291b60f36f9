"""
StatsAggregator: per-voter ballot counts and metadata.
"""

from dataclasses import dataclass
from fractions import Fraction
from typing import AbstractSet, Dict, Iterable, Iterator, Optional

from ..core.address import Address
from ..core.errors import InvalidTransitionError


@dataclass(frozen=True)
class ValidatorIdentity:
    first_name: str
    last_name: str

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @staticmethod
    def from_words(first: bytes, last: bytes) -> "ValidatorIdentity":
        """Build from two NUL-padded bytes32 words."""
        return ValidatorIdentity(
            first_name=_bytes_to_string(first),
            last_name=_bytes_to_string(last),
        )


def _bytes_to_string(word: bytes) -> str:
    return bytes(word).rstrip(b"\x00").decode("utf-8", errors="replace")


def participation(voted: int, eligible: int) -> Fraction:
    """Voted / eligible; a voter with no eligible ballots counts as fully compliant."""
    if eligible == 0:
        return Fraction(1)
    return Fraction(voted, eligible)


@dataclass
class VoterStat:
    """
    Counts and metadata for one voting key.

    Fields:
        ballots_eligible: Ballots this voter had a right to vote in
        ballots_voted: Ballots this voter actually voted in
        mining_key: Resolved mining key, if enrichment succeeded
        identity: Validator identity, if enrichment succeeded
    """
    ballots_eligible: int = 0
    ballots_voted: int = 0
    mining_key: Optional[Address] = None
    identity: Optional[ValidatorIdentity] = None

    @property
    def missed(self) -> int:
        return self.ballots_eligible - self.ballots_voted

    @property
    def participation(self) -> Fraction:
        return participation(self.ballots_voted, self.ballots_eligible)

    @property
    def enriched(self) -> bool:
        return self.mining_key is not None and self.identity is not None


class StatsAggregator:
    """
    Map of voting key -> VoterStat, owned by a single replay run.

    Entries are created lazily the first time a voter is eligible for a
    ballot. Once freeze() is called any further mutation is an error.
    """

    def __init__(self) -> None:
        self._stats: Dict[Address, VoterStat] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        self._frozen = True

    def _check_mutable(self) -> None:
        if self._frozen:
            raise InvalidTransitionError("stats are frozen after enrichment")

    def add_ballot(self, eligible: Iterable[Address], voted: AbstractSet[Address]) -> None:
        """
        Count one ballot.

        Args:
            eligible: Everyone allowed to vote in the ballot
            voted: The voters who actually cast a vote (must be eligible)
        """
        self._check_mutable()
        eligible = set(eligible)
        missing = set(voted) - eligible
        if missing:
            raise InvalidTransitionError(
                f"voters not eligible for the ballot: {', '.join(str(a) for a in sorted(missing))}"
            )
        for voter in eligible:
            vs = self._stats.setdefault(voter, VoterStat())
            vs.ballots_eligible += 1
            if voter in voted:
                vs.ballots_voted += 1

    def set_metadata(
        self,
        voter: Address,
        mining_key: Address,
        identity: Optional[ValidatorIdentity] = None,
    ) -> bool:
        """Attach enrichment results; returns False for an unknown voter."""
        self._check_mutable()
        vs = self._stats.get(voter)
        if vs is None:
            return False
        vs.mining_key = mining_key
        vs.identity = identity
        return True

    def get(self, voter: Address) -> Optional[VoterStat]:
        return self._stats.get(voter)

    def items(self) -> Iterator:
        for address in sorted(self._stats):
            yield address, self._stats[address]

    def __iter__(self) -> Iterator[Address]:
        return iter(sorted(self._stats))

    def __contains__(self, voter: object) -> bool:
        return voter in self._stats

    def __len__(self) -> int:
        return len(self._stats)
