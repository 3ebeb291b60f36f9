"""
Report: deterministic ordering and rendering of voter statistics.

Lines are sorted by ascending participation, then ascending number of missed
ballots, then voting address. Participation is an exact fraction, so two runs
over the same stream always produce the same order and the same bytes.
"""

import hashlib
from dataclasses import dataclass
from fractions import Fraction
from typing import Any, Dict, List, Optional, Tuple

from ..core.address import Address
from ..core.canonical import canonical_json_bytes
from .aggregator import StatsAggregator, participation

HEADER = "        Missed  Voting key                                  Mining key                                  Name"

BAND_CRITICAL = "critical"
BAND_WARNING = "warning"
BAND_NORMAL = "normal"
BAND_PERFECT = "perfect"


@dataclass(frozen=True)
class ReportLine:
    voting_address: Address
    ballots_eligible: int
    ballots_voted: int
    mining_key: Optional[Address] = None
    display_name: Optional[str] = None

    @property
    def missed(self) -> int:
        return self.ballots_eligible - self.ballots_voted

    @property
    def participation(self) -> Fraction:
        return participation(self.ballots_voted, self.ballots_eligible)

    @property
    def missed_percent(self) -> float:
        return float((1 - self.participation) * 100)

    @property
    def band(self) -> str:
        p = self.participation
        if p <= Fraction(1, 2):
            return BAND_CRITICAL
        if p <= Fraction(3, 4):
            return BAND_WARNING
        if p < 1:
            return BAND_NORMAL
        return BAND_PERFECT

    def sort_key(self) -> Tuple[Fraction, int, Address]:
        return (self.participation, self.missed, self.voting_address)

    def ratio(self) -> str:
        return f"{self.missed}/{self.ballots_eligible}"

    def format(self) -> str:
        mining_key = str(self.mining_key) if self.mining_key is not None else "-"
        name = self.display_name if self.display_name else "-"
        return f"{self.ratio():>7},{self.missed_percent:5.1f}%  {self.voting_address}  {mining_key}  {name}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "voting_address": str(self.voting_address),
            "mining_key": str(self.mining_key) if self.mining_key is not None else None,
            "name": self.display_name,
            "ballots": self.ballots_eligible,
            "voted": self.ballots_voted,
            "missed": self.missed,
            "missed_percent": round(self.missed_percent, 1),
        }


@dataclass(frozen=True)
class Report:
    lines: Tuple[ReportLine, ...]

    def __len__(self) -> int:
        return len(self.lines)

    def to_text(self) -> str:
        return "\n".join([HEADER] + [line.format() for line in self.lines]) + "\n"

    def to_dict(self) -> Dict[str, Any]:
        return {"voters": [line.to_dict() for line in self.lines], "count": len(self.lines)}


def build_report(stats: StatsAggregator, include_unresolved: bool = False) -> Report:
    """
    Build the sorted report.

    Args:
        stats: Aggregated statistics
        include_unresolved: Also list voters whose mining key or identity
            could not be resolved (by default only enriched voters appear)
    """
    lines: List[ReportLine] = []
    for address, vs in stats.items():
        if not include_unresolved and not vs.enriched:
            continue
        lines.append(
            ReportLine(
                voting_address=address,
                ballots_eligible=vs.ballots_eligible,
                ballots_voted=vs.ballots_voted,
                mining_key=vs.mining_key,
                display_name=vs.identity.display_name if vs.identity is not None else None,
            )
        )
    lines.sort(key=ReportLine.sort_key)
    return Report(lines=tuple(lines))


def report_digest(report: Report) -> str:
    """
    SHA-256 of the report's canonical JSON.

    Returns:
        Hex string (64 characters)
    """
    return hashlib.sha256(canonical_json_bytes(report.to_dict())).hexdigest()
