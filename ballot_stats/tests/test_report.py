"""
Tests for statistics aggregation and report ordering.
"""

from fractions import Fraction

import pytest

from ballot_stats.core.errors import InvalidTransitionError
from ballot_stats.stats import ReportLine, StatsAggregator, ValidatorIdentity, build_report, report_digest
from ballot_stats.stats.aggregator import VoterStat, participation
from ballot_stats.stats.report import HEADER

from .builders import A, B, C, D, addr


def _named(stats, *voters):
    for v in voters:
        stats.set_metadata(v, addr(0x5000 + v.raw[-1]), ValidatorIdentity("Val", f"{v.raw[-1]:x}"))


def test_zero_eligible_is_fully_compliant():
    vs = VoterStat()
    assert vs.participation == Fraction(1)
    line = ReportLine(voting_address=A, ballots_eligible=0, ballots_voted=0)
    assert line.participation == 1
    assert line.missed_percent == 0.0
    assert line.band == "perfect"


def test_line_and_stat_share_participation():
    assert participation(0, 0) == 1
    assert participation(2, 6) == Fraction(1, 3)
    vs = VoterStat(ballots_eligible=6, ballots_voted=2)
    line = ReportLine(voting_address=A, ballots_eligible=6, ballots_voted=2)
    assert line.participation == vs.participation == Fraction(1, 3)


def test_add_ballot_counts_and_invariant():
    stats = StatsAggregator()
    stats.add_ballot([A, B], {A})
    stats.add_ballot([A, B, C], {C})
    assert (stats.get(A).ballots_eligible, stats.get(A).ballots_voted) == (2, 1)
    assert (stats.get(C).ballots_eligible, stats.get(C).ballots_voted) == (1, 1)
    assert list(stats) == [A, B, C]
    with pytest.raises(InvalidTransitionError):
        stats.add_ballot([A], {D})


def test_report_ordering():
    stats = StatsAggregator()
    # A: 2/4, B: 1/2, C: 4/4, D: 0/2
    stats.add_ballot([A, B, C, D], {A, B, C})
    stats.add_ballot([A, B, C, D], {A, C})
    stats.add_ballot([A, C], {C})
    stats.add_ballot([A, C], {C})
    _named(stats, A, B, C, D)

    report = build_report(stats)

    # D (0%), then A and B tie at 50%: B misses fewer ballots, then C (100%).
    assert [line.voting_address for line in report.lines] == [D, B, A, C]
    assert [line.ratio() for line in report.lines] == ["2/2", "1/2", "2/4", "0/4"]


def test_report_ties_broken_by_address():
    stats = StatsAggregator()
    stats.add_ballot([C, A, B], set())
    _named(stats, A, B, C)
    assert [line.voting_address for line in build_report(stats).lines] == [A, B, C]


def test_unresolved_voters_hidden_by_default():
    stats = StatsAggregator()
    stats.add_ballot([A, B], {A})
    _named(stats, A)
    assert [line.voting_address for line in build_report(stats).lines] == [A]
    assert [line.voting_address for line in build_report(stats, include_unresolved=True).lines] == [B, A]


def test_line_format():
    line = ReportLine(
        voting_address=A,
        ballots_eligible=4,
        ballots_voted=1,
        mining_key=B,
        display_name="Alice Anders",
    )
    assert line.format() == f"    3/4, 75.0%  {A}  {B}  Alice Anders"
    assert line.band == "critical"
    assert ReportLine(voting_address=A, ballots_eligible=4, ballots_voted=3).band == "warning"
    assert ReportLine(voting_address=A, ballots_eligible=5, ballots_voted=4).band == "normal"


def test_report_text_and_digest_deterministic():
    def build():
        stats = StatsAggregator()
        stats.add_ballot([D, C, B, A], {B, D})
        stats.add_ballot([A, B], {A})
        _named(stats, A, B, C, D)
        return build_report(stats)

    texts = {build().to_text() for _ in range(20)}
    digests = {report_digest(build()) for _ in range(20)}
    assert len(texts) == 1
    assert len(digests) == 1
    assert texts.pop().startswith(HEADER)
    assert len(digests.pop()) == 64


def test_report_dict():
    stats = StatsAggregator()
    stats.add_ballot([A], set())
    _named(stats, A)
    data = build_report(stats).to_dict()
    assert data["count"] == 1
    assert data["voters"][0]["missed"] == 1
    assert data["voters"][0]["missed_percent"] == 100.0
    assert data["voters"][0]["voting_address"] == str(A)
