"""
Voter statistics and the sorted compliance report.
"""

from .aggregator import StatsAggregator, ValidatorIdentity, VoterStat
from .report import Report, ReportLine, build_report, report_digest

__all__ = [
    "StatsAggregator",
    "ValidatorIdentity",
    "VoterStat",
    "Report",
    "ReportLine",
    "build_report",
    "report_digest",
]
