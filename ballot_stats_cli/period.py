"""
Human-readable durations such as "5 days" or "2 months 3 days".
"""

import re

from ballot_stats.core.errors import ConfigError

_UNITS = {
    "s": 1,
    "sec": 1,
    "secs": 1,
    "second": 1,
    "seconds": 1,
    "m": 60,
    "min": 60,
    "mins": 60,
    "minute": 60,
    "minutes": 60,
    "h": 3600,
    "hr": 3600,
    "hrs": 3600,
    "hour": 3600,
    "hours": 3600,
    "d": 86400,
    "day": 86400,
    "days": 86400,
    "w": 7 * 86400,
    "week": 7 * 86400,
    "weeks": 7 * 86400,
    "month": 30 * 86400,
    "months": 30 * 86400,
    "y": 365 * 86400,
    "year": 365 * 86400,
    "years": 365 * 86400,
}

_TERM = re.compile(r"(\d+)\s*([a-zA-Z]+)")


def parse_period(text: str) -> int:
    """
    Parse a duration into seconds.

    A month is 30 days and a year 365 days.

    Raises:
        ConfigError: If the text is not a sequence of <number> <unit> terms
    """
    stripped = text.strip()
    terms = _TERM.findall(stripped)
    if not terms or _TERM.sub("", stripped).strip(" ,"):
        raise ConfigError(f"period must be in the format '5 days', '2 months', etc.: {text!r}")
    total = 0
    for amount, unit in terms:
        seconds = _UNITS.get(unit.lower())
        if seconds is None:
            raise ConfigError(f"unknown time unit {unit!r} in period {text!r}")
        total += int(amount) * seconds
    return total
