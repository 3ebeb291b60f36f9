"""
Logging configuration for ballot-stats.

Logs go to stderr so that the report on stdout stays machine-readable.

Environment Variables:
    BALLOT_STATS_LOG_LEVEL: Log level (DEBUG, INFO, WARNING, ERROR) - default: WARNING
    BALLOT_STATS_LOG_FORMAT: Log format (json, text) - default: text

Usage:
    from ballot_stats.logging_config import setup_logging, get_logger

    setup_logging()
    logger = get_logger(__name__, trace_id="0x1234...")
    logger.warning("Failed to find mining key")
"""

import logging
import os
import sys
from typing import Optional

from pythonjsonlogger.json import JsonFormatter

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def setup_logging(level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """
    Configure the root logger.

    Explicit arguments win over BALLOT_STATS_LOG_LEVEL / BALLOT_STATS_LOG_FORMAT.
    """
    log_level = (level or os.getenv("BALLOT_STATS_LOG_LEVEL", "WARNING")).upper()
    fmt = (log_format or os.getenv("BALLOT_STATS_LOG_FORMAT", "text")).lower()
    resolved = LEVELS.get(log_level, logging.WARNING)

    root_logger = logging.getLogger()
    root_logger.setLevel(resolved)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(resolved)
    handler.addFilter(TraceIDFilter())

    if fmt == "json":
        formatter: logging.Formatter = JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s %(trace_id)s",
            rename_fields={
                "asctime": "timestamp",
                "name": "logger",
                "levelname": "level",
            },
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # Silence noisy libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("web3").setLevel(logging.WARNING)


def get_logger(name: str, trace_id: Optional[str] = None) -> logging.LoggerAdapter:
    """
    Get a logger with optional trace_id for correlation.

    Args:
        name: Logger name (typically __name__)
        trace_id: Trace ID for correlating logs (e.g. the RPC endpoint or a voter)
    """
    logger = logging.getLogger(name)
    return logging.LoggerAdapter(logger, {"trace_id": trace_id or "N/A"})


class TraceIDFilter(logging.Filter):
    """Ensures every record has a trace_id field, even if not set via LoggerAdapter."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "trace_id"):
            record.trace_id = "N/A"  # type: ignore
        return True
