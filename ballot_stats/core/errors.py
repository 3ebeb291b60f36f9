"""
Exception types for the ballot replay engine.
"""


class BallotStatsError(Exception):
    """Base class for all errors raised by the engine."""
    pass


class TransportError(BallotStatsError):
    """Raised when the RPC endpoint cannot be reached or returns an error."""
    pass


class UnrecognizedEventError(BallotStatsError):
    """Raised when a log payload matches none of the known event decoders."""

    def __init__(self, raw, message: str = "") -> None:
        self.raw = raw
        super().__init__(
            message
            or f"Unexpected log parameters at block #{raw.block_number} from {raw.address}"
        )


class EmptyStreamError(BallotStatsError):
    """Raised when no events at all matched the log filter."""

    def __init__(self, message: str = "") -> None:
        super().__init__(
            message
            or "No events found. Make sure your node is running in 'full' mode, not 'light', "
            "and that the contract addresses and block range are correct."
        )


class EnrichmentError(BallotStatsError):
    """Raised when a voter's mining key or identity cannot be resolved."""
    pass


class ConfigError(BallotStatsError):
    """Raised when the contract descriptor or CLI options are invalid."""
    pass


class InvalidTransitionError(BallotStatsError):
    """Raised when event handler is not registered or transition is invalid."""
    pass
