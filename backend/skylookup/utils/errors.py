"""
Exception types surfaced by the lookup service.

Every error carries a stable, minimal ``description`` that is safe to show to
callers, plus an HTTP-like ``status_code`` so an outer surface can map it
without inspecting the message.
"""

from typing import Optional


class ErrorMessages:
    """Stable descriptions shown to callers."""

    INTERNAL = "Internal server error"
    INVALID_CALLSIGN = "Invalid callsign"
    INVALID_MODE_S = "Aircraft modeS string invalid"
    INVALID_N_NUMBER = "Invalid n_number"
    INVALID_AIRLINE = "Invalid airline code"
    INVALID_ICAO = "Invalid icao code"
    RATE_LIMITED = "Rate-limited"
    RESOLVER_FAILURE = "External resolver failure"
    UNKNOWN_AIRCRAFT = "unknown aircraft"
    UNKNOWN_AIRLINE = "unknown airline"
    UNKNOWN_CALLSIGN = "unknown callsign"


class SkyLookupError(Exception):
    """Base class for all lookup service errors."""

    status_code = 500
    default_description = ErrorMessages.INTERNAL

    def __init__(self, description: Optional[str] = None):
        self.description = description or self.default_description
        super().__init__(self.description)


class InvalidIdentifier(SkyLookupError, ValueError):
    """Malformed ModeS, callsign, ICAO, airline code or N-Number; never reaches a store."""

    status_code = 400
    default_description = "Invalid data"


class UnknownAircraft(SkyLookupError):
    """ModeS confirmed absent."""

    status_code = 404
    default_description = ErrorMessages.UNKNOWN_AIRCRAFT


class UnknownAirline(SkyLookupError):
    """Airline code matches no operator."""

    status_code = 404
    default_description = ErrorMessages.UNKNOWN_AIRLINE


class UnknownCallsign(SkyLookupError):
    """Callsign confirmed absent or unresolvable."""

    status_code = 404
    default_description = ErrorMessages.UNKNOWN_CALLSIGN


class RateLimited(SkyLookupError):
    """Client exhausted its quota or is blocked."""

    status_code = 429
    default_description = ErrorMessages.RATE_LIMITED

    def __init__(self, retry_after_ms: int):
        self.retry_after_ms = max(int(retry_after_ms), 0)
        super().__init__(ErrorMessages.RATE_LIMITED)

    @property
    def retry_after_seconds(self) -> int:
        """Retry delay rounded up to whole seconds."""
        return -(-self.retry_after_ms // 1000)


class ExternalResolverFailure(SkyLookupError):
    """Scrape source unreachable, slow or returned garbage."""

    status_code = 502
    default_description = ErrorMessages.RESOLVER_FAILURE


class InternalFailure(SkyLookupError):
    """Store unreachable or an unexpected fault."""

    status_code = 500
    default_description = ErrorMessages.INTERNAL
