"""
Shared utilities: configuration, errors, logging and call timing.
"""

from .config import AppConfig, load_config, get_config
from .errors import (
    ErrorMessages,
    SkyLookupError,
    InvalidIdentifier,
    UnknownAircraft,
    UnknownAirline,
    UnknownCallsign,
    RateLimited,
    ExternalResolverFailure,
    InternalFailure,
)
from .log_setup import configure_logging
from .timing import timed

__all__ = [
    "AppConfig",
    "load_config",
    "get_config",
    "ErrorMessages",
    "SkyLookupError",
    "InvalidIdentifier",
    "UnknownAircraft",
    "UnknownAirline",
    "UnknownCallsign",
    "RateLimited",
    "ExternalResolverFailure",
    "InternalFailure",
    "configure_logging",
    "timed",
]
