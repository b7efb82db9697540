"""
Service layer for the lookup service.

This module contains the resolution pipeline, the external resolver, the
rate limiter, N-Number conversion and the service container.
"""

from .n_number import mode_s_to_n_number, n_number_to_mode_s
from .scraper import ExternalResolver, extract_route
from .rate_limiter import LimiterState, RateLimiter
from .resolver import ResolutionPipeline
from .container import ServiceContainer

__all__ = [
    "mode_s_to_n_number",
    "n_number_to_mode_s",
    "ExternalResolver",
    "extract_route",
    "LimiterState",
    "RateLimiter",
    "ResolutionPipeline",
    "ServiceContainer",
]
