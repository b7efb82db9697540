"""
Caching layer for the lookup service.

This module contains Valkey client configuration, key conventions and the
resolution cache used by the pipeline.
"""

from .config import ValkeyConfig, ValkeyConnectionError
from .client import ValkeyClient
from .utils import (
    CacheField,
    CacheKeyBuilder,
    CacheKeyPrefix,
    TTLPreset,
    UnknownMarker,
)
from .store import ResolutionCache

__all__ = [
    # Configuration
    "ValkeyConfig",
    "ValkeyConnectionError",

    # Client
    "ValkeyClient",

    # Store
    "ResolutionCache",

    # Utilities
    "CacheField",
    "CacheKeyBuilder",
    "CacheKeyPrefix",
    "TTLPreset",
    "UnknownMarker",
]
