"""
Cache utilities for key naming conventions and TTL presets.
"""

from enum import Enum
from typing import Any, Union


class CacheKeyPrefix(str, Enum):
    """Key namespaces used in Valkey."""

    MODE_S = "cache::mode_s"
    CALLSIGN = "cache::callsign"
    AIRLINE = "cache::airline"
    LIMITER = "limiter"


class CacheField(str, Enum):
    """Hash fields of a resolution cache entry."""

    DATA = "data"
    UNKNOWN = "unknown"


class UnknownMarker(str, Enum):
    """Values stored under the ``unknown`` field."""

    AIRCRAFT = "unknown_aircraft"
    CALLSIGN = "unknown_callsign"
    AIRLINE = "unknown_airline"


class TTLPreset(int, Enum):
    """TTL presets in seconds."""

    ONE_MINUTE = 60
    FIVE_MINUTES = 300
    FIFTEEN_MINUTES = 900
    ONE_WEEK = 604800


class CacheKeyBuilder:
    """Builds colon-joined cache keys."""

    @staticmethod
    def build_key(prefix: Union[CacheKeyPrefix, str], *parts: Any) -> str:
        """
        Build a cache key with prefix and parts.

        Args:
            prefix: Key prefix (CacheKeyPrefix enum or string)
            *parts: Key parts to join with colons

        Returns:
            str: Generated cache key

        Example:
            build_key(CacheKeyPrefix.MODE_S, "A7E152")
            # Returns: "cache::mode_s:A7E152"
        """
        prefix_str = prefix.value if isinstance(prefix, CacheKeyPrefix) else str(prefix)
        key_parts = [prefix_str]
        for part in parts:
            if part is not None:
                key_parts.append(str(part))
        return ":".join(key_parts)

    @classmethod
    def mode_s_key(cls, mode_s: str) -> str:
        return cls.build_key(CacheKeyPrefix.MODE_S, mode_s)

    @classmethod
    def callsign_key(cls, callsign: str) -> str:
        return cls.build_key(CacheKeyPrefix.CALLSIGN, callsign)

    @classmethod
    def airline_key(cls, code: str) -> str:
        return cls.build_key(CacheKeyPrefix.AIRLINE, code)

    @classmethod
    def limiter_key(cls, client_key: str) -> str:
        return cls.build_key(CacheKeyPrefix.LIMITER, client_key)
