"""
Resolution cache backed by Valkey hashes.

Each looked-up identifier owns one hash key. A resolved record is stored as
JSON under the ``data`` field, a confirmed miss as a marker under the
``unknown`` field. Existence of the key alone means "already looked up".
Every write refreshes a one week expiry on the key.
"""

import json
import logging
from typing import Any, Dict, Optional

from ..utils.timing import timed
from .client import ValkeyClient
from .utils import CacheField, CacheKeyBuilder, TTLPreset, UnknownMarker

logger = logging.getLogger(__name__)


class ResolutionCache:
    """
    Cache store for aircraft, flightroute and airline lookups.

    Reads raise InternalFailure when Valkey is unreachable. Writes are
    best-effort and only log on failure.
    """

    def __init__(self, client: ValkeyClient, ttl: int = TTLPreset.ONE_WEEK):
        self._client = client
        self.ttl = int(ttl)
        self.keys = CacheKeyBuilder()

    @property
    def valkey(self) -> Any:
        return self._client.client

    async def health_check(self) -> bool:
        return await self._client.health_check()

    # Raw hash operations

    @timed()
    async def exists(self, key: str) -> bool:
        return bool(await self.valkey.exists(key))

    @timed()
    async def get_field(self, key: str, field: str) -> Optional[str]:
        return await self.valkey.hget(key, field)

    @timed()
    async def set_field(self, key: str, field: str, value: str) -> None:
        await self.valkey.hset(key, field, value)

    @timed()
    async def expire(self, key: str, seconds: int) -> None:
        await self.valkey.expire(key, seconds)

    async def _write(self, key: str, field: CacheField, value: str) -> None:
        await self.set_field(key, field.value, value)
        await self.expire(key, self.ttl)
        logger.debug(f"Cached {field.value} for {key} (ttl={self.ttl}s)")

    async def _read_data(self, key: str) -> Optional[Dict[str, Any]]:
        raw = await self.get_field(key, CacheField.DATA.value)
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Discarding unparseable cache payload at {key}")
            return None
        return data if isinstance(data, dict) else None

    # Aircraft entries

    async def has_aircraft(self, mode_s: str) -> bool:
        return await self.exists(self.keys.mode_s_key(mode_s))

    async def get_aircraft(self, mode_s: str) -> Optional[Dict[str, Any]]:
        return await self._read_data(self.keys.mode_s_key(mode_s))

    @timed(swallow=True)
    async def set_aircraft(self, mode_s: str, data: Dict[str, Any]) -> None:
        await self._write(self.keys.mode_s_key(mode_s), CacheField.DATA, json.dumps(data))

    @timed(swallow=True)
    async def set_unknown_aircraft(self, mode_s: str) -> None:
        await self._write(
            self.keys.mode_s_key(mode_s), CacheField.UNKNOWN, UnknownMarker.AIRCRAFT.value
        )

    # Flightroute entries

    async def has_callsign(self, callsign: str) -> bool:
        return await self.exists(self.keys.callsign_key(callsign))

    async def get_callsign(self, callsign: str) -> Optional[Dict[str, Any]]:
        return await self._read_data(self.keys.callsign_key(callsign))

    @timed(swallow=True)
    async def set_callsign(self, callsign: str, data: Dict[str, Any]) -> None:
        await self._write(self.keys.callsign_key(callsign), CacheField.DATA, json.dumps(data))

    @timed(swallow=True)
    async def set_unknown_callsign(self, callsign: str) -> None:
        await self._write(
            self.keys.callsign_key(callsign), CacheField.UNKNOWN, UnknownMarker.CALLSIGN.value
        )

    # Airline entries

    async def has_airline(self, code: str) -> bool:
        return await self.exists(self.keys.airline_key(code))

    async def get_airline(self, code: str) -> Optional[Dict[str, Any]]:
        return await self._read_data(self.keys.airline_key(code))

    @timed(swallow=True)
    async def set_airline(self, code: str, data: Dict[str, Any]) -> None:
        await self._write(self.keys.airline_key(code), CacheField.DATA, json.dumps(data))

    @timed(swallow=True)
    async def set_unknown_airline(self, code: str) -> None:
        await self._write(
            self.keys.airline_key(code), CacheField.UNKNOWN, UnknownMarker.AIRLINE.value
        )
