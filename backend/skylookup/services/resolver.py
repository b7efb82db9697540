"""
Cache-aside resolution pipeline for aircraft, flightroutes and airlines.

Lookups go cache -> persistent store -> external resolver. Results and
confirmed misses are written back to the cache with a one week expiry, so
an identifier reaches the external sources at most once per week.

Photos are only fetched on the store path. A record served from cache is
returned as-is even when it has no photo, which bounds calls to the photo
source to one per aircraft per cache lifetime.
"""

import asyncio
import logging
import time
from typing import Any, Dict, Optional

from pydantic import ValidationError

from .. import __version__
from ..cache.store import ResolutionCache
from ..database.queries import PersistentStore
from ..models import (
    AircraftModel,
    AirlineCode,
    AirlineModel,
    Callsign,
    FlightrouteModel,
    Icao,
    ModeS,
)
from ..utils.errors import (
    InternalFailure,
    InvalidIdentifier,
    UnknownAircraft,
    UnknownAirline,
    UnknownCallsign,
)
from .n_number import mode_s_to_n_number, n_number_to_mode_s
from .scraper import ExternalResolver

logger = logging.getLogger(__name__)


def _callsign(value: object) -> Callsign:
    """Callsigns arrive in any case and are validated uppercase."""
    if not isinstance(value, str):
        raise InvalidIdentifier(Callsign.error_message)
    return Callsign(value.upper())



def _airline_code(value: object) -> AirlineCode:
    if not isinstance(value, str):
        raise InvalidIdentifier(AirlineCode.error_message)
    return AirlineCode(value.upper())


class ResolutionPipeline:
    """
    Resolves ModeS codes, callsigns and airline prefixes to records.

    Args:
        cache: Resolution cache
        store: Persistent store
        resolver: External photo and route resolver
    """

    def __init__(
        self,
        cache: ResolutionCache,
        store: PersistentStore,
        resolver: ExternalResolver,
    ):
        self.cache = cache
        self.store = store
        self.resolver = resolver
        self.started_at = time.monotonic()

    # Public operations

    async def resolve_aircraft(
        self, mode_s: str, callsign: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Resolve an aircraft, and its flightroute when a callsign is given.

        The flightroute lookup runs concurrently. A missing, malformed or
        unknown callsign yields ``flightroute: None`` rather than an error.

        Raises:
            InvalidIdentifier: If mode_s is malformed
            UnknownAircraft: If the aircraft is unknown
        """
        mode_s = ModeS(mode_s)
        flight_callsign = Callsign.parse(callsign.upper()) if isinstance(callsign, str) else None

        aircraft, flightroute = await asyncio.gather(
            self._aircraft(mode_s),
            self._optional_flightroute(flight_callsign),
            return_exceptions=True,
        )
        # both lookups have finished here; the aircraft error wins
        for outcome in (aircraft, flightroute):
            if isinstance(outcome, BaseException):
                raise outcome
        if aircraft is None:
            raise UnknownAircraft()
        return {"aircraft": aircraft, "flightroute": flightroute}

    async def resolve_flightroute(self, callsign: str) -> Dict[str, Any]:
        """
        Resolve a callsign to its flightroute.

        Raises:
            InvalidIdentifier: If callsign is malformed
            UnknownCallsign: If no route is known or can be scraped
        """
        return {"flightroute": await self._flightroute(_callsign(callsign))}

    async def resolve_n_number(self, n_number: str) -> Dict[str, str]:
        """Convert an N-Number to its ModeS; empty string when outside the US block."""
        return {"mode_s": n_number_to_mode_s(n_number) or ""}

    async def resolve_mode_s(self, mode_s: str) -> Dict[str, str]:
        """Convert a ModeS to its N-Number; empty string when outside the US block."""
        return {"n_number": mode_s_to_n_number(mode_s) or ""}

    async def resolve_airline(self, code: str) -> Dict[str, Any]:
        """
        Resolve an IATA or ICAO airline prefix to every matching operator.

        Raises:
            InvalidIdentifier: If code is neither 2 alphanumerics nor 3 letters
            UnknownAirline: If no operator uses the prefix
        """
        code = _airline_code(code)
        if await self.cache.has_airline(code):
            record = await self.cache.get_airline(code)
            if record is None:
                raise UnknownAirline()
            return record

        airlines = await self.store.select_airlines(code)
        if airlines is None:
            await self.cache.set_unknown_airline(code)
            raise UnknownAirline()

        try:
            record = {"airline": [AirlineModel.model_validate(a).model_dump() for a in airlines]}
        except ValidationError as e:
            logger.error(f"Malformed airline record for {code}: {e}")
            raise InternalFailure() from e
        await self.cache.set_airline(code, record)
        return record

    async def online(self, include_health: bool = False) -> Dict[str, Any]:
        """Report version and uptime, optionally with a ping of each store."""
        status: Dict[str, Any] = {
            "api_version": __version__,
            "uptime": int(time.monotonic() - self.started_at),
        }
        if include_health:
            cache_ok, database_ok = await asyncio.gather(
                self.cache.health_check(), self.store.health_check()
            )
            status["cache"] = "ok" if cache_ok else "unreachable"
            status["database"] = "ok" if database_ok else "unreachable"
        return status

    # Aircraft

    async def _aircraft(self, mode_s: ModeS) -> Optional[Dict[str, Any]]:
        if await self.cache.has_aircraft(mode_s):
            record = await self.cache.get_aircraft(mode_s)
            logger.debug(f"Cache hit for {mode_s}: {'data' if record else 'unknown'}")
            return self._aircraft_output(mode_s, record) if record else None

        record = await self.store.select_aircraft(mode_s)
        if record is None:
            await self.cache.set_unknown_aircraft(mode_s)
            return None

        if not record.get("url_photo"):
            await self._attach_photo(mode_s, record)

        await self.cache.set_aircraft(mode_s, record)
        return self._aircraft_output(mode_s, record)

    async def _attach_photo(self, mode_s: ModeS, record: Dict[str, Any]) -> None:
        """Fetch, persist and attach a photo; empty photo fields when none is stored."""
        photo = await self.resolver.fetch_photo(mode_s)
        if photo is not None:
            photo_id = await self.store.insert_photo(
                photo.url_photo, photo.url_photo_thumbnail, photo.photographer
            )
            if photo_id is None:
                photo = None
            else:
                await self.store.update_aircraft_photo(photo_id, record["aircraft_id"])
                logger.info(f"Attached photo {photo_id} to {mode_s}")

        record["url_photo"] = photo.url_photo if photo else ""
        record["url_photo_thumbnail"] = photo.url_photo_thumbnail if photo else ""

    def _aircraft_output(self, mode_s: ModeS, record: Dict[str, Any]) -> Dict[str, Any]:
        data = {key: value for key, value in record.items() if key != "aircraft_id"}
        data["n_number"] = mode_s_to_n_number(mode_s) or ""
        try:
            return AircraftModel.model_validate(data).model_dump()
        except ValidationError as e:
            logger.error(f"Malformed aircraft record for {data.get('mode_s')}: {e}")
            raise InternalFailure() from e

    # Flightroute

    async def _optional_flightroute(
        self, callsign: Optional[Callsign]
    ) -> Optional[Dict[str, Any]]:
        if callsign is None:
            return None
        try:
            return await self._flightroute(callsign)
        except UnknownCallsign:
            return None

    async def _flightroute(self, callsign: Callsign) -> Dict[str, Any]:
        if await self.cache.has_callsign(callsign):
            record = await self.cache.get_callsign(callsign)
            if record is None:
                raise UnknownCallsign()
            return self._flightroute_output(record)

        record = await self.store.select_flightroute(callsign)
        if record is None:
            record = await self._scrape_flightroute(callsign)
        if record is None:
            await self.cache.set_unknown_callsign(callsign)
            raise UnknownCallsign()

        await self.cache.set_callsign(callsign, record)
        return self._flightroute_output(record)

    async def _scrape_flightroute(self, callsign: Callsign) -> Optional[Dict[str, Any]]:
        """Scrape, insert and re-read a route; None when any step yields nothing."""
        route = await self.resolver.flightroute(callsign)
        if route is None or not route.is_complete:
            return None
        origin = Icao.parse(route.origin_icao)
        destination = Icao.parse(route.destination_icao)
        if origin is None or destination is None:
            return None

        await self.store.insert_flightroute(callsign, origin, destination)
        # re-read even after a failed insert, a concurrent lookup may have stored it
        return await self.store.select_flightroute(callsign)

    def _flightroute_output(self, record: Dict[str, Any]) -> Dict[str, Any]:
        try:
            return FlightrouteModel.model_validate(record).to_output()
        except ValidationError as e:
            logger.error(f"Malformed flightroute record for {record.get('callsign')}: {e}")
            raise InternalFailure() from e
