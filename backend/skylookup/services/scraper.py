"""
External resolver: best-effort photo lookup and route scraping.

Both fetches are bounded by short timeouts. Any network fault, bad status or
unexpected payload is logged and reported as "no result" so the caller can
continue with what the stores already hold.
"""

import logging
import re
from typing import Optional

import httpx

from ..models import AircraftPhotoModel, ScrapedRoute
from ..utils.config import AppConfig
from ..utils.errors import ExternalResolverFailure
from ..utils.timing import timed

logger = logging.getLogger(__name__)

ICAO_PATTERN = re.compile(r'"icao":"([A-Z]{3,4})"')
# destination must appear within this many characters of the origin match
ROUTE_SCAN_WINDOW = 1500

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json; charset=utf-8",
    "Cache-Control": "no-cache",
}


def extract_route(text: str) -> ScrapedRoute:
    """
    Extract origin and destination ICAO codes from scraped route text.

    The first ``"icao":"XXXX"`` occurrence is the origin, the next one within
    the scan window is the destination.

    Args:
        text: Raw page or JSON text

    Returns:
        ScrapedRoute with either side None when not found
    """
    origin = ICAO_PATTERN.search(text)
    if origin is None:
        return ScrapedRoute()
    window = text[origin.start():origin.start() + ROUTE_SCAN_WINDOW]
    destination = ICAO_PATTERN.search(window, origin.end() - origin.start())
    return ScrapedRoute(
        origin_icao=origin.group(1),
        destination_icao=destination.group(1) if destination else None,
    )


def to_full_size(url: str) -> str:
    return url.replace("/thumbnails/", "/") if url else ""


class ExternalResolver:
    """Async HTTP client for the route and photo sources."""

    def __init__(
        self,
        url_callsign: str,
        url_aircraft_photo: str,
        route_timeout: float = 2.5,
        photo_timeout: float = 1.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.url_callsign = url_callsign.rstrip("/")
        self.url_aircraft_photo = url_aircraft_photo.rstrip("/")
        self.route_timeout = route_timeout
        self.photo_timeout = photo_timeout
        self._client = client

    @classmethod
    def from_app_config(
        cls, config: AppConfig, client: Optional[httpx.AsyncClient] = None
    ) -> "ExternalResolver":
        return cls(
            url_callsign=config.url_callsign,
            url_aircraft_photo=config.url_aircraft_photo,
            route_timeout=config.route_timeout_seconds,
            photo_timeout=config.photo_timeout_seconds,
            client=client,
        )

    def _get_client(self) -> httpx.AsyncClient:
        """Return a reusable httpx client (lazy init)."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(headers=DEFAULT_HEADERS)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def _get(self, url: str, timeout: float, **kwargs) -> httpx.Response:
        try:
            response = await self._get_client().get(url, timeout=timeout, **kwargs)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ExternalResolverFailure(f"GET {url} failed: {type(e).__name__}") from e
        return response

    @timed(swallow=True, name="scraper.fetch_route_text")
    async def fetch_route_text(self, callsign: str) -> Optional[str]:
        response = await self._get(f"{self.url_callsign}/{callsign}", self.route_timeout)
        return response.text or None

    @timed(swallow=True, name="scraper.fetch_photo")
    async def fetch_photo(self, mode_s: str) -> Optional[AircraftPhotoModel]:
        """
        Look up one photo for an aircraft.

        Args:
            mode_s: Uppercase ModeS

        Returns:
            Photo with full size URL derived from the thumbnail, or None
        """
        response = await self._get(
            f"{self.url_aircraft_photo}/ac_thumb.json",
            self.photo_timeout,
            params={"m": mode_s, "n": 1},
        )
        try:
            payload = response.json()
        except ValueError as e:
            raise ExternalResolverFailure("Photo source returned invalid JSON") from e

        if not isinstance(payload, dict) or payload.get("status") != 200:
            return None
        items = payload.get("data") or []
        first = items[0] if isinstance(items, list) and items else None
        if not isinstance(first, dict) or not first.get("image"):
            return None

        thumbnail = first["image"]
        return AircraftPhotoModel(
            url_photo=to_full_size(thumbnail),
            url_photo_thumbnail=thumbnail,
            photographer=first.get("photographer"),
        )

    async def flightroute(self, callsign: str) -> Optional[ScrapedRoute]:
        """Fetch route text for a callsign and extract its ICAO codes."""
        text = await self.fetch_route_text(callsign)
        if not text:
            return None
        route = extract_route(text)
        logger.debug(
            f"Scraped {callsign}: origin={route.origin_icao} destination={route.destination_icao}"
        )
        return route
