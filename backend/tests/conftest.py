"""
Shared fixtures for the lookup service tests.

Provides an in-memory async Valkey double, a seeded in-memory SQLite
persistent store and an httpx mock transport for the external sources.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio
from sqlalchemy import insert
from valkey.exceptions import ConnectionError as ValkeyConnectionRefused

from skylookup.cache import ResolutionCache, ValkeyClient, ValkeyConfig
from skylookup.database import (
    Aircraft,
    AircraftPhoto,
    Airline,
    Airport,
    Country,
    DatabaseConfig,
    Flightroute,
    FlightrouteCallsign,
    PersistentStore,
)
from skylookup.services import ExternalResolver, RateLimiter, ResolutionPipeline


class FakeValkey:
    """
    In-memory stand-in for ``valkey.asyncio.Valkey``.

    Implements the commands the service issues with decoded (str) responses.
    Time only moves when ``advance`` is called.
    """

    def __init__(self):
        self.data: Dict[str, Any] = {}
        self.expiry: Dict[str, float] = {}
        self.now = 0.0
        self.fail = False
        self.commands: List[str] = []
        self.closed = False

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def _check(self, name: str) -> None:
        if self.fail:
            raise ValkeyConnectionRefused("Connection refused")
        self.commands.append(name)

    def _purge(self, key: str) -> None:
        deadline = self.expiry.get(key)
        if deadline is not None and deadline <= self.now:
            self.data.pop(key, None)
            self.expiry.pop(key, None)

    def _alive(self, key: str) -> bool:
        self._purge(key)
        return key in self.data

    async def ping(self) -> bool:
        self._check("PING")
        return True

    async def aclose(self) -> None:
        self.closed = True

    async def exists(self, *keys: str) -> int:
        self._check("EXISTS")
        return sum(1 for key in keys if self._alive(key))

    async def hget(self, key: str, field: str) -> Optional[str]:
        self._check("HGET")
        if not self._alive(key):
            return None
        return self.data[key].get(field)

    async def hgetall(self, key: str) -> Dict[str, str]:
        self._check("HGETALL")
        return dict(self.data[key]) if self._alive(key) else {}

    async def hset(self, key: str, field: str, value: Any) -> int:
        self._check("HSET")
        if not self._alive(key):
            self.data[key] = {}
        created = field not in self.data[key]
        self.data[key][field] = str(value)
        return int(created)

    async def expire(self, key: str, seconds: int) -> bool:
        self._check("EXPIRE")
        if not self._alive(key):
            return False
        self.expiry[key] = self.now + seconds
        return True

    async def ttl(self, key: str) -> int:
        self._check("TTL")
        if not self._alive(key):
            return -2
        if key not in self.expiry:
            return -1
        return int(round(self.expiry[key] - self.now))

    async def pttl(self, key: str) -> int:
        self._check("PTTL")
        if not self._alive(key):
            return -2
        if key not in self.expiry:
            return -1
        return int(round((self.expiry[key] - self.now) * 1000))

    async def get(self, key: str) -> Optional[str]:
        self._check("GET")
        return self.data[key] if self._alive(key) else None

    async def set(self, key: str, value: Any, ex: Optional[int] = None, nx: bool = False):
        self._check("SET")
        if nx and self._alive(key):
            return None
        self.data[key] = str(value)
        if ex is not None:
            self.expiry[key] = self.now + ex
        else:
            self.expiry.pop(key, None)
        return True

    async def incrby(self, key: str, amount: int) -> int:
        self._check("INCRBY")
        current = int(self.data[key]) if self._alive(key) else 0
        self.data[key] = str(current + amount)
        return current + amount

    def pipeline(self, transaction: bool = True) -> "FakePipeline":
        return FakePipeline(self)


class FakePipeline:
    """Buffers commands and runs them back to back on ``execute``."""

    def __init__(self, valkey: FakeValkey):
        self._valkey = valkey
        self._queue: List[Any] = []

    def __getattr__(self, name: str):
        command = getattr(self._valkey, name)

        def buffer(*args: Any, **kwargs: Any) -> "FakePipeline":
            self._queue.append((command, args, kwargs))
            return self

        return buffer

    async def execute(self) -> List[Any]:
        results = []
        for command, args, kwargs in self._queue:
            results.append(await command(*args, **kwargs))
        self._queue = []
        return results

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self._queue = []


# Photo and route payloads served by the mock transport

PHOTO_THUMBNAIL = "https://image.airport-data.com/aircraft/thumbnails/001234567.jpg"
PHOTO_FULL = "https://image.airport-data.com/aircraft/001234567.jpg"

ROUTE_TEXT = {
    "RYR544": (
        '{"flight":{"identification":{"callsign":"RYR544"},'
        '"airport":{"origin":{"code":{"icao":"EIDW","iata":"DUB"}},'
        '"destination":{"code":{"icao":"LEMD","iata":"MAD"}}}}}'
    ),
    "RYR1ORG": '{"airport":{"origin":{"code":{"icao":"EIDW"}}}}',
    "AAL100": (
        '{"airport":{"origin":{"code":{"icao":"KJFK"}},'
        '"destination":{"code":{"icao":"EGLL"}}}}'
    ),
}


class ExternalSources:
    """Mock photo and route sources; records every request."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.photo_status = 200
        self.photos: Dict[str, str] = {"A7E152": PHOTO_THUMBNAIL}

    def count(self, path_fragment: str) -> int:
        return sum(1 for r in self.requests if path_fragment in r.url.path)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/ac_thumb.json"):
            if self.photo_status != 200:
                return httpx.Response(self.photo_status)
            mode_s = request.url.params.get("m")
            image = self.photos.get(mode_s)
            if image is None:
                return httpx.Response(200, json={"status": 404, "error": "Aircraft thumbnail not found."})
            return httpx.Response(200, json={
                "status": 200,
                "count": 1,
                "data": [{
                    "image": image,
                    "link": "https://airport-data.com/aircraft/photo/001234567.html",
                    "photographer": "Jane Spotter",
                }],
            })
        callsign = request.url.path.rsplit("/", 1)[-1]
        text = ROUTE_TEXT.get(callsign)
        if text is None:
            return httpx.Response(404, text="not found")
        return httpx.Response(200, text=text)


# Seed data

COUNTRIES = [
    {"country_id": 1, "country_name": "United States", "country_iso_name": "US"},
    {"country_id": 2, "country_name": "United Kingdom", "country_iso_name": "GB"},
    {"country_id": 3, "country_name": "Ireland", "country_iso_name": "IE"},
    {"country_id": 4, "country_name": "Spain", "country_iso_name": "ES"},
    {"country_id": 5, "country_name": "Italy", "country_iso_name": "IT"},
    {"country_id": 6, "country_name": "Albania", "country_iso_name": "AL"},
    {"country_id": 7, "country_name": "Mongolia", "country_iso_name": "MN"},
]

AIRPORTS = [
    {
        "airport_id": 1, "icao_code": "EGLL", "iata_code": "LHR", "name": "London Heathrow Airport",
        "municipality": "London", "country_id": 2, "elevation": 83,
        "latitude": Decimal("51.470600"), "longitude": Decimal("-0.461941"),
    },
    {
        "airport_id": 2, "icao_code": "LEMD", "iata_code": "MAD",
        "name": "Adolfo Suarez Madrid-Barajas Airport", "municipality": "Madrid",
        "country_id": 4, "elevation": 1998,
        "latitude": Decimal("40.471926"), "longitude": Decimal("-3.562640"),
    },
    {
        "airport_id": 3, "icao_code": "EIDW", "iata_code": "DUB", "name": "Dublin Airport",
        "municipality": "Dublin", "country_id": 3, "elevation": 242,
        "latitude": Decimal("53.421299"), "longitude": Decimal("-6.270070"),
    },
    {
        "airport_id": 4, "icao_code": "LIRF", "iata_code": "FCO",
        "name": "Leonardo da Vinci-Fiumicino Airport", "municipality": "Rome",
        "country_id": 5, "elevation": 13,
        "latitude": Decimal("41.804532"), "longitude": Decimal("12.251998"),
    },
]

PHOTOS = [
    {
        "aircraft_photo_id": 1,
        "url_photo": "https://image.airport-data.com/aircraft/000000001.jpg",
        "url_photo_thumbnail": "https://image.airport-data.com/aircraft/thumbnails/000000001.jpg",
        "photographer": "John Spotter",
    },
]

AIRCRAFT = [
    {
        "aircraft_id": 1, "mode_s": "A7E152", "registered_owner": "Federal Express Corp",
        "operator_flag_code": "FDX", "country_id": 1, "manufacturer": "Boeing",
        "type": "777 FS2", "icao_type": "B77L", "aircraft_photo_id": None,
    },
    {
        "aircraft_id": 2, "mode_s": "4247E3", "registered_owner": "Titan Airways",
        "operator_flag_code": "AWC", "country_id": 2, "manufacturer": "Airbus",
        "type": "A321 211", "icao_type": "A321", "aircraft_photo_id": 1,
    },
]

AIRLINES = [
    {
        "airline_id": 1, "airline_name": "easyJet", "country_id": 2,
        "iata_prefix": "U2", "icao_prefix": "EZY", "airline_callsign": "EASY",
    },
    {
        "airline_id": 2, "airline_name": "Eznis Airways", "country_id": 7,
        "iata_prefix": "ZY", "icao_prefix": "EZA", "airline_callsign": "EZNIS",
    },
    {
        "airline_id": 3, "airline_name": "Ada Air", "country_id": 6,
        "iata_prefix": "ZY", "icao_prefix": "ADE", "airline_callsign": "ADA AIR",
    },
    {
        "airline_id": 4, "airline_name": "Jota Aviation", "country_id": 2,
        "iata_prefix": None, "icao_prefix": "ENZ", "airline_callsign": None,
    },
]

CALLSIGNS = [
    {"flightroute_callsign_id": 1, "callsign": "EIN154"},
    {"flightroute_callsign_id": 2, "callsign": "BAW560"},
]

FLIGHTROUTES = [
    {
        "flightroute_id": 1, "flightroute_callsign_id": 1,
        "airport_origin_id": 3, "airport_midpoint_id": None, "airport_destination_id": 1,
    },
    {
        "flightroute_id": 2, "flightroute_callsign_id": 2,
        "airport_origin_id": 1, "airport_midpoint_id": 2, "airport_destination_id": 4,
    },
]


async def seed_database(db: DatabaseConfig) -> None:
    async with db.session() as session:
        async with session.begin():
            for model, rows in (
                (Country, COUNTRIES),
                (Airport, AIRPORTS),
                (Airline, AIRLINES),
                (AircraftPhoto, PHOTOS),
                (Aircraft, AIRCRAFT),
                (FlightrouteCallsign, CALLSIGNS),
                (Flightroute, FLIGHTROUTES),
            ):
                await session.execute(insert(model), rows)


@pytest.fixture
def fake_valkey():
    """Fresh in-memory Valkey double."""
    return FakeValkey()


@pytest.fixture
def valkey_client(fake_valkey):
    """ValkeyClient wrapping the in-memory double."""
    return ValkeyClient(ValkeyConfig(host="localhost", port=6379, database=15), client=fake_valkey)


@pytest.fixture
def resolution_cache(valkey_client):
    return ResolutionCache(valkey_client)


@pytest.fixture
def rate_limiter(valkey_client):
    return RateLimiter(valkey_client)


@pytest_asyncio.fixture
async def database():
    """In-memory SQLite database with seeded aircraft, airports, airlines and routes."""
    db = DatabaseConfig("sqlite+aiosqlite://")
    await db.create_tables()
    await seed_database(db)
    yield db
    await db.dispose()


@pytest.fixture
def persistent_store(database):
    return PersistentStore(database)


@pytest.fixture
def external_sources():
    return ExternalSources()


@pytest_asyncio.fixture
async def http_client(external_sources):
    client = httpx.AsyncClient(transport=httpx.MockTransport(external_sources))
    yield client
    await client.aclose()


@pytest.fixture
def external_resolver(http_client):
    return ExternalResolver(
        url_callsign="https://routes.example.com/data/flights",
        url_aircraft_photo="https://airport-data.com/api",
        client=http_client,
    )


@pytest.fixture
def pipeline(resolution_cache, persistent_store, external_resolver):
    """Resolution pipeline wired to the doubles."""
    return ResolutionPipeline(resolution_cache, persistent_store, external_resolver)

