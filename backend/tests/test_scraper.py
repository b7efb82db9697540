"""
Tests for route extraction and the external photo and route sources.
"""

import httpx
import pytest

from skylookup.services import ExternalResolver, extract_route
from skylookup.services.scraper import ROUTE_SCAN_WINDOW, to_full_size
from skylookup.utils import AppConfig


class TestExtractRoute:
    """Test ICAO extraction from scraped text."""

    def test_origin_and_destination(self):
        text = '{"origin":{"code":{"icao":"EIDW"}},"destination":{"code":{"icao":"LEMD"}}}'
        route = extract_route(text)
        assert route.origin_icao == "EIDW"
        assert route.destination_icao == "LEMD"
        assert route.is_complete

    def test_three_letter_codes(self):
        route = extract_route('"icao":"YSS" then "icao":"KBO"')
        assert (route.origin_icao, route.destination_icao) == ("YSS", "KBO")

    def test_no_codes(self):
        route = extract_route("<html>nothing here</html>")
        assert route.origin_icao is None
        assert route.destination_icao is None
        assert not route.is_complete

    def test_origin_only(self):
        route = extract_route('{"icao":"EIDW"}')
        assert route.origin_icao == "EIDW"
        assert route.destination_icao is None

    def test_lowercase_codes_are_ignored(self):
        route = extract_route('"icao":"eidw","icao":"EGLL","icao":"LEMD"')
        assert (route.origin_icao, route.destination_icao) == ("EGLL", "LEMD")

    def test_destination_beyond_window(self):
        """Test a destination further than the scan window from the origin is not used."""
        text = '"icao":"EIDW"' + " " * ROUTE_SCAN_WINDOW + '"icao":"LEMD"'
        route = extract_route(text)
        assert route.origin_icao == "EIDW"
        assert route.destination_icao is None

    def test_destination_inside_window(self):
        text = '"icao":"EIDW"' + " " * (ROUTE_SCAN_WINDOW - 40) + '"icao":"LEMD"'
        assert extract_route(text).destination_icao == "LEMD"


class TestPhotoUrls:
    def test_full_size_from_thumbnail(self):
        assert to_full_size(
            "https://image.airport-data.com/aircraft/thumbnails/001234567.jpg"
        ) == "https://image.airport-data.com/aircraft/001234567.jpg"

    def test_empty(self):
        assert to_full_size("") == ""


class TestExternalResolver:
    """Test the HTTP sources through a mock transport."""

    @pytest.mark.asyncio
    async def test_fetch_photo(self, external_resolver, external_sources):
        photo = await external_resolver.fetch_photo("A7E152")

        assert photo.url_photo == "https://image.airport-data.com/aircraft/001234567.jpg"
        assert photo.url_photo_thumbnail == "https://image.airport-data.com/aircraft/thumbnails/001234567.jpg"
        assert photo.photographer == "Jane Spotter"

        request = external_sources.requests[0]
        assert request.url.host == "airport-data.com"
        assert request.url.path == "/api/ac_thumb.json"
        assert request.url.params["m"] == "A7E152"
        assert request.url.params["n"] == "1"

    @pytest.mark.asyncio
    async def test_photo_not_found_payload(self, external_resolver):
        """Test a 200 response carrying a non-200 status means no photo."""
        assert await external_resolver.fetch_photo("4247E3") is None

    @pytest.mark.asyncio
    async def test_photo_http_error(self, external_resolver, external_sources):
        external_sources.photo_status = 500
        assert await external_resolver.fetch_photo("A7E152") is None

    @pytest.mark.asyncio
    async def test_photo_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            resolver = ExternalResolver("https://routes.example.com", "https://photos.example.com", client=client)
            assert await resolver.fetch_photo("A7E152") is None
            assert await resolver.flightroute("RYR544") is None

    @pytest.mark.asyncio
    async def test_photo_invalid_json(self):
        def handler(request):
            return httpx.Response(200, text="<html>")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            resolver = ExternalResolver("https://routes.example.com", "https://photos.example.com", client=client)
            assert await resolver.fetch_photo("A7E152") is None

    @pytest.mark.asyncio
    async def test_flightroute(self, external_resolver, external_sources):
        route = await external_resolver.flightroute("RYR544")

        assert route.origin_icao == "EIDW"
        assert route.destination_icao == "LEMD"
        assert external_sources.requests[0].url.path == "/data/flights/RYR544"

    @pytest.mark.asyncio
    async def test_flightroute_not_found(self, external_resolver):
        assert await external_resolver.fetch_route_text("ZZZ999") is None
        assert await external_resolver.flightroute("ZZZ999") is None

    def test_from_app_config(self):
        config = AppConfig(url_callsign="https://routes.example.com/flights/", photo_timeout_seconds=0.5)
        resolver = ExternalResolver.from_app_config(config)
        assert resolver.url_callsign == "https://routes.example.com/flights"
        assert resolver.photo_timeout == 0.5
        assert resolver.route_timeout == 2.5

    @pytest.mark.asyncio
    async def test_aclose_closes_client(self, external_resolver, http_client):
        await external_resolver.aclose()
        assert http_client.is_closed
