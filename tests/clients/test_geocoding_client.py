"""
Tests for the geocoding clients.

NominatimGeocoder is exercised with the responses library for HTTP mocking.
"""

import asyncio

import pytest
import requests
import responses
from responses import matchers

from clients.geocoding_client import GeocodingServiceError, NominatimGeocoder, SimulatedGeocoder
from core.exceptions import GeocodeError
from factories import NYC

SEARCH_URL = "https://geocoder.example.com/search"


class TestNominatimGeocoderInit:
    """Fail-fast on invalid config."""

    def test_rejects_empty_url(self):
        with pytest.raises(ValueError, match="search_url"):
            NominatimGeocoder("")


class TestLookup:
    """Test lookup against a mocked endpoint."""

    @pytest.fixture
    def client(self):
        return NominatimGeocoder(SEARCH_URL, user_agent="test-agent")

    @responses.activate
    def test_returns_first_match(self, client):
        """Query parameters and User-Agent are sent; first result wins."""
        responses.add(
            responses.GET,
            SEARCH_URL,
            json=[
                {"lat": "40.7484", "lon": "-73.9857", "display_name": "Empire State Building"},
                {"lat": "0", "lon": "0"},
            ],
            status=200,
            match=[
                matchers.query_param_matcher({"q": "350 5th Ave", "format": "json", "limit": "1"}),
                matchers.header_matcher({"User-Agent": "test-agent"}),
            ],
        )

        coordinate = client.lookup("350 5th Ave")

        assert coordinate.lat == pytest.approx(40.7484)
        assert coordinate.lng == pytest.approx(-73.9857)

    @responses.activate
    def test_no_match_returns_none(self, client):
        responses.add(responses.GET, SEARCH_URL, json=[], status=200)
        assert client.lookup("Nowhere") is None

    @responses.activate
    def test_server_error_raises(self, client):
        responses.add(responses.GET, SEARCH_URL, json={"error": "down"}, status=503)

        with pytest.raises(GeocodingServiceError, match="503"):
            client.lookup("350 5th Ave")

    @responses.activate
    def test_connection_failure_raises(self, client):
        responses.add(
            responses.GET,
            SEARCH_URL,
            body=requests.exceptions.ConnectionError("Network unreachable"),
        )

        with pytest.raises(GeocodingServiceError, match="Connection failed"):
            client.lookup("350 5th Ave")

    @responses.activate
    def test_invalid_json_raises(self, client):
        responses.add(responses.GET, SEARCH_URL, body="not json", status=200)

        with pytest.raises(GeocodingServiceError, match="Invalid response"):
            client.lookup("350 5th Ave")

    @responses.activate
    def test_malformed_result_raises(self, client):
        responses.add(responses.GET, SEARCH_URL, json=[{"display_name": "x"}], status=200)

        with pytest.raises(GeocodingServiceError, match="Malformed"):
            client.lookup("350 5th Ave")

    @responses.activate
    def test_resolve_runs_lookup(self, client):
        responses.add(responses.GET, SEARCH_URL, json=[{"lat": "1.5", "lon": "2.5"}], status=200)

        coordinate = asyncio.run(client.resolve("Somewhere"))

        assert (coordinate.lat, coordinate.lng) == (1.5, 2.5)

    def test_service_error_is_a_geocode_error(self):
        assert issubclass(GeocodingServiceError, GeocodeError)


class TestSimulatedGeocoder:
    """Deterministic stand-in geocoder."""

    def test_within_spread_of_center(self):
        geocoder = SimulatedGeocoder(center=NYC, seed=1, spread_degrees=0.1)

        for address in ("1 Main St", "2 Main St", "3 Main St"):
            coordinate = asyncio.run(geocoder.resolve(address))
            assert abs(coordinate.lat - NYC.lat) <= 0.05
            assert abs(coordinate.lng - NYC.lng) <= 0.05

    def test_same_address_same_point(self):
        geocoder = SimulatedGeocoder(center=NYC, seed=1)

        first = asyncio.run(geocoder.resolve("1 Main St"))
        second = asyncio.run(geocoder.resolve("  1 MAIN ST "))

        assert first == second

    def test_different_seeds_differ(self):
        a = asyncio.run(SimulatedGeocoder(center=NYC, seed=1).resolve("1 Main St"))
        b = asyncio.run(SimulatedGeocoder(center=NYC, seed=2).resolve("1 Main St"))

        assert a != b
