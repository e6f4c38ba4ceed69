"""
Geocoding clients implementing the Geocoder port.

NominatimGeocoder talks to a Nominatim-compatible search endpoint over HTTP.
SimulatedGeocoder scatters addresses around a center point for development.
"""

import asyncio
import json
import logging
import random

import requests

from core.exceptions import GeocodeError
from core.models import Coordinate

logger = logging.getLogger(__name__)


class GeocodingServiceError(GeocodeError):
    """Raised when the geocoding endpoint cannot be reached or misbehaves."""


class NominatimGeocoder:
    """Resolve addresses via a Nominatim-style `/search` endpoint."""

    def __init__(self, search_url: str, user_agent: str = "roadside-marketplace", timeout: float = 10):
        """
        Initialize with endpoint details.

        Args:
            search_url: Full URL of the search endpoint
            user_agent: User-Agent header, required by public Nominatim instances
            timeout: Request timeout in seconds

        Raises:
            ValueError: If search_url is empty
        """
        if not search_url:
            raise ValueError("search_url is required")

        self.search_url = search_url
        self.user_agent = user_agent
        self.timeout = timeout

    def lookup(self, address: str) -> Coordinate | None:
        """
        Blocking lookup of a single address.

        Returns:
            Best match, or None when the endpoint finds nothing

        Raises:
            GeocodingServiceError: On connection failure, non-200 status or bad payload
        """
        try:
            response = requests.get(
                self.search_url,
                params={"q": address, "format": "json", "limit": 1},
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Geocoder connection failed: {e}")
            raise GeocodingServiceError(f"Connection failed: {e}")

        if response.status_code != 200:
            logger.error(f"Geocoder returned HTTP {response.status_code}")
            raise GeocodingServiceError(f"Geocoder returned HTTP {response.status_code}")

        try:
            results = response.json()
        except json.JSONDecodeError:
            logger.error(f"Geocoder returned invalid JSON: {response.text}")
            raise GeocodingServiceError("Invalid response from geocoder")

        if not results:
            return None

        best = results[0]
        try:
            return Coordinate(lat=float(best["lat"]), lng=float(best["lon"]))
        except (KeyError, TypeError, ValueError) as e:
            raise GeocodingServiceError(f"Malformed geocoder result: {e}")

    async def resolve(self, address: str) -> Coordinate | None:
        """Run the blocking lookup off the event loop."""
        return await asyncio.to_thread(self.lookup, address)


class SimulatedGeocoder:
    """
    Deterministic stand-in geocoder.

    Every address resolves to a point within +/- spread/2 degrees of center,
    and the same address always resolves to the same point for a given seed.
    Latency is simulated with asyncio.sleep so callers exercise the await.
    """

    def __init__(
        self,
        center: Coordinate,
        seed: int | None = None,
        latency_seconds: float = 0.0,
        spread_degrees: float = 0.1,
    ):
        self.center = center
        self.seed = seed
        self.latency_seconds = latency_seconds
        self.spread_degrees = spread_degrees

    async def resolve(self, address: str) -> Coordinate | None:
        if self.latency_seconds:
            await asyncio.sleep(self.latency_seconds)

        rng = random.Random(f"{self.seed}:{address.strip().lower()}")
        return Coordinate(
            lat=self.center.lat + (rng.random() - 0.5) * self.spread_degrees,
            lng=self.center.lng + (rng.random() - 0.5) * self.spread_degrees,
        )
