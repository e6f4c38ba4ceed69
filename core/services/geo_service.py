"""
Geo service: reference location, distances, ETA and address resolution.

Location acquisition never fails from the caller's point of view. When the
position provider is missing, slow or broken, the configured default
coordinate is used and the reason is reported as a diagnostic.
"""

import asyncio
import logging
import math

from core.exceptions import GeocodeError, PositionUnavailableError
from core.models import Coordinate, LocationFix, ServiceLocation
from core.ports import Geocoder, PositionProvider

logger = logging.getLogger(__name__)

EARTH_RADIUS_MILES = 3959


def haversine_miles(a: Coordinate, b: Coordinate) -> float:
    """
    Great-circle distance between two coordinates in miles.

    Symmetric, and exactly 0.0 for identical coordinates.
    """
    if (a.lat, a.lng) == (b.lat, b.lng):
        return 0.0

    lat1, lat2 = math.radians(a.lat), math.radians(b.lat)
    d_lat = lat2 - lat1
    d_lng = math.radians(b.lng - a.lng)

    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_MILES * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


class GeoService:
    """Service for location acquisition, distance and geocoding."""

    def __init__(
        self,
        geocoder: Geocoder,
        default_location: Coordinate,
        position_provider: PositionProvider | None = None,
        timeout_seconds: float = 10.0,
        average_speed_mph: float = 30.0,
    ):
        self.geocoder = geocoder
        self.default_location = default_location
        self.position_provider = position_provider
        self.timeout_seconds = timeout_seconds
        self.average_speed_mph = average_speed_mph
        self.current_location: Coordinate | None = None

    async def acquire_location(self) -> LocationFix:
        """
        Read the live position, falling back to the default location.

        Never raises. The resulting coordinate becomes current_location.

        Returns:
            LocationFix with is_fallback/diagnostic set when the default was used
        """
        if self.position_provider is None:
            return self._fallback("Geolocation is not supported")

        try:
            coordinate = await asyncio.wait_for(
                self.position_provider.get_position(),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            return self._fallback(
                f"Timed out after {self.timeout_seconds:g}s waiting for position"
            )
        except PositionUnavailableError as e:
            return self._fallback(str(e))
        except Exception as e:
            logger.exception("Position provider failed unexpectedly")
            return self._fallback(str(e) or e.__class__.__name__)

        self.current_location = coordinate
        return LocationFix(coordinate=coordinate)

    def _fallback(self, diagnostic: str) -> LocationFix:
        logger.warning(f"Position unavailable, using default location: {diagnostic}")
        self.current_location = self.default_location
        return LocationFix(
            coordinate=self.default_location,
            is_fallback=True,
            diagnostic=diagnostic,
        )

    @staticmethod
    def distance(a: Coordinate, b: Coordinate) -> float:
        """Haversine distance in miles."""
        return haversine_miles(a, b)

    def eta_minutes(self, distance_miles: float) -> int:
        """Whole minutes to cover distance at the average speed, at least 1."""
        return max(1, math.ceil(distance_miles / self.average_speed_mph * 60))

    async def geocode(self, address_text: str) -> ServiceLocation:
        """
        Resolve free text to a service location.

        Args:
            address_text: Address as typed by the customer

        Returns:
            ServiceLocation carrying the normalized address text

        Raises:
            GeocodeError: If the text is empty or cannot be resolved
        """
        address = (address_text or "").strip()
        if not address:
            raise GeocodeError("Address is required")

        coordinate = await self.geocoder.resolve(address)
        if coordinate is None:
            logger.info(f"Geocoder found no match for '{address}'")
            raise GeocodeError(f"Could not resolve address '{address}'")

        return ServiceLocation(
            lat=coordinate.lat,
            lng=coordinate.lng,
            accuracy=coordinate.accuracy,
            address=address,
        )
