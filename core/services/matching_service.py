"""Matching engine: nearby providers for a service category."""

import logging

from core.models import Coordinate, Provider
from core.services.geo_service import GeoService
from core.services.provider_directory import ProviderDirectory

logger = logging.getLogger(__name__)


class MatchingEngine:
    """Filters and ranks directory results around the customer's location."""

    def __init__(self, directory: ProviderDirectory, geo: GeoService, default_radius_miles: float = 10.0):
        self.directory = directory
        self.geo = geo
        self.default_radius_miles = default_radius_miles

    def find_nearby_workers(
        self,
        category: str | None = None,
        radius_miles: float | None = None,
        origin: Coordinate | None = None,
    ) -> list[Provider]:
        """
        Providers near the customer, closest first.

        Args:
            category: Service category, None for any
            radius_miles: Search radius, defaults to the configured radius
            origin: Search center, defaults to the geo service's current location

        Returns:
            Ranked provider snapshots. Empty when there is no known location
            or nothing matches; callers render an explicit "no providers" state.
        """
        origin = origin or self.geo.current_location
        if origin is None:
            logger.info("No reference location yet, returning no providers")
            return []

        radius = self.default_radius_miles if radius_miles is None else radius_miles
        if radius < 0:
            raise ValueError(f"Search radius must be non-negative, got {radius}")

        return self.directory.find_candidates(category, origin, radius)

    def select_provider(self, provider_id: str, origin: Coordinate | None = None) -> Provider | None:
        """
        Resolve a chosen provider into a booking snapshot.

        Returns:
            Snapshot measured from origin, or None if unknown, offline, or no
            location is known.
        """
        origin = origin or self.geo.current_location
        provider = self.directory.get(provider_id)
        if provider is None or not provider.online or origin is None:
            return None
        return self.directory.snapshot(provider, origin)
