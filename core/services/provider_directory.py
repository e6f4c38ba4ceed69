"""
Provider directory: the pool of candidate providers and proximity queries.

The pool is produced by a seeded ProviderFactory so the same seed always
yields the same providers. Distances are never cached: every query
recomputes them from the provider's stored location and the given origin.
"""

import logging
import random

from core.models import Coordinate, Provider
from core.services.geo_service import GeoService, haversine_miles

logger = logging.getLogger(__name__)

PROVIDER_NAMES = (
    "Alex Johnson", "Maria Garcia", "David Chen",
    "Sarah Wilson", "Mike Rodriguez", "Lisa Thompson",
)

PROVIDER_CATEGORIES = ("mechanic", "lockout", "tire", "jumpstart", "towing")

SPECIALTIES = (
    "Tire Change", "Jump Start", "Lockout", "Fuel Delivery",
    "Battery Replacement", "Brake Repair", "Engine Diagnostics",
    "Towing", "Flat Tire Repair", "Key Programming",
)


class ProviderFactory:
    """Generates mock providers scattered around an origin."""

    def __init__(self, seed: int | None = None, spread_degrees: float = 0.1, online_ratio: float = 0.7):
        self._rng = random.Random(seed)
        self.spread_degrees = spread_degrees
        self.online_ratio = online_ratio

    def generate(self, origin: Coordinate, count: int = 8) -> list[Provider]:
        """
        Generate count providers within +/- spread/2 degrees of origin.

        Args:
            origin: Center of the generated pool
            count: Number of providers

        Returns:
            Providers with ids worker_1..worker_<count>
        """
        rng = self._rng
        providers = []
        for i in range(count):
            location = Coordinate(
                lat=origin.lat + (rng.random() - 0.5) * self.spread_degrees,
                lng=origin.lng + (rng.random() - 0.5) * self.spread_degrees,
            )
            providers.append(Provider(
                id=f"worker_{i + 1}",
                name=PROVIDER_NAMES[i % len(PROVIDER_NAMES)],
                category=rng.choice(PROVIDER_CATEGORIES),
                rating=round(4.0 + rng.random(), 1),
                distance_miles=round(haversine_miles(origin, location), 1),
                eta_minutes=rng.randint(5, 24),
                price_cents=rng.randint(50, 149) * 100,
                location=location,
                online=rng.random() < self.online_ratio,
                completed_jobs=rng.randint(100, 599),
                specialties=frozenset(rng.sample(SPECIALTIES, rng.randint(2, 5))),
            ))
        return providers


class ProviderDirectory:
    """Holds the provider pool and answers proximity+category queries."""

    def __init__(self, geo: GeoService, factory: ProviderFactory | None = None):
        self.geo = geo
        self.factory = factory or ProviderFactory()
        self._providers: dict[str, Provider] = {}

    def populate(self, origin: Coordinate, count: int = 8) -> list[Provider]:
        """
        Replace the pool with freshly generated providers around origin.

        Returns:
            The new pool
        """
        providers = self.factory.generate(origin, count)
        self._providers = {p.id: p for p in providers}
        logger.info(
            f"Provider pool populated with {len(providers)} providers "
            f"({sum(p.online for p in providers)} online)"
        )
        return providers

    def register(self, provider: Provider) -> None:
        """Add or replace a provider."""
        self._providers[provider.id] = provider

    def get(self, provider_id: str) -> Provider | None:
        return self._providers.get(provider_id)

    def all(self) -> list[Provider]:
        """Every provider, online or not, ordered by id."""
        return sorted(self._providers.values(), key=lambda p: p.id)

    def set_online(self, provider_id: str, online: bool) -> Provider:
        """
        Toggle a provider's availability.

        Raises:
            ValueError: If provider not found
        """
        provider = self._providers.get(provider_id)
        if provider is None:
            raise ValueError(f"Provider {provider_id} not found")

        updated = provider.model_copy(update={"online": online})
        self._providers[provider_id] = updated
        return updated

    def snapshot(self, provider: Provider, origin: Coordinate) -> Provider:
        """Copy of provider with distance and ETA measured from origin."""
        distance = self.geo.distance(origin, provider.location)
        return provider.model_copy(update={
            "distance_miles": round(distance, 1),
            "eta_minutes": self.geo.eta_minutes(distance),
        })

    def find_candidates(
        self,
        category: str | None,
        origin: Coordinate,
        radius_miles: float,
    ) -> list[Provider]:
        """
        Online providers of a category within radius of origin.

        Args:
            category: Required category, None for any
            origin: Point distances are measured from
            radius_miles: Inclusive search radius

        Returns:
            Snapshots ordered by distance, then rating (desc), then id.
            Empty when nothing matches.
        """
        matches = []
        for provider in self._providers.values():
            if not provider.online:
                continue
            if category is not None and provider.category != category:
                continue

            distance = self.geo.distance(origin, provider.location)
            if distance <= radius_miles:
                matches.append((distance, provider))

        matches.sort(key=lambda m: (m[0], -m[1].rating, m[1].id))
        return [self.snapshot(provider, origin) for _, provider in matches]
