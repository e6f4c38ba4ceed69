"""Shared test fixtures for the marketplace test suite."""

import pytest

from clients.geocoding_client import SimulatedGeocoder
from clients.memory_store import InMemoryKeyValueStore
from core.config import MarketplaceConfig
from core.event_bus import EventBus
from core.handlers.scheduler_handlers import register_scheduler_handlers
from core.models import BookingInput, Provider, ServiceLocation, Vehicle
from core.scheduler import ElapsedTimeScheduler
from core.services.catalog_service import CatalogService
from core.services.geo_service import GeoService
from core.services.history_store import HistoryStore
from core.services.lifecycle_service import RequestLifecycle
from factories import NYC, TEST_CUSTOMER_ID, FakeClock, make_provider


# =============================================================================
# CLOCK AND DATA
# =============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def provider() -> Provider:
    return make_provider()


@pytest.fixture
def service_location() -> ServiceLocation:
    return ServiceLocation(lat=NYC.lat, lng=NYC.lng, address="1 Centre St, New York")


@pytest.fixture
def booking_input(provider, service_location):
    """Factory for BookingInput with sensible defaults."""

    def _make(**overrides) -> BookingInput:
        data = {
            "customer_id": TEST_CUSTOMER_ID,
            "service_category": "tire",
            "provider": provider,
            "location": service_location,
            "vehicle": Vehicle(make="Honda", model="Civic", year="2019", color="Blue", plate="ABC1234"),
        }
        data.update(overrides)
        return BookingInput(**data)

    return _make


# =============================================================================
# SERVICE FIXTURES: in-memory collaborators, no network
# =============================================================================


@pytest.fixture
def config() -> MarketplaceConfig:
    return MarketplaceConfig(
        provider_seed=42,
        geocode_latency_seconds=0,
        payment_latency_seconds=0,
    )


@pytest.fixture
def kv() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def store(kv) -> HistoryStore:
    return HistoryStore(kv)


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def catalog() -> CatalogService:
    return CatalogService()


@pytest.fixture
def geo() -> GeoService:
    return GeoService(
        geocoder=SimulatedGeocoder(center=NYC, seed=7),
        default_location=NYC,
    )


@pytest.fixture
def lifecycle(store, catalog, event_bus, clock) -> RequestLifecycle:
    """Lifecycle with no scheduler attached."""
    return RequestLifecycle(store, catalog, event_bus, clock=clock)


@pytest.fixture
def scheduler(lifecycle, geo, event_bus, clock, config) -> ElapsedTimeScheduler:
    """Scheduler wired to the lifecycle through the event bus."""
    scheduler = ElapsedTimeScheduler(
        lifecycle=lifecycle,
        geo=geo,
        thresholds_minutes=config.progression_thresholds_minutes,
        clock=clock,
        seed=3,
    )
    register_scheduler_handlers(event_bus, scheduler)
    return scheduler
