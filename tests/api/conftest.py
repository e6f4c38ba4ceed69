"""API test fixtures: the real app over in-memory services and a synthetic clock."""

import pytest
from starlette.testclient import TestClient

from api.app import create_app
from core.models import Coordinate
from core.wiring import build_services
from factories import NYC, FakeClock, make_provider

# Roughly 2.9 miles due north of NYC
TEST_PROVIDER_LOCATION = Coordinate(lat=NYC.lat + 2.9 / 69.09, lng=NYC.lng)


# =============================================================================
# SERVICES
# =============================================================================


@pytest.fixture
def api_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def services(config, api_clock):
    """Full service graph with one known tire provider registered."""
    services = build_services(config, clock=api_clock)
    services["directory"].register(
        make_provider("worker_test", "tire", location=TEST_PROVIDER_LOCATION, rating=4.9)
    )
    services["directory"].register(
        make_provider("worker_offline", "tire", location=TEST_PROVIDER_LOCATION, online=False)
    )
    return services


# =============================================================================
# APP & CLIENT FIXTURES
# =============================================================================


@pytest.fixture
def app(config, services):
    """App with middleware, error handlers and all routers."""
    return create_app(config, services)


@pytest.fixture
def client(app):
    """Test client without lifespan: the scheduler loop is not started."""
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def booking_body():
    """Factory for a valid booking payload."""

    def _make(**overrides) -> dict:
        body = {
            "customer_id": "customer-1",
            "service_category": "tire",
            "provider_id": "worker_test",
            "location": {"lat": NYC.lat, "lng": NYC.lng, "address": "1 Centre St"},
            "vehicle": {"make": "Honda", "model": "Civic", "year": "2019"},
        }
        body.update(overrides)
        return body

    return _make
