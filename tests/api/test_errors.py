"""Tests for the global exception handlers."""

from uuid import uuid4

import pytest
from fastapi import FastAPI
from starlette.testclient import TestClient

from api.errors import register_error_handlers
from api.middleware import RequestIDMiddleware
from core.exceptions import (
    AlreadyActiveError,
    AlreadyRatedError,
    AlreadyTippedError,
    GeocodeError,
    InvalidTransitionError,
    MarketplaceError,
    NoLocationError,
    NoProviderError,
    PaymentError,
    RequestNotFoundError,
    UnknownServiceCategoryError,
)
from core.models import RequestStatus

REQUEST_ID = uuid4()

RAISERS = {
    "no_provider": lambda: NoProviderError(),
    "no_location": lambda: NoLocationError(),
    "unknown_category": lambda: UnknownServiceCategoryError("helicopter"),
    "already_active": lambda: AlreadyActiveError("customer-1", REQUEST_ID),
    "not_found": lambda: RequestNotFoundError(REQUEST_ID),
    "transition": lambda: InvalidTransitionError(REQUEST_ID, RequestStatus.PENDING, RequestStatus.ARRIVED),
    "tipped": lambda: AlreadyTippedError(REQUEST_ID),
    "rated": lambda: AlreadyRatedError(REQUEST_ID),
    "geocode": lambda: GeocodeError("Could not resolve"),
    "payment": lambda: PaymentError("declined"),
    "generic": lambda: MarketplaceError("something odd"),
    "value_not_found": lambda: ValueError("Provider x not found"),
    "value": lambda: ValueError("bad input"),
    "crash": lambda: RuntimeError("secret internals"),
}


@pytest.fixture
def client():
    app = FastAPI()
    app.add_middleware(RequestIDMiddleware)
    register_error_handlers(app)

    @app.get("/raise/{name}")
    async def raise_it(name: str):
        raise RAISERS[name]()

    return TestClient(app, raise_server_exceptions=False)


@pytest.mark.parametrize("name, status_code, code", [
    ("no_provider", 400, "NO_PROVIDER"),
    ("no_location", 400, "NO_LOCATION"),
    ("unknown_category", 400, "UNKNOWN_SERVICE_CATEGORY"),
    ("already_active", 409, "ALREADY_ACTIVE"),
    ("not_found", 404, "NOT_FOUND"),
    ("transition", 409, "INVALID_STATUS_TRANSITION"),
    ("tipped", 409, "ALREADY_TIPPED"),
    ("rated", 409, "ALREADY_RATED"),
    ("geocode", 422, "GEOCODE_FAILED"),
    ("payment", 402, "PAYMENT_FAILED"),
    ("generic", 400, "INVALID_REQUEST"),
    ("value_not_found", 404, "NOT_FOUND"),
    ("value", 400, "INVALID_REQUEST"),
])
def test_maps_exception_to_status_and_code(client, name, status_code, code):
    response = client.get(f"/raise/{name}", headers={"X-Request-ID": "trace-1"})

    assert response.status_code == status_code
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == code
    assert body["meta"]["request_id"] == "trace-1"


def test_unhandled_exception_hides_details(client):
    response = client.get("/raise/crash")

    assert response.status_code == 500
    body = response.json()
    assert body["error"]["code"] == "INTERNAL_ERROR"
    assert "secret" not in body["error"]["message"]
