"""Test data factories and the synthetic clock, shared across test packages."""

import threading
import time
from datetime import datetime, timedelta, timezone
from uuid import uuid4

from clients.memory_store import InMemoryKeyValueStore
from core.models import (
    Coordinate,
    PaymentMethod,
    Provider,
    RequestStatus,
    ServiceLocation,
    ServiceRequest,
    TimelineEvent,
    Vehicle,
)

NYC = Coordinate(lat=40.7128, lng=-74.0060)

TEST_CUSTOMER_ID = "customer-1"
TEST_CUSTOMER_B_ID = "customer-2"

START_TIME = datetime(2026, 3, 14, 15, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Synthetic clock. Call it for "now", advance it explicitly."""

    def __init__(self, start: datetime = START_TIME):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float = 0, minutes: float = 0) -> datetime:
        self.now += timedelta(seconds=seconds, minutes=minutes)
        return self.now


class SlowKeyValueStore(InMemoryKeyValueStore):
    """In-memory store whose reads stall, widening read-modify-write windows."""

    def __init__(self, delay_seconds: float = 0.01):
        super().__init__()
        self.delay_seconds = delay_seconds

    def load(self, key: str) -> bytes | None:
        value = super().load(key)
        time.sleep(self.delay_seconds)
        return value


def run_concurrently(*calls) -> list:
    """
    Start every call on its own thread at the same moment and wait for all.

    Returns each call's result, or the exception it raised, in call order.
    """
    barrier = threading.Barrier(len(calls))
    results = [None] * len(calls)

    def runner(index, call):
        barrier.wait()
        try:
            results[index] = call()
        except Exception as e:
            results[index] = e

    threads = [threading.Thread(target=runner, args=(i, call)) for i, call in enumerate(calls)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)
    return results


def make_provider(
    provider_id: str = "worker_1",
    category: str = "tire",
    distance_miles: float = 3.2,
    location: Coordinate | None = None,
    rating: float = 4.5,
    online: bool = True,
    eta_minutes: int = 12,
) -> Provider:
    return Provider(
        id=provider_id,
        name="Alex Johnson",
        category=category,
        rating=rating,
        distance_miles=distance_miles,
        eta_minutes=eta_minutes,
        price_cents=8000,
        location=location or Coordinate(lat=40.7500, lng=-74.0060),
        online=online,
        completed_jobs=250,
        specialties=frozenset({"Tire Change", "Flat Tire Repair"}),
    )


def make_request(
    status: RequestStatus = RequestStatus.PENDING,
    customer_id: str = TEST_CUSTOMER_ID,
    provider_id: str = "worker_1",
) -> ServiceRequest:
    """A $71.40 tire request built directly, bypassing the lifecycle."""
    return ServiceRequest(
        id=uuid4(),
        customer_id=customer_id,
        service_category="tire",
        provider=make_provider(provider_id),
        location=ServiceLocation(lat=NYC.lat, lng=NYC.lng),
        vehicle=Vehicle(),
        payment_method=PaymentMethod.CARD,
        base_price_cents=6500,
        distance_fee_cents=640,
        total_price_cents=7140,
        status=status,
        timeline=[TimelineEvent(status=status, timestamp=START_TIME, message="test")],
        created_at=START_TIME,
        estimated_arrival_at=START_TIME + timedelta(minutes=12),
    )
