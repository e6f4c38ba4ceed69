"""Service request (roadside job) domain models.

All amounts are stored in cents (integer) to avoid floating point issues.
"""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field

from core.models.geo import ServiceLocation
from core.models.payment import PaymentMethod, Receipt
from core.models.provider import Provider


class RequestStatus(str, Enum):
    """Service request lifecycle status."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    EN_ROUTE = "en_route"
    ARRIVED = "arrived"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        """Whether no further transitions are permitted."""
        return self in TERMINAL_STATUSES

    @property
    def is_cancellable(self) -> bool:
        return self in CANCELLABLE_STATUSES

    @property
    def rank(self) -> int:
        """
        Position in the forward progression.

        CANCELLED ranks after everything so it is never "behind" a live status.
        """
        if self == RequestStatus.CANCELLED:
            return len(PROGRESSION)
        return PROGRESSION.index(self)

    @property
    def successor(self) -> "RequestStatus | None":
        """Next status in the forward progression, None when terminal."""
        if self.is_terminal:
            return None
        return PROGRESSION[PROGRESSION.index(self) + 1]


PROGRESSION = (
    RequestStatus.PENDING,
    RequestStatus.ACCEPTED,
    RequestStatus.EN_ROUTE,
    RequestStatus.ARRIVED,
    RequestStatus.IN_PROGRESS,
    RequestStatus.COMPLETED,
)

TERMINAL_STATUSES = frozenset({RequestStatus.COMPLETED, RequestStatus.CANCELLED})

CANCELLABLE_STATUSES = frozenset({
    RequestStatus.PENDING,
    RequestStatus.ACCEPTED,
    RequestStatus.EN_ROUTE,
})

STATUS_MESSAGES = {
    RequestStatus.PENDING: "Service request submitted",
    RequestStatus.ACCEPTED: "Provider has accepted your request",
    RequestStatus.EN_ROUTE: "Provider is on the way to your location",
    RequestStatus.ARRIVED: "Provider has arrived at your location",
    RequestStatus.IN_PROGRESS: "Service is in progress",
    RequestStatus.COMPLETED: "Service completed successfully",
}


class TransitionSource(str, Enum):
    """Who triggered a status change."""

    MANUAL = "manual"
    SCHEDULER = "scheduler"


class Vehicle(BaseModel):
    """The customer's vehicle. Every field is optional free text."""

    make: str | None = Field(None, max_length=100)
    model: str | None = Field(None, max_length=100)
    year: str | None = Field(None, max_length=10)
    color: str | None = Field(None, max_length=50)
    plate: str | None = Field(None, max_length=20)


class TimelineEvent(BaseModel):
    """One entry in a request's append-only history."""

    status: RequestStatus
    timestamp: datetime
    message: str


class BookingInput(BaseModel):
    """
    Data required to book a service.

    provider and location are optional here so that a missing selection is
    reported as a typed booking error rather than a validation failure.
    """

    customer_id: str = Field(..., min_length=1)
    service_category: str = Field(..., min_length=1)
    provider: Provider | None = None
    location: ServiceLocation | None = None
    vehicle: Vehicle = Field(default_factory=Vehicle)
    payment_method: PaymentMethod = PaymentMethod.CARD
    base_price_cents: int | None = Field(None, gt=0)  # Overrides catalog price


class ServiceRequest(BaseModel):
    """Full service request as stored."""

    id: UUID
    customer_id: str
    service_category: str
    provider: Provider
    location: ServiceLocation
    vehicle: Vehicle
    payment_method: PaymentMethod
    base_price_cents: int
    distance_fee_cents: int
    total_price_cents: int
    status: RequestStatus
    timeline: list[TimelineEvent] = Field(..., min_length=1)
    created_at: datetime
    estimated_arrival_at: datetime
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancel_reason: str | None = None
    rating: int | None = Field(None, ge=1, le=5)
    feedback: str | None = None
    tip_cents: int | None = Field(None, gt=0)
    live_distance_miles: float | None = None
    live_eta_minutes: int | None = None
    tracked_at: datetime | None = None
    receipt: Receipt | None = None

    @property
    def is_active(self) -> bool:
        """Whether the request still occupies the customer's active slot."""
        return not self.status.is_terminal

    @property
    def amount_due_cents(self) -> int:
        """Total price plus any tip."""
        return self.total_price_cents + (self.tip_cents or 0)

    @property
    def total_price_dollars(self) -> float:
        """Total price in dollars for display."""
        return self.total_price_cents / 100
