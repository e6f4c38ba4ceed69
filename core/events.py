"""
Domain events for the service-request lifecycle.

Immutable event objects that represent state changes of a ServiceRequest.
The lifecycle publishes what happened; the scheduler and any other
listener react without the lifecycle knowing who is listening.

Events carry the full request snapshot so handlers don't need to re-read
the store.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import uuid4

from core.models import RequestStatus, TransitionSource
from utils.timezone import now_utc


@dataclass(frozen=True, kw_only=True)
class MarketplaceEvent:
    """Base class for all marketplace domain events."""
    event_id: str = field(default_factory=lambda: str(uuid4()))
    occurred_at: datetime = field(default_factory=now_utc)


@dataclass(frozen=True)
class RequestEvent(MarketplaceEvent):
    """Events related to the service-request lifecycle."""
    request: Any = None  # ServiceRequest


@dataclass(frozen=True)
class ServiceRequestBooked(RequestEvent):
    """A new request was created in PENDING status."""

    @classmethod
    def create(cls, request: Any) -> "ServiceRequestBooked":
        return cls(request=request)


@dataclass(frozen=True)
class StatusAdvanced(RequestEvent):
    """A request moved one step forward in its progression."""
    previous: RequestStatus | None = None
    source: TransitionSource = TransitionSource.MANUAL

    @classmethod
    def create(
        cls,
        request: Any,
        previous: RequestStatus,
        source: TransitionSource,
    ) -> "StatusAdvanced":
        return cls(request=request, previous=previous, source=source)


@dataclass(frozen=True)
class ServiceCancelled(RequestEvent):
    """A request was cancelled and archived."""

    @classmethod
    def create(cls, request: Any) -> "ServiceCancelled":
        return cls(request=request)


@dataclass(frozen=True)
class ServiceCompleted(RequestEvent):
    """A request reached COMPLETED and was archived."""

    @classmethod
    def create(cls, request: Any) -> "ServiceCompleted":
        return cls(request=request)


@dataclass(frozen=True)
class TipAdded(RequestEvent):
    """A tip was attached to a completed request."""

    @classmethod
    def create(cls, request: Any) -> "TipAdded":
        return cls(request=request)
