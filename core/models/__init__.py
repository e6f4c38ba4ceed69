"""Core domain models."""

from core.models.geo import Coordinate, ServiceLocation, LocationFix
from core.models.provider import Provider, ProviderJobSummary
from core.models.catalog import ServiceType, ServiceGroup
from core.models.payment import PaymentMethod, Receipt
from core.models.service_request import (
    ServiceRequest, BookingInput, TimelineEvent, Vehicle,
    RequestStatus, TransitionSource,
    PROGRESSION, TERMINAL_STATUSES, CANCELLABLE_STATUSES, STATUS_MESSAGES,
)

__all__ = [
    # Geo
    "Coordinate", "ServiceLocation", "LocationFix",
    # Provider
    "Provider", "ProviderJobSummary",
    # Catalog
    "ServiceType", "ServiceGroup",
    # Payment
    "PaymentMethod", "Receipt",
    # ServiceRequest
    "ServiceRequest", "BookingInput", "TimelineEvent", "Vehicle",
    "RequestStatus", "TransitionSource",
    "PROGRESSION", "TERMINAL_STATUSES", "CANCELLABLE_STATUSES", "STATUS_MESSAGES",
]
