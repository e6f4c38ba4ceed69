"""
Catalog service for bookable service types.

The catalog is fixed at construction. It prices bookings: a request's base
price is the base price of its service type unless explicitly overridden.
"""

import logging

from core.exceptions import UnknownServiceCategoryError
from core.models import ServiceGroup, ServiceType

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_TYPES = (
    ServiceType(
        id="jumpstart", name="Jump Start",
        description="Dead battery? Get a quick jump start",
        base_price_cents=4500, estimated_time="10-15 min", group=ServiceGroup.EMERGENCY,
    ),
    ServiceType(
        id="tire", name="Tire Change",
        description="Flat tire replacement or repair",
        base_price_cents=6500, estimated_time="15-25 min", group=ServiceGroup.EMERGENCY,
    ),
    ServiceType(
        id="lockout", name="Lockout Service",
        description="Locked out of your car? We can help",
        base_price_cents=5500, estimated_time="10-20 min", group=ServiceGroup.EMERGENCY,
    ),
    ServiceType(
        id="fuel", name="Fuel Delivery",
        description="Emergency fuel delivery service",
        base_price_cents=3500, estimated_time="15-30 min", group=ServiceGroup.EMERGENCY,
    ),
    ServiceType(
        id="towing", name="Towing Service",
        description="Professional towing to your destination",
        base_price_cents=12500, estimated_time="20-40 min", group=ServiceGroup.TOWING,
    ),
    ServiceType(
        id="mechanic", name="Mobile Mechanic",
        description="On-site mechanical repairs and diagnostics",
        base_price_cents=9500, estimated_time="30-60 min", group=ServiceGroup.REPAIR,
    ),
    ServiceType(
        id="battery", name="Battery Replacement",
        description="New battery installation service",
        base_price_cents=8500, estimated_time="15-25 min", group=ServiceGroup.REPAIR,
    ),
    ServiceType(
        id="diagnostics", name="Engine Diagnostics",
        description="Professional engine diagnostic service",
        base_price_cents=7500, estimated_time="20-30 min", group=ServiceGroup.REPAIR,
    ),
)


class CatalogService:
    """Service for service-type lookups."""

    def __init__(self, service_types: tuple[ServiceType, ...] = DEFAULT_SERVICE_TYPES):
        self._types = {t.id: t for t in service_types}
        if len(self._types) != len(service_types):
            raise ValueError("Service type ids must be unique")

    def list_types(self, group: ServiceGroup | None = None) -> list[ServiceType]:
        """
        List service types in catalog order.

        Args:
            group: Only return types in this group

        Returns:
            Matching service types
        """
        return [t for t in self._types.values() if group is None or t.group == group]

    def get(self, type_id: str) -> ServiceType | None:
        """Get a service type by id, None if unknown."""
        return self._types.get(type_id)

    def require(self, type_id: str) -> ServiceType:
        """
        Get a service type by id.

        Raises:
            UnknownServiceCategoryError: If the id is not in the catalog
        """
        service_type = self._types.get(type_id)
        if service_type is None:
            raise UnknownServiceCategoryError(type_id)
        return service_type
