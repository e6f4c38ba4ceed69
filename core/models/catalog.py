"""Service catalog models.

Prices are stored in cents (integer). $65.00 = 6500 cents.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ServiceGroup(str, Enum):
    """Broad grouping of service types."""

    EMERGENCY = "emergency"
    TOWING = "towing"
    REPAIR = "repair"


class ServiceType(BaseModel):
    """A kind of roadside assistance a customer can book."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    description: str
    base_price_cents: int = Field(..., gt=0)
    estimated_time: str
    group: ServiceGroup

    @property
    def base_price_dollars(self) -> float:
        """Base price in dollars for display."""
        return self.base_price_cents / 100
