"""Service provider domain models."""

from pydantic import BaseModel, ConfigDict, Field

from core.models.geo import Coordinate


class Provider(BaseModel):
    """
    A professional who can fulfil service requests.

    Prices are stored in cents. distance_miles and eta_minutes are relative
    to whatever origin the provider was last matched against.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    category: str
    rating: float = Field(..., ge=0, le=5)
    distance_miles: float = Field(0, ge=0)
    eta_minutes: int = Field(..., gt=0)
    price_cents: int = Field(..., gt=0)
    location: Coordinate
    online: bool = True
    completed_jobs: int = Field(0, ge=0)
    specialties: frozenset[str] = frozenset()


class ProviderJobSummary(BaseModel):
    """Aggregate view of a provider's assigned jobs."""

    total_jobs: int
    active_jobs: int
    completed_jobs: int
    cancelled_jobs: int
    total_earnings_cents: int
    acceptance_rate: float  # Percent of jobs not cancelled

    @property
    def total_earnings_dollars(self) -> float:
        """Earnings in dollars for display."""
        return self.total_earnings_cents / 100
