"""Geographic value objects."""

from pydantic import BaseModel, ConfigDict, Field


class Coordinate(BaseModel):
    """A captured position. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    accuracy: float | None = Field(None, ge=0)


class ServiceLocation(Coordinate):
    """Where the customer needs help. Carries the address when geocoded."""

    address: str | None = None


class LocationFix(BaseModel):
    """
    Outcome of acquiring the reference location.

    is_fallback is True when the live position could not be read and the
    configured default was used instead; diagnostic then says why.
    """

    coordinate: Coordinate
    is_fallback: bool = False
    diagnostic: str | None = None
