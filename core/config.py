"""Marketplace configuration."""

import os

from pydantic import BaseModel, Field, field_validator

from core.models import Coordinate, RequestStatus

_ENV_PREFIX = "MARKETPLACE_"


class MarketplaceConfig(BaseModel):
    """
    Marketplace configuration.

    Distances are in miles, money in cents, durations in the unit named by
    the field suffix.
    """

    # Location
    default_location: Coordinate = Field(
        default=Coordinate(lat=40.7128, lng=-74.0060),
        description="Fallback reference location when no live position is available",
    )
    position_timeout_seconds: float = Field(
        default=10.0,
        description="How long to wait for the position provider",
        gt=0,
        le=120,
    )
    average_speed_mph: float = Field(
        default=30.0,
        description="Average provider travel speed used for ETA",
        gt=0,
    )

    # Matching
    default_search_radius_miles: float = Field(
        default=10.0,
        description="Radius used when the caller does not supply one",
        gt=0,
    )
    provider_pool_size: int = Field(
        default=8,
        description="Number of providers generated around the reference location",
        ge=0,
        le=500,
    )
    provider_seed: int | None = Field(
        default=None,
        description="Seed for provider generation. None for a fresh pool each run",
    )

    # Pricing
    distance_fee_cents_per_mile: int = Field(
        default=200,
        description="Surcharge per mile of provider distance at booking time",
        ge=0,
    )

    # Progression
    evaluation_interval_seconds: float = Field(
        default=10.0,
        description="Cadence of the scheduler's re-evaluation loop",
        gt=0,
    )
    progression_thresholds_minutes: dict[RequestStatus, float] = Field(
        default={
            RequestStatus.ACCEPTED: 1,
            RequestStatus.EN_ROUTE: 2,
            RequestStatus.ARRIVED: 4,
            RequestStatus.IN_PROGRESS: 6,
            RequestStatus.COMPLETED: 8,
        },
        description="Minutes since creation a status must strictly exceed",
    )
    tracking_jitter_degrees: float = Field(
        default=0.005,
        description="Max offset applied to simulate the provider's live position",
        ge=0,
    )

    # Simulated collaborators
    geocode_latency_seconds: float = Field(default=1.0, ge=0)
    payment_latency_seconds: float = Field(default=2.0, ge=0)

    # Infrastructure
    valkey_url: str | None = Field(
        default=None,
        description="Redis-compatible URL. None keeps state in memory",
    )
    geocoder_url: str | None = Field(
        default=None,
        description="Nominatim-compatible search URL. None uses the simulated geocoder",
    )
    log_level: str = Field(default="INFO")

    @field_validator("progression_thresholds_minutes")
    @classmethod
    def validate_thresholds(cls, value: dict[RequestStatus, float]) -> dict[RequestStatus, float]:
        """Thresholds must cover every automatic step and increase with the progression."""
        expected = [
            RequestStatus.ACCEPTED, RequestStatus.EN_ROUTE, RequestStatus.ARRIVED,
            RequestStatus.IN_PROGRESS, RequestStatus.COMPLETED,
        ]
        missing = [s.value for s in expected if s not in value]
        if missing:
            raise ValueError(f"Missing progression thresholds for: {', '.join(missing)}")

        minutes = [value[s] for s in expected]
        if any(later <= earlier for earlier, later in zip(minutes, minutes[1:])):
            raise ValueError("Progression thresholds must strictly increase")
        return value

    @classmethod
    def from_env(cls) -> "MarketplaceConfig":
        """
        Build configuration from MARKETPLACE_* environment variables.

        Unset variables keep their defaults. Values are validated by the model.
        """
        overrides: dict = {}

        lat = os.getenv(f"{_ENV_PREFIX}DEFAULT_LAT")
        lng = os.getenv(f"{_ENV_PREFIX}DEFAULT_LNG")
        if lat is not None and lng is not None:
            overrides["default_location"] = {"lat": lat, "lng": lng}

        simple_fields = (
            "position_timeout_seconds", "average_speed_mph",
            "default_search_radius_miles", "provider_pool_size", "provider_seed",
            "distance_fee_cents_per_mile", "evaluation_interval_seconds",
            "tracking_jitter_degrees", "geocode_latency_seconds",
            "payment_latency_seconds", "valkey_url", "geocoder_url", "log_level",
        )
        for name in simple_fields:
            raw = os.getenv(f"{_ENV_PREFIX}{name.upper()}")
            if raw is not None and raw != "":
                overrides[name] = raw

        return cls.model_validate(overrides)
