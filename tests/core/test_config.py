"""Tests for MarketplaceConfig."""

import pytest
from pydantic import ValidationError

from core.config import MarketplaceConfig
from core.models import RequestStatus


class TestDefaults:

    def test_defaults(self):
        config = MarketplaceConfig()

        assert config.default_location.lat == 40.7128
        assert config.default_location.lng == -74.0060
        assert config.position_timeout_seconds == 10
        assert config.average_speed_mph == 30
        assert config.distance_fee_cents_per_mile == 200
        assert config.evaluation_interval_seconds == 10
        assert config.valkey_url is None
        assert config.progression_thresholds_minutes == {
            RequestStatus.ACCEPTED: 1,
            RequestStatus.EN_ROUTE: 2,
            RequestStatus.ARRIVED: 4,
            RequestStatus.IN_PROGRESS: 6,
            RequestStatus.COMPLETED: 8,
        }


class TestThresholdValidation:

    def test_rejects_missing_step(self):
        with pytest.raises(ValidationError, match="Missing progression thresholds"):
            MarketplaceConfig(progression_thresholds_minutes={
                RequestStatus.ACCEPTED: 1,
                RequestStatus.EN_ROUTE: 2,
            })

    def test_rejects_non_increasing(self):
        with pytest.raises(ValidationError, match="strictly increase"):
            MarketplaceConfig(progression_thresholds_minutes={
                "accepted": 1, "en_route": 3, "arrived": 3, "in_progress": 6, "completed": 8,
            })

    def test_accepts_string_keys(self):
        config = MarketplaceConfig(progression_thresholds_minutes={
            "accepted": 0.5, "en_route": 1, "arrived": 1.5, "in_progress": 2, "completed": 2.5,
        })
        assert config.progression_thresholds_minutes[RequestStatus.COMPLETED] == 2.5


class TestFromEnv:

    def test_reads_prefixed_variables(self, monkeypatch):
        monkeypatch.setenv("MARKETPLACE_DEFAULT_LAT", "34.05")
        monkeypatch.setenv("MARKETPLACE_DEFAULT_LNG", "-118.24")
        monkeypatch.setenv("MARKETPLACE_PROVIDER_POOL_SIZE", "12")
        monkeypatch.setenv("MARKETPLACE_VALKEY_URL", "redis://cache:6379/1")
        monkeypatch.setenv("MARKETPLACE_LOG_LEVEL", "DEBUG")

        config = MarketplaceConfig.from_env()

        assert config.default_location.lat == 34.05
        assert config.default_location.lng == -118.24
        assert config.provider_pool_size == 12
        assert config.valkey_url == "redis://cache:6379/1"
        assert config.log_level == "DEBUG"

    def test_empty_values_keep_defaults(self, monkeypatch):
        monkeypatch.setenv("MARKETPLACE_VALKEY_URL", "")
        monkeypatch.delenv("MARKETPLACE_DEFAULT_LAT", raising=False)

        config = MarketplaceConfig.from_env()

        assert config.valkey_url is None
        assert config.default_location.lat == 40.7128

    def test_invalid_value_rejected(self, monkeypatch):
        monkeypatch.setenv("MARKETPLACE_AVERAGE_SPEED_MPH", "-5")

        with pytest.raises(ValidationError):
            MarketplaceConfig.from_env()
