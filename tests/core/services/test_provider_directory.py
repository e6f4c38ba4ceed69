"""Tests for ProviderFactory and ProviderDirectory."""

import pytest

from core.models import Coordinate
from core.services.provider_directory import PROVIDER_CATEGORIES, ProviderDirectory, ProviderFactory
from factories import NYC, make_provider


def _north_of_nyc(miles: float) -> Coordinate:
    """Point roughly `miles` due north of NYC."""
    return Coordinate(lat=NYC.lat + miles / 69.09, lng=NYC.lng)


@pytest.fixture
def directory(geo):
    return ProviderDirectory(geo, ProviderFactory(seed=42))


class TestProviderFactory:
    """Tests for ProviderFactory.generate."""

    def test_same_seed_same_pool(self):
        first = ProviderFactory(seed=5).generate(NYC, 8)
        second = ProviderFactory(seed=5).generate(NYC, 8)
        assert [p.model_dump() for p in first] == [p.model_dump() for p in second]

    def test_generates_requested_count_with_sequential_ids(self):
        providers = ProviderFactory(seed=1).generate(NYC, 5)
        assert [p.id for p in providers] == [f"worker_{i}" for i in range(1, 6)]

    def test_providers_scattered_within_spread(self):
        providers = ProviderFactory(seed=2, spread_degrees=0.1).generate(NYC, 20)

        for p in providers:
            assert abs(p.location.lat - NYC.lat) <= 0.05
            assert abs(p.location.lng - NYC.lng) <= 0.05
            assert p.category in PROVIDER_CATEGORIES
            assert 4.0 <= p.rating <= 5.0
            assert p.price_cents > 0
            assert p.eta_minutes > 0

    def test_online_ratio_extremes(self):
        assert all(p.online for p in ProviderFactory(seed=3, online_ratio=1.0).generate(NYC, 10))
        assert not any(p.online for p in ProviderFactory(seed=3, online_ratio=0.0).generate(NYC, 10))


class TestProviderDirectory:
    """Tests for ProviderDirectory pool management."""

    def test_populate_replaces_pool(self, directory):
        directory.register(make_provider("custom"))

        pool = directory.populate(NYC, 4)

        assert len(pool) == 4
        assert directory.get("custom") is None
        assert [p.id for p in directory.all()] == sorted(p.id for p in pool)

    def test_get_unknown_returns_none(self, directory):
        assert directory.get("nobody") is None

    def test_set_online_toggles_availability(self, directory):
        directory.register(make_provider("worker_1", online=True))

        updated = directory.set_online("worker_1", False)

        assert updated.online is False
        assert directory.get("worker_1").online is False

    def test_set_online_unknown_raises(self, directory):
        with pytest.raises(ValueError, match="not found"):
            directory.set_online("nobody", True)

    def test_snapshot_measures_from_origin(self, directory):
        provider = make_provider(location=_north_of_nyc(2.9), distance_miles=99, eta_minutes=99)

        snap = directory.snapshot(provider, NYC)

        assert snap.distance_miles == pytest.approx(2.9, abs=0.1)
        assert snap.eta_minutes == 6
        assert snap.id == provider.id
        # The stored provider is untouched
        assert provider.distance_miles == 99


class TestFindCandidates:
    """Tests for ProviderDirectory.find_candidates."""

    def test_filters_by_category_radius_and_availability(self, directory):
        directory.register(make_provider("near_tire", "tire", location=_north_of_nyc(1.0)))
        directory.register(make_provider("far_tire", "tire", location=_north_of_nyc(8.0)))
        directory.register(make_provider("near_tow", "towing", location=_north_of_nyc(0.5)))
        directory.register(make_provider("offline_tire", "tire", location=_north_of_nyc(0.2), online=False))

        found = directory.find_candidates("tire", NYC, 5)

        assert [p.id for p in found] == ["near_tire"]

    def test_any_category_when_none(self, directory):
        directory.register(make_provider("a", "tire", location=_north_of_nyc(1.0)))
        directory.register(make_provider("b", "towing", location=_north_of_nyc(2.0)))

        assert [p.id for p in directory.find_candidates(None, NYC, 5)] == ["a", "b"]

    def test_ordered_by_distance_then_rating_then_id(self, directory):
        same_spot = _north_of_nyc(2.0)
        directory.register(make_provider("c", location=same_spot, rating=4.2))
        directory.register(make_provider("b", location=same_spot, rating=4.9))
        directory.register(make_provider("a", location=same_spot, rating=4.2))
        directory.register(make_provider("z", location=_north_of_nyc(1.0), rating=3.0))

        found = directory.find_candidates("tire", NYC, 10)

        assert [p.id for p in found] == ["z", "b", "a", "c"]

    def test_radius_is_inclusive(self, directory):
        directory.register(make_provider("here", location=NYC))
        assert [p.id for p in directory.find_candidates("tire", NYC, 0)] == ["here"]

    def test_empty_when_nothing_matches(self, directory):
        directory.register(make_provider("a", "towing", location=_north_of_nyc(1.0)))
        assert directory.find_candidates("lockout", NYC, 50) == []
