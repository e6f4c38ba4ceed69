"""
Construction of the marketplace service graph.

Services are built once and passed explicitly to whatever hosts them (the
HTTP API, tests, scripts). Nothing here is global.
"""

import logging

from clients.geocoding_client import NominatimGeocoder, SimulatedGeocoder
from clients.memory_store import InMemoryKeyValueStore
from clients.payment_gateway import SimulatedPaymentGateway
from clients.valkey_client import ValkeyKeyValueStore
from core.config import MarketplaceConfig
from core.event_bus import EventBus
from core.handlers.scheduler_handlers import register_scheduler_handlers
from core.ports import Geocoder, KeyValueStore, PaymentGateway, PositionProvider
from core.scheduler import ElapsedTimeScheduler
from core.services.catalog_service import CatalogService
from core.services.geo_service import GeoService
from core.services.history_store import HistoryStore
from core.services.lifecycle_service import RequestLifecycle
from core.services.matching_service import MatchingEngine
from core.services.payment_service import PaymentService
from core.services.provider_directory import ProviderDirectory, ProviderFactory
from utils.timezone import Clock, now_utc

logger = logging.getLogger(__name__)


def build_services(
    config: MarketplaceConfig,
    kv: KeyValueStore | None = None,
    position_provider: PositionProvider | None = None,
    geocoder: Geocoder | None = None,
    gateway: PaymentGateway | None = None,
    clock: Clock = now_utc,
) -> dict:
    """
    Wire every service from configuration.

    Collaborators not passed in are chosen from config: Valkey when
    valkey_url is set (in-memory otherwise), the HTTP geocoder when
    geocoder_url is set (simulated otherwise), and the simulated gateway.

    Returns:
        Dict of services keyed by name
    """
    if kv is None:
        kv = ValkeyKeyValueStore(config.valkey_url) if config.valkey_url else InMemoryKeyValueStore()

    if geocoder is None:
        if config.geocoder_url:
            geocoder = NominatimGeocoder(config.geocoder_url)
        else:
            geocoder = SimulatedGeocoder(
                center=config.default_location,
                seed=config.provider_seed,
                latency_seconds=config.geocode_latency_seconds,
            )

    if gateway is None:
        gateway = SimulatedPaymentGateway(latency_seconds=config.payment_latency_seconds, clock=clock)

    event_bus = EventBus()
    catalog = CatalogService()
    geo = GeoService(
        geocoder=geocoder,
        default_location=config.default_location,
        position_provider=position_provider,
        timeout_seconds=config.position_timeout_seconds,
        average_speed_mph=config.average_speed_mph,
    )

    directory = ProviderDirectory(geo, ProviderFactory(seed=config.provider_seed))
    directory.populate(config.default_location, config.provider_pool_size)

    lifecycle = RequestLifecycle(
        store=HistoryStore(kv),
        catalog=catalog,
        event_bus=event_bus,
        clock=clock,
        distance_fee_cents_per_mile=config.distance_fee_cents_per_mile,
    )
    scheduler = ElapsedTimeScheduler(
        lifecycle=lifecycle,
        geo=geo,
        thresholds_minutes=config.progression_thresholds_minutes,
        interval_seconds=config.evaluation_interval_seconds,
        clock=clock,
        jitter_degrees=config.tracking_jitter_degrees,
        seed=config.provider_seed,
    )
    register_scheduler_handlers(event_bus, scheduler)

    return {
        "config": config,
        "event_bus": event_bus,
        "catalog": catalog,
        "geo": geo,
        "directory": directory,
        "matching": MatchingEngine(directory, geo, config.default_search_radius_miles),
        "lifecycle": lifecycle,
        "scheduler": scheduler,
        "payment": PaymentService(gateway, lifecycle),
    }
