"""
FastAPI application factory.

Run with any ASGI server using the factory, e.g.:

    uvicorn api.app:create_app --factory
"""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI

from api.errors import register_error_handlers
from api.marketplace import create_marketplace_router
from api.middleware import RequestIDMiddleware
from api.service_requests import create_requests_router
from core.config import MarketplaceConfig
from core.wiring import build_services
from utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def create_app(config: MarketplaceConfig | None = None, services: dict | None = None) -> FastAPI:
    """
    Build the API app.

    Args:
        config: Configuration. Loaded from .env and MARKETPLACE_* variables when omitted.
        services: Pre-built service graph (tests inject their own). Built from config when omitted.
    """
    if config is None:
        load_dotenv()
        config = MarketplaceConfig.from_env()
    setup_logging(config.log_level)

    if services is None:
        services = build_services(config)

    scheduler = services["scheduler"]
    kv = services["lifecycle"].store.kv

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        scheduler.resume()
        scheduler.start()
        try:
            yield
        finally:
            await scheduler.shutdown()
            kv.close()

    app = FastAPI(title="Roadside Marketplace API", version="0.1.0", lifespan=lifespan)
    app.state.services = services
    app.add_middleware(RequestIDMiddleware)
    register_error_handlers(app)

    app.include_router(create_marketplace_router(services), prefix="/api")
    app.include_router(create_requests_router(services), prefix="/api")

    return app
