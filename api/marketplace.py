"""Catalog, location and provider discovery endpoints."""

from fastapi import APIRouter, Query, Request
from pydantic import BaseModel, Field

from api.base import success_response
from core.models import Coordinate, ServiceGroup
from core.services.provider_jobs import summarize_jobs


class GeocodeBody(BaseModel):
    address: str = Field(..., max_length=500)


class AvailabilityBody(BaseModel):
    online: bool


def create_marketplace_router(services: dict) -> APIRouter:
    router = APIRouter()

    catalog = services["catalog"]
    geo = services["geo"]
    directory = services["directory"]
    matching = services["matching"]
    lifecycle = services["lifecycle"]
    pool_size = services["config"].provider_pool_size

    @router.get("/services")
    async def list_services(request: Request, group: ServiceGroup | None = Query(None)):
        types = catalog.list_types(group)
        return success_response(
            [t.model_dump(mode="json") for t in types],
            request.state.request_id,
        ).model_dump(mode="json")

    @router.post("/location")
    async def acquire_location(request: Request):
        fix = await geo.acquire_location()
        directory.populate(fix.coordinate, pool_size)
        return success_response(fix.model_dump(mode="json"), request.state.request_id).model_dump(mode="json")

    @router.post("/geocode")
    async def geocode(request: Request, body: GeocodeBody):
        location = await geo.geocode(body.address)
        return success_response(location.model_dump(mode="json"), request.state.request_id).model_dump(mode="json")

    @router.get("/providers/nearby")
    async def nearby_providers(
        request: Request,
        category: str | None = Query(None),
        radius: float | None = Query(None, ge=0),
        lat: float | None = Query(None, ge=-90, le=90),
        lng: float | None = Query(None, ge=-180, le=180),
    ):
        origin = None
        if lat is not None and lng is not None:
            origin = Coordinate(lat=lat, lng=lng)

        providers = matching.find_nearby_workers(category, radius, origin)
        return success_response(
            [p.model_dump(mode="json") for p in providers],
            request.state.request_id,
        ).model_dump(mode="json")

    @router.post("/providers/{provider_id}/online")
    async def set_availability(request: Request, provider_id: str, body: AvailabilityBody):
        provider = directory.set_online(provider_id, body.online)
        return success_response(provider.model_dump(mode="json"), request.state.request_id).model_dump(mode="json")

    @router.get("/providers/{provider_id}/jobs")
    async def provider_jobs(request: Request, provider_id: str):
        if directory.get(provider_id) is None:
            raise ValueError(f"Provider {provider_id} not found")

        jobs = lifecycle.list_provider_jobs(provider_id)
        return success_response(
            {
                "jobs": [j.model_dump(mode="json") for j in jobs],
                "summary": summarize_jobs(jobs).model_dump(mode="json"),
            },
            request.state.request_id,
        ).model_dump(mode="json")

    return router
