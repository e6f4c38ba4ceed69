"""Service request endpoints: booking, tracking and closing out requests."""

from uuid import UUID

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from api.base import success_response
from core.models import (
    BookingInput,
    PaymentMethod,
    RequestStatus,
    ServiceLocation,
    Vehicle,
)


class BookingBody(BaseModel):
    """
    Booking as submitted by a client.

    The location is taken from `location`, else geocoded from `address`,
    else the current reference location when `use_current_location` is set.
    """

    customer_id: str = Field(..., min_length=1)
    service_category: str = Field(..., min_length=1)
    provider_id: str | None = None
    location: ServiceLocation | None = None
    address: str | None = Field(None, max_length=500)
    use_current_location: bool = False
    vehicle: Vehicle = Field(default_factory=Vehicle)
    payment_method: PaymentMethod = PaymentMethod.CARD
    base_price_cents: int | None = Field(None, gt=0)


class StatusBody(BaseModel):
    status: RequestStatus
    message: str | None = Field(None, max_length=500)


class CancelBody(BaseModel):
    reason: str = Field("", max_length=500)


class CompleteBody(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    tip_cents: int = Field(0, ge=0)
    feedback: str | None = Field(None, max_length=2000)


class TipBody(BaseModel):
    amount_cents: int = Field(..., gt=0)


def create_requests_router(services: dict) -> APIRouter:
    router = APIRouter()

    geo = services["geo"]
    matching = services["matching"]
    lifecycle = services["lifecycle"]
    payment = services["payment"]

    def _respond(request: Request, data):
        return success_response(data, request.state.request_id).model_dump(mode="json")

    async def _resolve_location(body: BookingBody) -> ServiceLocation | None:
        if body.location is not None:
            return body.location
        if body.address:
            return await geo.geocode(body.address)
        if body.use_current_location and geo.current_location is not None:
            current = geo.current_location
            return ServiceLocation(lat=current.lat, lng=current.lng, accuracy=current.accuracy)
        return None

    # -------------------------------------------------------------------------
    # Booking and reads
    # -------------------------------------------------------------------------

    @router.post("/requests")
    async def book(request: Request, body: BookingBody):
        location = await _resolve_location(body)

        provider = None
        if body.provider_id:
            provider = matching.select_provider(body.provider_id, location)

        service_request = lifecycle.book_service(BookingInput(
            customer_id=body.customer_id,
            service_category=body.service_category,
            provider=provider,
            location=location,
            vehicle=body.vehicle,
            payment_method=body.payment_method,
            base_price_cents=body.base_price_cents,
        ))
        return _respond(request, service_request.model_dump(mode="json"))

    @router.get("/requests/{request_id}")
    async def get_request(request: Request, request_id: UUID):
        service_request = lifecycle.get_request(request_id)
        if service_request is None:
            raise ValueError(f"Service request {request_id} not found")
        return _respond(request, service_request.model_dump(mode="json"))

    @router.get("/customers/{customer_id}/active")
    async def active_request(request: Request, customer_id: str):
        service_request = lifecycle.get_active_request(customer_id)
        data = service_request.model_dump(mode="json") if service_request else None
        return _respond(request, data)

    @router.get("/customers/{customer_id}/history")
    async def history(request: Request, customer_id: str):
        entries = lifecycle.get_history(customer_id)
        return _respond(request, [e.model_dump(mode="json") for e in entries])

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    @router.post("/requests/{request_id}/status")
    async def advance(request: Request, request_id: UUID, body: StatusBody):
        service_request = lifecycle.advance_status(request_id, body.status, body.message)
        return _respond(request, service_request.model_dump(mode="json"))

    @router.post("/requests/{request_id}/cancel")
    async def cancel(request: Request, request_id: UUID, body: CancelBody):
        service_request = lifecycle.cancel_service(request_id, body.reason)
        return _respond(request, service_request.model_dump(mode="json"))

    @router.post("/requests/{request_id}/complete")
    async def complete(request: Request, request_id: UUID, body: CompleteBody):
        service_request = lifecycle.complete_service(
            request_id, body.rating, body.tip_cents, body.feedback
        )
        return _respond(request, service_request.model_dump(mode="json"))

    @router.post("/requests/{request_id}/tip")
    async def tip(request: Request, request_id: UUID, body: TipBody):
        service_request = lifecycle.add_tip(request_id, body.amount_cents)
        return _respond(request, service_request.model_dump(mode="json"))

    @router.post("/requests/{request_id}/payment")
    async def pay(request: Request, request_id: UUID):
        receipt = await payment.process_payment(request_id)
        return _respond(request, receipt.model_dump(mode="json"))

    return router
