"""Global exception handlers for FastAPI."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

from api.base import error_response, ErrorCodes
from core.exceptions import (
    AlreadyActiveError,
    AlreadyRatedError,
    AlreadyTippedError,
    GeocodeError,
    InvalidTransitionError,
    MarketplaceError,
    NoLocationError,
    NoProviderError,
    PaymentError,
    RequestNotFoundError,
    UnknownServiceCategoryError,
)

logger = logging.getLogger(__name__)

# Most specific class wins; lookup walks the exception's MRO.
_DOMAIN_ERRORS: dict[type, tuple[int, str]] = {
    NoProviderError: (400, ErrorCodes.NO_PROVIDER),
    NoLocationError: (400, ErrorCodes.NO_LOCATION),
    UnknownServiceCategoryError: (400, ErrorCodes.UNKNOWN_SERVICE_CATEGORY),
    AlreadyActiveError: (409, ErrorCodes.ALREADY_ACTIVE),
    RequestNotFoundError: (404, ErrorCodes.NOT_FOUND),
    InvalidTransitionError: (409, ErrorCodes.INVALID_STATUS_TRANSITION),
    AlreadyTippedError: (409, ErrorCodes.ALREADY_TIPPED),
    AlreadyRatedError: (409, ErrorCodes.ALREADY_RATED),
    GeocodeError: (422, ErrorCodes.GEOCODE_FAILED),
    PaymentError: (402, ErrorCodes.PAYMENT_FAILED),
    MarketplaceError: (400, ErrorCodes.INVALID_REQUEST),
}


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _json(request: Request, status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_response(code, message, _request_id(request)).model_dump(mode="json"),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the app."""

    @app.exception_handler(MarketplaceError)
    async def marketplace_error_handler(request: Request, exc: MarketplaceError):
        for cls in type(exc).__mro__:
            if cls in _DOMAIN_ERRORS:
                status_code, code = _DOMAIN_ERRORS[cls]
                break
        logger.info(f"{request.method} {request.url.path} -> {code}: {exc}")
        return _json(request, status_code, code, str(exc))

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        message = str(exc)
        if "not found" in message.lower():
            return _json(request, 404, ErrorCodes.NOT_FOUND, message)
        return _json(request, 400, ErrorCodes.INVALID_REQUEST, message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return _json(request, 422, ErrorCodes.VALIDATION_ERROR, str(exc.errors()))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception")
        return _json(request, 500, ErrorCodes.INTERNAL_ERROR, "An internal error occurred")
