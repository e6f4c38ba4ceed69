"""Typed exceptions for marketplace failures."""


class MarketplaceError(Exception):
    """Base class for all core marketplace errors."""


# =============================================================================
# BOOKING
# =============================================================================


class BookingError(MarketplaceError):
    """A booking could not be created."""


class NoProviderError(BookingError):
    """No provider was selected, or the selected one is unavailable."""

    def __init__(self, message: str = "A provider must be selected before booking"):
        super().__init__(message)


class NoLocationError(BookingError):
    """No service location was resolved."""

    def __init__(self, message: str = "A service location is required before booking"):
        super().__init__(message)


class AlreadyActiveError(BookingError):
    """The customer already has a request in a non-terminal status."""

    def __init__(self, customer_id: str, active_request_id):
        self.customer_id = customer_id
        self.active_request_id = active_request_id
        super().__init__(
            f"Customer {customer_id} already has active request {active_request_id}"
        )


class UnknownServiceCategoryError(BookingError):
    """The requested service category is not in the catalog."""

    def __init__(self, category: str):
        self.category = category
        super().__init__(f"Unknown service category '{category}'")


# =============================================================================
# LIFECYCLE
# =============================================================================


class RequestNotFoundError(MarketplaceError):
    """No request with the given id exists."""

    def __init__(self, request_id):
        self.request_id = request_id
        super().__init__(f"Service request {request_id} not found")


class InvalidTransitionError(MarketplaceError):
    """
    Requested status change is not legal from the current status.

    The request is left untouched. Raised for out-of-order or duplicate
    updates, e.g. a manual update racing the scheduler.
    """

    def __init__(self, request_id, current, target, message: str | None = None):
        self.request_id = request_id
        self.current = current
        self.target = target
        super().__init__(
            message
            or f"Service request {request_id} cannot move from "
            f"{_value(current)} to {_value(target)}"
        )


class AlreadyTippedError(MarketplaceError):
    """A tip was already recorded for this request."""

    def __init__(self, request_id):
        self.request_id = request_id
        super().__init__(f"Service request {request_id} has already been tipped")


class AlreadyRatedError(MarketplaceError):
    """A rating was already recorded for this request."""

    def __init__(self, request_id):
        self.request_id = request_id
        super().__init__(f"Service request {request_id} has already been rated")


# =============================================================================
# EXTERNAL COLLABORATORS
# =============================================================================


class GeocodeError(MarketplaceError):
    """Address text is empty or could not be resolved to a coordinate."""


class PaymentError(MarketplaceError):
    """The payment gateway declined or failed to process a charge."""


class PositionUnavailableError(MarketplaceError):
    """
    The position provider could not produce a fix.

    Never surfaces past GeoService, which falls back to the default location.
    """


def _value(status) -> str:
    return getattr(status, "value", str(status))
