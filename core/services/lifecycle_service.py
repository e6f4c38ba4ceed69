"""
Request lifecycle service: the state machine for service requests.

    pending -> accepted -> en_route -> arrived -> in_progress -> completed
    cancelled is reachable from pending, accepted and en_route only.

Each customer has at most one non-terminal request. Every mutation of a
request runs under that request's lock, so the scheduler and manual
triggers can never interleave timeline writes. A request is moved from the
active slot into history exactly once, when it becomes terminal. Terminal
requests only accept rating, feedback, tip and receipt. A request is reserved
for payment before the gateway is called, so it is charged at most once.
"""

import logging
import threading
import weakref
from datetime import datetime, timedelta
from uuid import UUID, uuid4

from core.event_bus import EventBus
from core.events import ServiceCancelled, ServiceCompleted, ServiceRequestBooked, StatusAdvanced, TipAdded
from core.exceptions import (
    AlreadyActiveError,
    AlreadyRatedError,
    AlreadyTippedError,
    InvalidTransitionError,
    NoLocationError,
    NoProviderError,
    PaymentError,
    RequestNotFoundError,
)
from core.models import (
    BookingInput,
    Receipt,
    RequestStatus,
    ServiceRequest,
    STATUS_MESSAGES,
    TimelineEvent,
    TransitionSource,
)
from core.services.catalog_service import CatalogService
from core.services.history_store import HistoryStore
from utils.timezone import Clock, now_utc

logger = logging.getLogger(__name__)

TIMELINE_TICK = timedelta(microseconds=1)


class RequestLifecycle:
    """Service for service-request lifecycle operations."""

    def __init__(
        self,
        store: HistoryStore,
        catalog: CatalogService,
        event_bus: EventBus,
        clock: Clock = now_utc,
        distance_fee_cents_per_mile: int = 200,
    ):
        self.store = store
        self.catalog = catalog
        self.event_bus = event_bus
        self.distance_fee_cents_per_mile = distance_fee_cents_per_mile
        self._clock = clock
        # Locks live only while some caller holds them.
        self._locks = weakref.WeakValueDictionary()
        self._locks_guard = threading.Lock()
        self._payments_in_flight: set[UUID] = set()

    # -------------------------------------------------------------------------
    # Booking
    # -------------------------------------------------------------------------

    def distance_fee_cents(self, distance_miles: float) -> int:
        """Per-mile surcharge, rounded to the nearest cent."""
        return round(distance_miles * self.distance_fee_cents_per_mile)

    def book_service(self, data: BookingInput) -> ServiceRequest:
        """
        Create a new service request.

        Args:
            data: Booking input with a selected provider and resolved location

        Returns:
            Created request in PENDING status

        Raises:
            UnknownServiceCategoryError: If the category is not in the catalog
            NoProviderError: If no provider was selected or it is offline
            NoLocationError: If no location was resolved
            AlreadyActiveError: If the customer already has an active request
        """
        service_type = self.catalog.require(data.service_category)

        if data.provider is None:
            raise NoProviderError()
        if not data.provider.online:
            raise NoProviderError(f"Provider {data.provider.id} is offline")
        if data.location is None:
            raise NoLocationError()

        with self._lock_for(f"customer:{data.customer_id}"):
            existing = self.store.load_active(data.customer_id)
            if existing is not None:
                logger.info(
                    f"Rejected booking for customer {data.customer_id}: "
                    f"request {existing.id} is {existing.status.value}"
                )
                raise AlreadyActiveError(data.customer_id, existing.id)

            now = self._clock()
            base_price = data.base_price_cents or service_type.base_price_cents
            distance_fee = self.distance_fee_cents(data.provider.distance_miles)

            request = ServiceRequest(
                id=uuid4(),
                customer_id=data.customer_id,
                service_category=service_type.id,
                provider=data.provider,
                location=data.location,
                vehicle=data.vehicle,
                payment_method=data.payment_method,
                base_price_cents=base_price,
                distance_fee_cents=distance_fee,
                total_price_cents=base_price + distance_fee,
                status=RequestStatus.PENDING,
                timeline=[TimelineEvent(
                    status=RequestStatus.PENDING,
                    timestamp=now,
                    message=STATUS_MESSAGES[RequestStatus.PENDING],
                )],
                created_at=now,
                estimated_arrival_at=now + timedelta(minutes=data.provider.eta_minutes),
            )
            self.store.save_active(request)

        logger.info(
            f"Booked {request.service_category} request {request.id} for customer "
            f"{request.customer_id} with provider {request.provider.id} "
            f"({request.total_price_cents} cents)"
        )
        self.event_bus.publish(ServiceRequestBooked.create(request))
        return request

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def advance_status(
        self,
        request_id: UUID,
        next_status: RequestStatus,
        message: str | None = None,
        source: TransitionSource = TransitionSource.MANUAL,
    ) -> ServiceRequest:
        """
        Move a request to the next status.

        Only the immediate successor of the current status is accepted, or
        CANCELLED from a cancellable status (message is then the reason).

        Args:
            request_id: Request UUID
            next_status: Target status
            message: Timeline message, defaults to the status's standard text
            source: Who triggered the change

        Returns:
            Updated request

        Raises:
            RequestNotFoundError: If request not found
            InvalidTransitionError: If the target is not the immediate successor.
                The request is left untouched.
        """
        next_status = RequestStatus(next_status)
        if next_status == RequestStatus.CANCELLED:
            return self.cancel_service(request_id, message or "Declined by provider")

        with self._lock_for(request_id):
            current = self._require(request_id)
            if next_status != current.status.successor:
                logger.info(
                    f"Rejected {source.value} transition of request {request_id} "
                    f"from {current.status.value} to {next_status.value}"
                )
                raise InvalidTransitionError(request_id, current.status, next_status)

            now = self._timestamp(current)
            changes = {
                "status": next_status,
                "timeline": self._append(current, next_status, now, message or STATUS_MESSAGES[next_status]),
            }
            if next_status == RequestStatus.COMPLETED:
                changes["completed_at"] = now

            updated = current.model_copy(update=changes)
            self._persist(updated)

        logger.info(
            f"Request {request_id} {current.status.value} -> {next_status.value} ({source.value})"
        )
        self.event_bus.publish(StatusAdvanced.create(updated, current.status, source))
        if next_status == RequestStatus.COMPLETED:
            self.event_bus.publish(ServiceCompleted.create(updated))
        return updated

    def cancel_service(self, request_id: UUID, reason: str) -> ServiceRequest:
        """
        Cancel a request before the provider starts work.

        Args:
            request_id: Request UUID
            reason: Why the request was cancelled

        Returns:
            Cancelled request, now in history

        Raises:
            RequestNotFoundError: If request not found
            InvalidTransitionError: If status is in_progress, completed or cancelled
        """
        reason = (reason or "").strip() or "No reason given"

        with self._lock_for(request_id):
            current = self._require(request_id)
            if not current.status.is_cancellable:
                logger.info(
                    f"Rejected cancellation of request {request_id} in {current.status.value}"
                )
                raise InvalidTransitionError(request_id, current.status, RequestStatus.CANCELLED)

            now = self._timestamp(current)
            updated = current.model_copy(update={
                "status": RequestStatus.CANCELLED,
                "cancelled_at": now,
                "cancel_reason": reason,
                "timeline": self._append(
                    current, RequestStatus.CANCELLED, now, f"Service cancelled: {reason}"
                ),
            })
            self._persist(updated)

        logger.info(f"Request {request_id} cancelled from {current.status.value}: {reason}")
        self.event_bus.publish(ServiceCancelled.create(updated))
        return updated

    def complete_service(
        self,
        request_id: UUID,
        rating: int,
        tip_cents: int = 0,
        feedback: str | None = None,
    ) -> ServiceRequest:
        """
        Rate (and optionally tip) a finished request.

        Promotes in_progress -> completed within the same call when needed.

        Args:
            request_id: Request UUID
            rating: 1-5 stars
            tip_cents: Optional tip, 0 for none
            feedback: Optional free-text feedback

        Returns:
            Completed request with rating attached

        Raises:
            ValueError: If rating or tip is out of range
            RequestNotFoundError: If request not found
            InvalidTransitionError: If request is neither in_progress nor completed
            AlreadyRatedError: If the request was already rated
            AlreadyTippedError: If a tip is given and one was already recorded
        """
        if not 1 <= rating <= 5:
            raise ValueError(f"Rating must be between 1 and 5, got {rating}")
        if tip_cents < 0:
            raise ValueError(f"Tip must not be negative, got {tip_cents}")

        with self._lock_for(request_id):
            current = self._require(request_id)
            promote = current.status == RequestStatus.IN_PROGRESS
            if not promote and current.status != RequestStatus.COMPLETED:
                raise InvalidTransitionError(request_id, current.status, RequestStatus.COMPLETED)
            if current.rating is not None:
                raise AlreadyRatedError(request_id)
            if tip_cents > 0 and current.tip_cents is not None:
                raise AlreadyTippedError(request_id)

            changes = {"rating": rating, "feedback": feedback}
            if tip_cents > 0:
                changes["tip_cents"] = tip_cents
            if promote:
                now = self._timestamp(current)
                changes["status"] = RequestStatus.COMPLETED
                changes["completed_at"] = now
                changes["timeline"] = self._append(
                    current, RequestStatus.COMPLETED, now, STATUS_MESSAGES[RequestStatus.COMPLETED]
                )

            updated = current.model_copy(update=changes)
            if promote:
                self._persist(updated)
            else:
                self.store.update_archived(updated)

        logger.info(f"Request {request_id} rated {rating}/5")
        if promote:
            self.event_bus.publish(StatusAdvanced.create(updated, current.status, TransitionSource.MANUAL))
            self.event_bus.publish(ServiceCompleted.create(updated))
        if tip_cents > 0:
            self.event_bus.publish(TipAdded.create(updated))
        return updated

    def add_tip(self, request_id: UUID, amount_cents: int) -> ServiceRequest:
        """
        Tip a completed request. Only one tip per request.

        Raises:
            ValueError: If amount is not positive
            RequestNotFoundError: If request not found
            InvalidTransitionError: If the request is not completed
            AlreadyTippedError: If the request was already tipped
        """
        if amount_cents <= 0:
            raise ValueError(f"Tip must be positive, got {amount_cents}")

        with self._lock_for(request_id):
            current = self._require_completed(request_id, "tipped")
            if current.tip_cents is not None:
                logger.info(f"Rejected second tip on request {request_id}")
                raise AlreadyTippedError(request_id)

            updated = current.model_copy(update={"tip_cents": amount_cents})
            self.store.update_archived(updated)

        logger.info(f"Request {request_id} tipped {amount_cents} cents")
        self.event_bus.publish(TipAdded.create(updated))
        return updated

    def reserve_payment(self, request_id: UUID) -> ServiceRequest:
        """
        Claim the right to charge a completed, unpaid request.

        At most one reservation per request exists at a time. The holder must
        finish with attach_receipt or release_payment.

        Returns:
            The request to charge

        Raises:
            RequestNotFoundError: If request not found
            InvalidTransitionError: If the request is not completed
            PaymentError: If the request is already paid or a payment is in progress
        """
        with self._lock_for(request_id):
            current = self._require_completed(request_id, "paid")
            if current.receipt is not None:
                raise PaymentError(f"Service request {request_id} is already paid")
            if request_id in self._payments_in_flight:
                logger.info(f"Rejected concurrent payment for request {request_id}")
                raise PaymentError(f"Payment for service request {request_id} is already in progress")

            self._payments_in_flight.add(request_id)
            return current

    def release_payment(self, request_id: UUID) -> None:
        """Drop a payment reservation. No-op if none is held."""
        with self._lock_for(request_id):
            self._payments_in_flight.discard(request_id)

    def attach_receipt(self, request_id: UUID, receipt: Receipt) -> ServiceRequest:
        """
        Record a successful payment on a completed request.

        Clears any payment reservation on the request.

        Raises:
            RequestNotFoundError: If request not found
            InvalidTransitionError: If the request is not completed
            PaymentError: If the request already has a receipt
        """
        with self._lock_for(request_id):
            current = self._require_completed(request_id, "paid")
            if current.receipt is not None:
                raise PaymentError(f"Service request {request_id} is already paid")

            updated = current.model_copy(update={"receipt": receipt})
            self.store.update_archived(updated)
            self._payments_in_flight.discard(request_id)

        logger.info(f"Request {request_id} paid with receipt {receipt.id}")
        return updated

    def record_tracking(
        self,
        request_id: UUID,
        distance_miles: float,
        eta_minutes: int,
        at: datetime,
    ) -> ServiceRequest | None:
        """
        Store the provider's live distance and ETA on an active request.

        Terminal or unknown requests are left alone.

        Returns:
            Updated request, None if nothing was recorded
        """
        with self._lock_for(request_id):
            current = self.store.find(request_id)
            if current is None or current.status.is_terminal:
                return None

            updated = current.model_copy(update={
                "live_distance_miles": distance_miles,
                "live_eta_minutes": eta_minutes,
                "tracked_at": at,
            })
            self.store.save_active(updated)
            return updated

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_active_request(self, customer_id: str) -> ServiceRequest | None:
        return self.store.load_active(customer_id)

    def get_history(self, customer_id: str) -> list[ServiceRequest]:
        return self.store.load_history(customer_id)

    def get_request(self, request_id: UUID) -> ServiceRequest | None:
        """Request by id, active or archived. None if not found."""
        return self.store.find(request_id)

    def list_active_request_ids(self) -> list[UUID]:
        """Ids of every request currently in an active slot."""
        return self.store.active_request_ids()

    def list_provider_jobs(self, provider_id: str) -> list[ServiceRequest]:
        """Every request assigned to a provider, in booking order."""
        jobs = []
        for request_id in self.store.provider_request_ids(provider_id):
            request = self.store.find(request_id)
            if request is not None:
                jobs.append(request)
        return jobs

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _lock_for(self, key) -> threading.RLock:
        key = str(key)
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.RLock()
            return lock

    def _require(self, request_id: UUID) -> ServiceRequest:
        request = self.store.find(request_id)
        if request is None:
            raise RequestNotFoundError(request_id)
        return request

    def _require_completed(self, request_id: UUID, action: str) -> ServiceRequest:
        request = self._require(request_id)
        if request.status != RequestStatus.COMPLETED:
            raise InvalidTransitionError(
                request_id, request.status, RequestStatus.COMPLETED,
                message=f"Service request {request_id} is {request.status.value} "
                        f"and cannot be {action} until completed",
            )
        return request

    def _timestamp(self, request: ServiceRequest) -> datetime:
        # Timeline is strictly increasing, even if the clock stalls or runs backwards.
        now = self._clock()
        last = request.timeline[-1].timestamp
        return now if now > last else last + TIMELINE_TICK

    @staticmethod
    def _append(
        request: ServiceRequest,
        status: RequestStatus,
        at: datetime,
        message: str,
    ) -> list[TimelineEvent]:
        return [*request.timeline, TimelineEvent(status=status, timestamp=at, message=message)]

    def _persist(self, request: ServiceRequest) -> None:
        if request.status.is_terminal:
            self.store.archive(request)
        else:
            self.store.save_active(request)
