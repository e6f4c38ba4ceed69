"""
Elapsed-time scheduler for automatic request progression.

A cooperative re-evaluation loop, not a thread pool. Every tick (and on
demand, right after booking or a manual transition) each tracked request is
re-evaluated:

1. The provider's live position is simulated from its booked location and
   the live distance/ETA to the customer is recorded.
2. The status implied by the minutes elapsed since creation is computed
   from the configured thresholds (strictly greater than).
3. The request walks forward one legal step at a time until it reaches
   that status, so a late evaluation (e.g. after the process was suspended)
   converges on the right status while every intermediate status still
   gets its own timeline entry.

Evaluations are idempotent: a second evaluation at the same instant finds
the request already at its target and appends nothing. Terminal requests
are dropped from tracking and never advanced again.
"""

import asyncio
import contextlib
import logging
import random
import threading
from uuid import UUID

from core.exceptions import InvalidTransitionError
from core.models import Coordinate, RequestStatus, ServiceRequest, TransitionSource
from core.services.geo_service import GeoService
from core.services.lifecycle_service import RequestLifecycle
from utils.timezone import Clock, minutes_since, now_utc

logger = logging.getLogger(__name__)


class ElapsedTimeScheduler:
    """Drives tracked requests forward based on time since creation."""

    def __init__(
        self,
        lifecycle: RequestLifecycle,
        geo: GeoService,
        thresholds_minutes: dict[RequestStatus, float],
        interval_seconds: float = 10.0,
        clock: Clock = now_utc,
        jitter_degrees: float = 0.005,
        seed: int | None = None,
    ):
        self.lifecycle = lifecycle
        self.geo = geo
        self.interval_seconds = interval_seconds
        self.jitter_degrees = jitter_degrees
        self._thresholds = sorted(thresholds_minutes.items(), key=lambda item: item[0].rank)
        self._clock = clock
        self._rng = random.Random(seed)
        self._tracked: set[UUID] = set()
        self._guard = threading.Lock()
        self._task: asyncio.Task | None = None

    # -------------------------------------------------------------------------
    # Tracking
    # -------------------------------------------------------------------------

    def track(self, request_id: UUID) -> ServiceRequest | None:
        """Start tracking a request and evaluate it immediately."""
        with self._guard:
            self._tracked.add(request_id)
        return self.evaluate(request_id)

    def stop(self, request_id: UUID) -> bool:
        """
        Stop tracking a request.

        Returns:
            True if it was being tracked
        """
        with self._guard:
            if request_id not in self._tracked:
                return False
            self._tracked.discard(request_id)
        logger.debug(f"Stopped tracking request {request_id}")
        return True

    def is_tracking(self, request_id: UUID) -> bool:
        with self._guard:
            return request_id in self._tracked

    def tracked_ids(self) -> list[UUID]:
        with self._guard:
            return list(self._tracked)

    def resume(self) -> int:
        """
        Track every persisted active request, e.g. after a restart.

        Returns:
            Number of requests now tracked
        """
        request_ids = self.lifecycle.list_active_request_ids()
        for request_id in request_ids:
            self.track(request_id)
        if request_ids:
            logger.info(f"Resumed tracking of {len(request_ids)} active requests")
        return len(self.tracked_ids())

    # -------------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------------

    def target_status(self, elapsed_minutes: float) -> RequestStatus:
        """Furthest status whose threshold has been strictly exceeded."""
        target = RequestStatus.PENDING
        for status, threshold in self._thresholds:
            if elapsed_minutes > threshold:
                target = status
        return target

    def evaluate(self, request_id: UUID) -> ServiceRequest | None:
        """
        Re-evaluate one tracked request.

        Returns:
            The request as it stands after evaluation, None if untracked or missing
        """
        if not self.is_tracking(request_id):
            return None

        request = self.lifecycle.get_request(request_id)
        if request is None or request.status.is_terminal:
            self.stop(request_id)
            return request

        now = self._clock()
        request = self._refresh_tracking(request, now) or request

        target = self.target_status(minutes_since(request.created_at, now))
        while request.status.rank < target.rank:
            if not self.is_tracking(request_id):
                break
            try:
                request = self.lifecycle.advance_status(
                    request_id,
                    request.status.successor,
                    source=TransitionSource.SCHEDULER,
                )
            except InvalidTransitionError:
                # A manual transition got there first; pick up from it next time.
                logger.debug(f"Scheduler lost race on request {request_id}")
                request = self.lifecycle.get_request(request_id)
                break

        if request is not None and request.status.is_terminal:
            self.stop(request_id)
        return request

    def tick(self) -> None:
        """Evaluate every tracked request once."""
        for request_id in self.tracked_ids():
            try:
                self.evaluate(request_id)
            except Exception:
                logger.exception(f"Scheduler evaluation failed for request {request_id}")

    def _refresh_tracking(self, request: ServiceRequest, now) -> ServiceRequest | None:
        provider_position = self._simulate_position(request.provider.location)
        distance = self.geo.distance(provider_position, request.location)
        return self.lifecycle.record_tracking(
            request.id,
            distance_miles=round(distance, 2),
            eta_minutes=self.geo.eta_minutes(distance),
            at=now,
        )

    def _simulate_position(self, origin: Coordinate) -> Coordinate:
        jitter = self.jitter_degrees
        lat = origin.lat + (self._rng.random() * 2 - 1) * jitter
        lng = origin.lng + (self._rng.random() * 2 - 1) * jitter
        return Coordinate(lat=max(-90.0, min(90.0, lat)), lng=max(-180.0, min(180.0, lng)))

    # -------------------------------------------------------------------------
    # Loop
    # -------------------------------------------------------------------------

    async def run(self) -> None:
        """Tick every interval until cancelled."""
        while True:
            await asyncio.sleep(self.interval_seconds)
            self.tick()

    def start(self) -> None:
        """Start the loop on the running event loop. No-op if already running."""
        if self._task is not None and not self._task.done():
            return
        self._task = asyncio.get_running_loop().create_task(self.run())
        logger.info(f"Scheduler started (every {self.interval_seconds:g}s)")

    async def shutdown(self) -> None:
        """Cancel the loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Scheduler stopped")

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()
