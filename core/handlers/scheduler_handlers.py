"""
Handlers that keep the scheduler in step with the request lifecycle.

On booking: start tracking (and evaluate immediately).
On a manual transition: re-evaluate on demand.
On cancellation or completion: stop tracking.
"""

import logging
from typing import Callable

from core.event_bus import EventBus
from core.events import RequestEvent, ServiceRequestBooked, StatusAdvanced
from core.models import TransitionSource

logger = logging.getLogger(__name__)


def handle_request_booked(scheduler) -> Callable:
    """
    Factory that returns a ServiceRequestBooked handler.

    Args:
        scheduler: ElapsedTimeScheduler instance
    """

    def handler(event: ServiceRequestBooked):
        scheduler.track(event.request.id)

    return handler


def handle_status_advanced(scheduler) -> Callable:
    """
    Factory that returns a StatusAdvanced handler.

    Scheduler-driven transitions are ignored; the scheduler is already
    evaluating that request.
    """

    def handler(event: StatusAdvanced):
        if event.source == TransitionSource.MANUAL:
            scheduler.evaluate(event.request.id)

    return handler


def handle_request_closed(scheduler) -> Callable:
    """Factory that returns a ServiceCancelled/ServiceCompleted handler."""

    def handler(event: RequestEvent):
        scheduler.stop(event.request.id)

    return handler


def register_scheduler_handlers(event_bus: EventBus, scheduler) -> None:
    """Subscribe the scheduler's handlers on the bus."""
    event_bus.subscribe("ServiceRequestBooked", handle_request_booked(scheduler))
    event_bus.subscribe("StatusAdvanced", handle_status_advanced(scheduler))
    closed = handle_request_closed(scheduler)
    event_bus.subscribe("ServiceCancelled", closed)
    event_bus.subscribe("ServiceCompleted", closed)
