"""Simulated payment gateway implementing the PaymentGateway port."""

import asyncio
import logging
from uuid import uuid4

from core.exceptions import PaymentError
from core.models import PaymentMethod, Receipt
from utils.timezone import Clock, now_utc

logger = logging.getLogger(__name__)


class SimulatedPaymentGateway:
    """
    Accepts every charge after a simulated delay.

    Methods listed in declined_methods are always refused, which lets tests
    and demos exercise the failure path.
    """

    def __init__(
        self,
        latency_seconds: float = 0.0,
        declined_methods: set[PaymentMethod] | None = None,
        clock: Clock = now_utc,
    ):
        self.latency_seconds = latency_seconds
        self.declined_methods = set(declined_methods or ())
        self._clock = clock

    async def charge(self, amount_cents: int, method: PaymentMethod) -> Receipt:
        """
        Charge amount_cents using method.

        Raises:
            PaymentError: If amount is negative or the method is declined
        """
        if amount_cents < 0:
            raise PaymentError(f"Cannot charge a negative amount ({amount_cents} cents)")

        if self.latency_seconds:
            await asyncio.sleep(self.latency_seconds)

        if method in self.declined_methods:
            logger.warning(f"Simulated gateway declined {method.value} charge of {amount_cents} cents")
            raise PaymentError(f"Payment method '{method.value}' was declined")

        return Receipt(
            id=f"payment_{uuid4().hex[:12]}",
            amount_cents=amount_cents,
            method=method,
            processed_at=self._clock(),
        )
