"""
Payment service: charges completed requests through the gateway.

The gateway is an external collaborator; its latency is awaited and any
failure surfaces to the caller as PaymentError. The request is reserved
before the charge is awaited, so concurrent attempts charge it at most once.
"""

import logging
from uuid import UUID

from core.exceptions import PaymentError
from core.models import Receipt
from core.ports import PaymentGateway
from core.services.lifecycle_service import RequestLifecycle

logger = logging.getLogger(__name__)


class PaymentService:
    """Service for settling completed requests."""

    def __init__(self, gateway: PaymentGateway, lifecycle: RequestLifecycle):
        self.gateway = gateway
        self.lifecycle = lifecycle

    async def process_payment(self, request_id: UUID) -> Receipt:
        """
        Charge the amount due (total price plus tip) for a completed request.

        Args:
            request_id: Request UUID

        Returns:
            Receipt, also attached to the request

        Raises:
            RequestNotFoundError: If request not found
            InvalidTransitionError: If the request is not completed
            PaymentError: If the request is already paid or being paid, or the gateway fails
        """
        request = self.lifecycle.reserve_payment(request_id)

        try:
            receipt = await self.gateway.charge(request.amount_due_cents, request.payment_method)
            return self.lifecycle.attach_receipt(request_id, receipt).receipt
        except PaymentError:
            logger.warning(f"Payment failed for request {request_id}")
            raise
        finally:
            self.lifecycle.release_payment(request_id)
