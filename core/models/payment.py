"""Payment domain models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class PaymentMethod(str, Enum):
    """How the customer pays."""

    CARD = "card"
    CASH = "cash"


class Receipt(BaseModel):
    """Proof of a successful charge."""

    id: str
    amount_cents: int = Field(..., ge=0)
    method: PaymentMethod
    processed_at: datetime
