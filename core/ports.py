"""
Interfaces the core consumes from its external collaborators.

Implementations live in clients/. The core only depends on these shapes.
"""

from typing import Protocol

from core.models import Coordinate, PaymentMethod, Receipt


class PositionProvider(Protocol):
    """Source of the device's live position. Raises PositionUnavailableError when no fix is possible."""

    async def get_position(self) -> Coordinate: ...


class Geocoder(Protocol):
    """Resolves free-text addresses. Returns None when nothing matches."""

    async def resolve(self, address: str) -> Coordinate | None: ...


class PaymentGateway(Protocol):
    """Charges customers. Raises PaymentError on decline or failure."""

    async def charge(self, amount_cents: int, method: PaymentMethod) -> Receipt: ...


class KeyValueStore(Protocol):
    """
    Durable key-value storage.

    No transactional guarantees beyond last-write-wins per key.
    """

    def load(self, key: str) -> bytes | None: ...

    def save(self, key: str, value: bytes) -> None: ...

    def delete(self, key: str) -> None: ...

    def close(self) -> None: ...
