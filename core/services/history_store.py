"""
History store: the active slot and request history, per customer.

Layered over the KeyValueStore port. Values are JSON-encoded pydantic
models stored as bytes. Key layout:

    active_request:<customer_id>     the one non-terminal request
    service_history:<customer_id>    terminal requests, newest first
    request_owner:<request_id>       customer_id owning the request
    provider_jobs:<provider_id>      ids of requests assigned to a provider
    active_requests                  ids of every active request (for resume)

Retention is unbounded. History lists and the id indexes are shared by
every request they cover, so each read-modify-write of them runs under the
store lock.
"""

import json
import logging
import threading
from uuid import UUID

from pydantic import TypeAdapter

from core.models import ServiceRequest
from core.ports import KeyValueStore

logger = logging.getLogger(__name__)

_history_adapter = TypeAdapter(list[ServiceRequest])

ACTIVE_INDEX_KEY = "active_requests"


def _active_key(customer_id: str) -> str:
    return f"active_request:{customer_id}"


def _history_key(customer_id: str) -> str:
    return f"service_history:{customer_id}"


def _owner_key(request_id: UUID) -> str:
    return f"request_owner:{request_id}"


def _provider_key(provider_id: str) -> str:
    return f"provider_jobs:{provider_id}"


class HistoryStore:
    """Persists active and terminal service requests."""

    def __init__(self, kv: KeyValueStore):
        self.kv = kv
        self._lock = threading.RLock()

    # -------------------------------------------------------------------------
    # Active slot
    # -------------------------------------------------------------------------

    def load_active(self, customer_id: str) -> ServiceRequest | None:
        """The customer's active request, None if there is none."""
        raw = self.kv.load(_active_key(customer_id))
        if raw is None:
            return None
        return ServiceRequest.model_validate_json(raw)

    def save_active(self, request: ServiceRequest) -> None:
        """
        Write a non-terminal request into its customer's active slot.

        Raises:
            ValueError: If the request is terminal
        """
        if request.status.is_terminal:
            raise ValueError(
                f"Service request {request.id} is {request.status.value} and cannot be active"
            )

        with self._lock:
            self.kv.save(_active_key(request.customer_id), request.model_dump_json().encode())
            self.kv.save(_owner_key(request.id), request.customer_id.encode())
            self._add_to_index(_provider_key(request.provider.id), request.id)
            self._add_to_index(ACTIVE_INDEX_KEY, request.id)

    def active_request_ids(self) -> list[UUID]:
        """Ids of every request currently in an active slot."""
        return self._load_index(ACTIVE_INDEX_KEY)

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------

    def load_history(self, customer_id: str) -> list[ServiceRequest]:
        """Terminal requests for a customer, newest first."""
        raw = self.kv.load(_history_key(customer_id))
        if raw is None:
            return []
        return _history_adapter.validate_json(raw)

    def archive(self, request: ServiceRequest) -> None:
        """
        Move a terminal request out of the active slot into history.

        Happens exactly once per request.

        Raises:
            ValueError: If the request is not terminal or already archived
        """
        if not request.status.is_terminal:
            raise ValueError(
                f"Service request {request.id} is {request.status.value} and cannot be archived"
            )

        with self._lock:
            history = self.load_history(request.customer_id)
            if any(entry.id == request.id for entry in history):
                raise ValueError(f"Service request {request.id} is already archived")

            self._save_history(request.customer_id, [request, *history])
            self.kv.save(_owner_key(request.id), request.customer_id.encode())
            self._add_to_index(_provider_key(request.provider.id), request.id)

            active = self.load_active(request.customer_id)
            if active is not None and active.id == request.id:
                self.kv.delete(_active_key(request.customer_id))
            self._remove_from_index(ACTIVE_INDEX_KEY, request.id)

        logger.info(f"Archived service request {request.id} as {request.status.value}")

    def update_archived(self, request: ServiceRequest) -> None:
        """
        Replace an archived request in place.

        Raises:
            ValueError: If the request is not in history
        """
        with self._lock:
            history = self.load_history(request.customer_id)
            for i, entry in enumerate(history):
                if entry.id == request.id:
                    history[i] = request
                    self._save_history(request.customer_id, history)
                    return
        raise ValueError(f"Service request {request.id} is not archived")

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def owner_of(self, request_id: UUID) -> str | None:
        """Customer id owning a request, None if unknown."""
        raw = self.kv.load(_owner_key(request_id))
        return raw.decode() if raw is not None else None

    def find(self, request_id: UUID) -> ServiceRequest | None:
        """Locate a request in its owner's active slot or history."""
        customer_id = self.owner_of(request_id)
        if customer_id is None:
            return None

        active = self.load_active(customer_id)
        if active is not None and active.id == request_id:
            return active

        for entry in self.load_history(customer_id):
            if entry.id == request_id:
                return entry
        return None

    def provider_request_ids(self, provider_id: str) -> list[UUID]:
        """Ids of requests assigned to a provider, in booking order."""
        return self._load_index(_provider_key(provider_id))

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _save_history(self, customer_id: str, history: list[ServiceRequest]) -> None:
        self.kv.save(_history_key(customer_id), _history_adapter.dump_json(history))

    def _load_index(self, key: str) -> list[UUID]:
        raw = self.kv.load(key)
        if raw is None:
            return []
        return [UUID(value) for value in json.loads(raw)]

    def _add_to_index(self, key: str, request_id: UUID) -> None:
        ids = self._load_index(key)
        if request_id not in ids:
            ids.append(request_id)
            self.kv.save(key, json.dumps([str(i) for i in ids]).encode())

    def _remove_from_index(self, key: str, request_id: UUID) -> None:
        ids = self._load_index(key)
        if request_id in ids:
            ids.remove(request_id)
            self.kv.save(key, json.dumps([str(i) for i in ids]).encode())
