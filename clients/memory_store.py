"""In-process key-value store for development and tests."""

import threading


class InMemoryKeyValueStore:
    """
    Dict-backed implementation of the KeyValueStore port.

    Values are copied on the way in so callers can't mutate stored state.
    Contents are lost when the process exits.
    """

    def __init__(self):
        self._data: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def load(self, key: str) -> bytes | None:
        with self._lock:
            return self._data.get(key)

    def save(self, key: str, value: bytes) -> None:
        with self._lock:
            self._data[key] = bytes(value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def close(self) -> None:
        """No-op. Memory is released with the store."""

    def keys(self) -> list[str]:
        """Snapshot of stored keys."""
        with self._lock:
            return list(self._data)
