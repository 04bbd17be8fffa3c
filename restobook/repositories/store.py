"""Persistent key-value collections used by the repositories.

A collection maps text keys to JSON-serializable records. ``values()`` returns
records in key order. Each collection is created with a numeric id and two size
bounds that cannot change once the collection exists.
"""
import copy
import json
import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from restobook.core.errors import StoreError


def encoded_size(value: dict) -> int:
    return len(json.dumps(value, separators=(",", ":"), sort_keys=True).encode("utf-8"))


class KeyValueStore(ABC):
    def __init__(self, collection_id: int, max_key_size: int, max_value_size: int):
        if max_key_size <= 0 or max_value_size <= 0:
            raise StoreError("Store size bounds must be positive.")
        self._collection_id = collection_id
        self._max_key_size = max_key_size
        self._max_value_size = max_value_size

    @property
    def collection_id(self) -> int:
        return self._collection_id

    @property
    def max_key_size(self) -> int:
        return self._max_key_size

    @property
    def max_value_size(self) -> int:
        return self._max_value_size

    def check_bounds(self, key: str, value: Optional[dict] = None) -> None:
        if len(key.encode("utf-8")) > self._max_key_size:
            raise StoreError(f"Key exceeds {self._max_key_size} bytes in collection {self._collection_id}.")
        if value is not None and encoded_size(value) > self._max_value_size:
            raise StoreError(f"Record exceeds {self._max_value_size} bytes in collection {self._collection_id}.")

    @abstractmethod
    def get(self, key: str) -> Optional[dict]:
        ...

    @abstractmethod
    def put(self, key: str, value: dict) -> Optional[dict]:
        """Insert or replace; returns the previous value, if any."""

    @abstractmethod
    def remove(self, key: str) -> Optional[dict]:
        """Delete; returns the removed value, or None when the key was absent."""

    @abstractmethod
    def values(self) -> List[dict]:
        ...


class InMemoryStore(KeyValueStore):
    """Process-local collection, used by tests and the ``memory`` backend."""

    def __init__(self, collection_id: int = 0, max_key_size: int = 44, max_value_size: int = 1024):
        super().__init__(collection_id, max_key_size, max_value_size)
        self._data: Dict[str, dict] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[dict]:
        with self._lock:
            value = self._data.get(key)
        return copy.deepcopy(value) if value is not None else None

    def put(self, key: str, value: dict) -> Optional[dict]:
        self.check_bounds(key, value)
        with self._lock:
            previous = self._data.get(key)
            self._data[key] = copy.deepcopy(value)
        return previous

    def remove(self, key: str) -> Optional[dict]:
        with self._lock:
            return self._data.pop(key, None)

    def values(self) -> List[dict]:
        with self._lock:
            return [copy.deepcopy(self._data[key]) for key in sorted(self._data)]

    def __len__(self) -> int:
        return len(self._data)
