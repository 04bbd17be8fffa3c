import threading
from contextlib import ExitStack, contextmanager
from typing import Dict


class RestaurantLocks:
    """Re-entrant lock per restaurant id, held across a check-then-write."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.RLock] = {}

    def _lock_for(self, restaurant_id: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(restaurant_id)
            if lock is None:
                lock = self._locks[restaurant_id] = threading.RLock()
            return lock

    @contextmanager
    def hold(self, *restaurant_ids: str):
        # orden fijo de adquisición para evitar deadlock entre dos restaurantes
        with ExitStack() as stack:
            for restaurant_id in sorted(set(restaurant_ids)):
                stack.enter_context(self._lock_for(restaurant_id))
            yield
