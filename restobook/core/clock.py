import threading
import time


class Clock:
    """Nanosecond timestamps that never go backwards within the process."""

    def __init__(self, source=time.time_ns):
        self._source = source
        self._last = 0
        self._lock = threading.Lock()

    def now(self) -> int:
        with self._lock:
            current = self._source()
            if current < self._last:
                current = self._last
            self._last = current
            return current
