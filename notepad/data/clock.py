from __future__ import annotations

import threading
import time
from collections.abc import Callable


class MillisClock:
    """Wall-clock milliseconds that never repeat or go backwards in-process."""

    def __init__(self, source: Callable[[], float] = time.time) -> None:
        self._source = source
        self._lock = threading.Lock()
        self._last = 0

    def __call__(self) -> int:
        with self._lock:
            now = int(self._source() * 1000)
            if now <= self._last:
                now = self._last + 1
            self._last = now
            return now


now_millis = MillisClock()
