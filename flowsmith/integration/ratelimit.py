# flowsmith/integration/ratelimit.py
from __future__ import annotations

import threading
import time
from collections import deque
from typing import Callable, Deque, Dict, Optional


class SlidingWindowLimiter:
    """
    Per-client sliding-window counter: at most `max_requests` calls in any
    `window_sec` span. State lives on the instance; pass the instance to whatever
    needs it. `clock` must be monotonic.
    """

    def __init__(
        self,
        max_requests: int = 10,
        window_sec: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if window_sec <= 0:
            raise ValueError("window_sec must be > 0")
        self.max_requests = max_requests
        self.window_sec = window_sec
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()

    def _prune(self, client_id: str, now: float) -> Deque[float]:
        hits = self._hits.get(client_id)
        if hits is None:
            return deque()
        cutoff = now - self.window_sec
        while hits and hits[0] <= cutoff:
            hits.popleft()
        if not hits:
            # drop idle clients so the map does not grow unbounded
            del self._hits[client_id]
        return hits

    def allow(self, client_id: str) -> bool:
        """Record one call for `client_id` and return whether it is admitted."""
        with self._lock:
            now = self._clock()
            hits = self._prune(client_id, now)
            if len(hits) >= self.max_requests:
                return False
            hits.append(now)
            self._hits[client_id] = hits
            return True

    def remaining(self, client_id: str) -> int:
        with self._lock:
            hits = self._prune(client_id, self._clock())
            return self.max_requests - len(hits)

    def reset(self, client_id: Optional[str] = None) -> None:
        with self._lock:
            if client_id is None:
                self._hits.clear()
            else:
                self._hits.pop(client_id, None)
