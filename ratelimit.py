import math
import time
from typing import Callable

from starlette.requests import Request


def client_ip(request: Request, trust_proxy: bool = False) -> str:
    """Socket peer, or the hop appended by our own proxy when ``trust_proxy``."""
    if trust_proxy:
        xff = (request.headers.get("x-forwarded-for") or "").split(",")[-1].strip()
        if xff:
            return xff
    return request.client.host if request.client else "unknown"


class FixedWindowRateLimiter:
    """
    Counts hits per key inside fixed windows of ``window_seconds``.

    State lives in process memory and is only touched from the event loop.
    A ``limit`` of 0 or less disables limiting.
    """

    def __init__(self, limit: int, window_seconds: int, clock: Callable[[], float] = time.time):
        self.limit = limit
        self.window_seconds = max(1, window_seconds)
        self.clock = clock
        self._counts: dict[tuple[str, int], int] = {}

    @property
    def enabled(self) -> bool:
        return self.limit > 0

    def _window(self) -> int:
        return int(self.clock() // self.window_seconds)

    def _prune(self, current: int) -> None:
        for key in [k for k in self._counts if k[1] != current]:
            del self._counts[key]

    def hit(self, key: str) -> bool:
        """Record a hit for ``key``; return False once the limit is exceeded."""
        if not self.enabled:
            return True
        window = self._window()
        self._prune(window)
        bucket = (key, window)
        self._counts[bucket] = self._counts.get(bucket, 0) + 1
        return self._counts[bucket] <= self.limit

    def retry_after(self, key: str) -> int:
        window_end = (self._window() + 1) * self.window_seconds
        return max(1, math.ceil(window_end - self.clock()))

    def reset(self) -> None:
        self._counts.clear()
