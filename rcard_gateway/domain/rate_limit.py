"""Fixed-window rate limiting keyed by (actor, action)"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Tuple

from rcard_gateway.domain.exceptions import RateLimitExceeded

# Expired windows are swept once this many keys are tracked
DEFAULT_SWEEP_THRESHOLD = 1024


@dataclass
class _Window:
    attempts: int
    started_at: float
    window_seconds: float


class RateLimiter:
    """
    In-process attempt counter.

    The first attempt opens a window. Attempts are allowed until max_attempts
    have been counted in the window; the counter resets once the window is
    older than window_seconds. Expired windows are dropped when the number
    of tracked keys reaches sweep_threshold, so only live windows accumulate.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        sweep_threshold: int = DEFAULT_SWEEP_THRESHOLD,
    ):
        self._clock = clock
        self._sweep_threshold = sweep_threshold
        self._next_sweep = sweep_threshold
        self._windows: Dict[Tuple[str, str], _Window] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._windows)

    def _sweep(self, now: float) -> None:
        expired = [key for key, window in self._windows.items() if now - window.started_at > window.window_seconds]
        for key in expired:
            del self._windows[key]
        # Live windows that survive push the next sweep out so sweeping stays amortized
        self._next_sweep = max(self._sweep_threshold, 2 * len(self._windows))

    def allow(self, actor: str, action: str, max_attempts: int, window_seconds: float) -> bool:
        """Record an attempt; False when the actor is over the limit"""
        key = (str(actor), action)
        now = self._clock()

        with self._lock:
            window = self._windows.get(key)
            if window is None or now - window.started_at > window_seconds:
                if window is None and len(self._windows) >= self._next_sweep:
                    self._sweep(now)
                self._windows[key] = _Window(attempts=1, started_at=now, window_seconds=window_seconds)
                return True

            if window.attempts >= max_attempts:
                return False

            window.attempts += 1
            return True

    def check(self, actor: str, action: str, max_attempts: int, window_seconds: float) -> None:
        """Like allow(), but raises RateLimitExceeded when refused"""
        if not self.allow(actor, action, max_attempts, window_seconds):
            raise RateLimitExceeded(f"Too many {action} attempts. Please try again later.")
