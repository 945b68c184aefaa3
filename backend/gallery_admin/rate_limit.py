# Fixed-window rate limiting for login attempts

import logging
import threading

RATE_LIMIT_MAX = 5
RATE_LIMIT_WINDOW = 3600  # seconds

logger = logging.getLogger(__name__)


class CounterStore:
    """Key/value store for attempt counters.

    Implementations only need ``get`` and ``put`` with a time-to-live, so
    an in-process dict or a shared key-value service can back the limiter.
    Values are ``(count, window_end)`` pairs; an expired key reads as None.
    """

    def get(self, key: str, now: float):
        raise NotImplementedError

    def put(self, key: str, value: tuple, ttl: float, now: float) -> None:
        raise NotImplementedError


class InMemoryCounterStore(CounterStore):
    """Counters held in this process. Suitable for single-instance deployments."""

    def __init__(self):
        self._data = {}
        self._lock = threading.Lock()

    def get(self, key, now):
        with self._lock:
            item = self._data.get(key)
            if item is None:
                return None
            value, expires_at = item
            if expires_at <= now:
                del self._data[key]
                return None
            return value

    def put(self, key, value, ttl, now):
        with self._lock:
            self._data[key] = (value, now + ttl)


class RateLimiter:
    def __init__(self, store: CounterStore, max_attempts: int = RATE_LIMIT_MAX,
                 window: int = RATE_LIMIT_WINDOW):
        self.store = store
        self.max_attempts = max_attempts
        self.window = window

    def check_and_increment(self, key: str, now: float) -> bool:
        """Count one attempt for ``key``. Returns False once the limit is reached.

        If the counter store fails the attempt is allowed: login stays
        available when the store is down.
        """
        try:
            current = self.store.get(key, now)
            if current is None:
                count, window_end = 0, now + self.window
            else:
                count, window_end = current
            if count >= self.max_attempts:
                logger.info(f'Rate limit reached for {key}')
                return False
            # the window is anchored at the first attempt, later writes keep its end
            self.store.put(key, (count + 1, window_end), max(window_end - now, 0), now)
        except Exception:
            logger.warning(f'Rate limit store unavailable, allowing {key}', exc_info=True)
            return True
        return True
