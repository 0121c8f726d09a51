import logging
import threading
import time
from typing import Callable, Dict, Tuple

from fastapi import HTTPException, Request, status

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Простейший rate limiting по IP с фиксированным окном:
    - limit запросов за window_seconds.
    - При превышении — 429 + Retry-After.

    Экземпляр используется как FastAPI-зависимость.
    """

    def __init__(
        self,
        limit: int,
        window_seconds: int = 60,
        *,
        scope: str = "default",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self.scope = scope
        self._clock = clock
        self._store: Dict[str, Tuple[int, float]] = {}  # ip -> (count, window_start)
        self._lock = threading.Lock()

    def reset(self) -> None:
        with self._lock:
            self._store.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def _purge(self, now: float) -> None:
        # закончившиеся окна больше ничего не ограничивают
        expired = [
            key for key, (_, window_start) in self._store.items()
            if now - window_start >= self.window_seconds
        ]
        for key in expired:
            del self._store[key]

    def hit(self, identifier: str) -> Tuple[int, int]:
        """Учитывает запрос, возвращает (remaining, retry_after)."""
        now = self._clock()
        with self._lock:
            self._purge(now)
            count, window_start = self._store.get(identifier, (0, now))

            # новое окно, если предыдущее закончилось
            if now - window_start >= self.window_seconds:
                count = 0
                window_start = now

            count += 1
            self._store[identifier] = (count, window_start)

        remaining = max(self.limit - count, 0)
        retry_after = 0
        if count > self.limit:
            retry_after = max(int(self.window_seconds - (now - window_start)), 1)
        return remaining, retry_after

    async def __call__(self, request: Request) -> None:
        identifier = (request.client.host if request.client else None) or "unknown"
        remaining, retry_after = self.hit(identifier)

        # сохраняем значения в request.state, чтобы потом добавить их в заголовки
        request.state.x_limit_remaining = remaining
        request.state.retry_after = retry_after

        if retry_after:
            logger.warning("Rate limit exceeded for %s on %s", identifier, self.scope)
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too Many Attempts.",
                headers={
                    "X-Limit-Remaining": "0",
                    "Retry-After": str(retry_after),
                },
            )
