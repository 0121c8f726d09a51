# tests/test_rate_limit.py

from __future__ import annotations

from fastapi.testclient import TestClient

from task_tracker.core.config import settings
from task_tracker.core.rate_limit import RateLimiter


class FakeClock:
    def __init__(self, now: float) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_limiter_counts_per_identifier_and_resets_after_window() -> None:
    clock = FakeClock(1000.0)
    limiter = RateLimiter(2, 60, clock=clock)

    assert limiter.hit("a") == (1, 0)
    assert limiter.hit("a") == (0, 0)
    remaining, retry_after = limiter.hit("a")
    assert remaining == 0
    assert retry_after == 60
    assert limiter.hit("b") == (1, 0)

    clock.now += 60
    assert limiter.hit("a") == (1, 0)


def test_retry_after_shrinks_within_window() -> None:
    clock = FakeClock(0.0)
    limiter = RateLimiter(1, 60, clock=clock)
    limiter.hit("a")

    clock.now = 45.0

    assert limiter.hit("a") == (0, 15)


def test_auth_endpoints_are_throttled(client: TestClient) -> None:
    body = {"email": "nobody@example.com", "password": "whatever1"}

    responses = [client.post("/auth/login", json=body) for _ in range(settings.AUTH_RATE_LIMIT + 1)]

    assert all(r.status_code == 401 for r in responses[:-1])
    assert responses[0].headers["X-Limit-Remaining"] == str(settings.AUTH_RATE_LIMIT - 1)
    last = responses[-1]
    assert last.status_code == 429
    assert last.json() == {"message": "Too Many Attempts."}
    assert int(last.headers["Retry-After"]) > 0
    assert last.headers["X-Limit-Remaining"] == "0"


def test_task_endpoints_are_not_throttled_by_auth_limit(client: TestClient, headers) -> None:
    for _ in range(settings.AUTH_RATE_LIMIT + 2):
        assert client.get("/tasks", headers=headers).status_code == 200


def test_expired_windows_are_dropped() -> None:
    clock = FakeClock(1000.0)
    limiter = RateLimiter(5, 60, clock=clock)
    limiter.hit("a")
    limiter.hit("b")
    assert len(limiter) == 2

    clock.now += 61
    limiter.hit("c")

    assert len(limiter) == 1
    assert limiter.hit("a") == (4, 0)
