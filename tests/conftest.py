# tests/conftest.py

from __future__ import annotations

import os

# окружение должно быть готово ДО импорта приложения: settings читаются при импорте
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["JWT_BLACKLIST_ENABLED"] = "true"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["AUTH_RATE_LIMIT"] = "10"
os.environ["LOG_LEVEL"] = "WARNING"

from collections.abc import Callable, Iterator
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from task_tracker.api import deps
from task_tracker.core.security import token_service
from task_tracker.db.session import Base, SessionLocal, engine
from task_tracker.main import app

from .helpers import DEFAULT_PASSWORD, auth_headers


@pytest.fixture(autouse=True)
def fresh_state() -> Iterator[None]:
    """
    Clean schema and in-process stores for every test.

    The rate limiter and the revocation list live in memory and would
    otherwise leak between tests.
    """
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    deps.auth_rate_limit.reset()
    if token_service.revocation is not None:
        token_service.revocation.clear()
    app.dependency_overrides.clear()
    yield
    app.dependency_overrides.clear()


@pytest.fixture()
def client() -> Iterator[TestClient]:
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def db() -> Iterator[Session]:
    """
    Direct session on the same in-memory database the app uses.

    Commit before calling the API: the app shares the single connection.
    """
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def register_user(client: TestClient) -> Callable[..., dict[str, Any]]:
    """Registers a user through the API and returns the 201 response body."""
    counter = {"n": 0}

    def _register(
        email: str | None = None,
        name: str = "Test User",
        password: str = DEFAULT_PASSWORD,
    ) -> dict[str, Any]:
        counter["n"] += 1
        email = email or f"user{counter['n']}@example.com"
        resp = client.post(
            "/auth/register",
            json={
                "name": name,
                "email": email,
                "password": password,
                "password_confirmation": password,
            },
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _register


@pytest.fixture()
def user(register_user) -> dict[str, Any]:
    return register_user(email="owner@example.com")


@pytest.fixture()
def headers(user: dict[str, Any]) -> dict[str, str]:
    return auth_headers(user["token"])
