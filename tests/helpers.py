# tests/helpers.py

from __future__ import annotations

DEFAULT_PASSWORD = "password123"


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
