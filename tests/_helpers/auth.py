from __future__ import annotations

from fastapi.testclient import TestClient


def register(
    client: TestClient, *, name: str = "Ann", email: str = "ann@x.com", password: str = "secret1"
) -> dict:
    r = client.post("/api/users/register", json={"name": name, "email": email, "password": password})
    assert r.status_code == 200, r.text
    return r.json()


def bearer(pair: dict) -> dict[str, str]:
    return {"Authorization": f"Bearer {pair['token']}"}


def renew(client: TestClient, token: str, refresh_token: str):
    return client.post("/api/users/refresh-token", json={"token": token, "refreshToken": refresh_token})
