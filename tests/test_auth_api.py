from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from todo_api.models.user import User
from todo_api.services.tokens import TokenIssuer
from todo_api.utils.exceptions import InvalidRenewalException
from tests._helpers.auth import bearer, register, renew
from tests._helpers.clock import FakeClock


def _stored_refresh_token(app: FastAPI, user_id: int) -> str | None:
    db = app.state.session_factory()
    try:
        return db.query(User).filter(User.id == user_id).one().refreshToken
    finally:
        db.close()


def test_register_returns_token_pair(client: TestClient) -> None:
    pair = register(client)
    assert pair["token"]
    assert pair["refreshToken"]
    assert pair["name"] == "Ann"
    assert pair["email"] == "ann@x.com"
    assert isinstance(pair["id"], int)


def test_register_duplicate_email_is_bad_request(client: TestClient) -> None:
    register(client)
    r = client.post("/api/users/register", json={"name": "Other", "email": "ann@x.com", "password": "secret2"})
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["message"] == "Email already registered"
    assert body["error"]["code"] == "DUPLICATE_EMAIL"


def test_register_validates_input(client: TestClient) -> None:
    r = client.post("/api/users/register", json={"name": " ", "email": "not-an-email", "password": "123"})
    assert r.status_code == 422
    fields = {d["field"] for d in r.json()["error"]["details"]}
    assert {"name", "email", "password"} <= fields


def test_register_rejects_overlong_name(client: TestClient) -> None:
    r = client.post("/api/users/register", json={"name": "x" * 151, "email": "ann@x.com", "password": "secret1"})
    assert r.status_code == 422
    assert [d["field"] for d in r.json()["error"]["details"]] == ["name"]


def test_login_scenario_rotates_refresh_token(app: FastAPI, client: TestClient) -> None:
    registered = register(client, name="Ann", email="ann@x.com", password="secret1")

    wrong = client.post("/api/users/login", json={"email": "ann@x.com", "password": "wrong"})
    assert wrong.status_code == 401
    assert wrong.json()["error"]["code"] == "INVALID_CREDENTIALS"

    ok = client.post("/api/users/login", json={"email": "ann@x.com", "password": "secret1"})
    assert ok.status_code == 200
    logged_in = ok.json()
    assert logged_in["token"] and logged_in["refreshToken"]
    assert logged_in["id"] == registered["id"]

    stored = _stored_refresh_token(app, registered["id"])
    assert stored == logged_in["refreshToken"]
    assert stored != registered["refreshToken"]


def test_login_unknown_email_is_unauthorized(client: TestClient) -> None:
    r = client.post("/api/users/login", json={"email": "nobody@x.com", "password": "secret1"})
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid credentials"


def test_protected_route_requires_token(client: TestClient) -> None:
    r = client.get("/api/users/me")
    assert r.status_code == 401
    assert r.headers["WWW-Authenticate"] == "Bearer"

    r = client.get("/api/users/me", headers={"Authorization": "Bearer nonsense"})
    assert r.status_code == 401


def test_me_returns_token_subject(client: TestClient) -> None:
    pair = register(client)
    r = client.get("/api/users/me", headers=bearer(pair))
    assert r.status_code == 200
    assert r.json() == {"id": pair["id"], "name": "Ann", "email": "ann@x.com"}


def test_access_token_expires_on_live_traffic(client: TestClient, clock: FakeClock) -> None:
    pair = register(client)
    clock.advance(minutes=15)
    assert client.get("/api/users/me", headers=bearer(pair)).status_code == 200

    clock.advance(seconds=1)
    r = client.get("/api/users/me", headers=bearer(pair))
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "TOKEN_EXPIRED"


def test_renewal_is_single_use(client: TestClient, clock: FakeClock) -> None:
    pair = register(client)
    clock.advance(minutes=20)

    r = renew(client, pair["token"], pair["refreshToken"])
    assert r.status_code == 200
    renewed = r.json()
    assert renewed["token"] != pair["token"]
    assert renewed["refreshToken"] != pair["refreshToken"]
    assert renewed["id"] == pair["id"]
    assert client.get("/api/users/me", headers=bearer(renewed)).status_code == 200

    again = renew(client, pair["token"], pair["refreshToken"])
    assert again.status_code == 400
    assert again.json()["message"] == "Invalid access token or refresh token"

    # The rotated pair keeps working.
    assert renew(client, renewed["token"], renewed["refreshToken"]).status_code == 200


def test_renewal_fails_after_refresh_token_expiry(client: TestClient, clock: FakeClock) -> None:
    pair = register(client)
    clock.advance(days=7)
    r = renew(client, pair["token"], pair["refreshToken"])
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "INVALID_RENEWAL"


def test_renewal_just_before_refresh_expiry_succeeds(client: TestClient, clock: FakeClock) -> None:
    pair = register(client)
    clock.advance(days=7, seconds=-1)
    assert renew(client, pair["token"], pair["refreshToken"]).status_code == 200


@pytest.mark.parametrize(
    "override",
    [
        {"JWT_SECRET_KEY": "forged-signing-key"},
        {"JWT_ISSUER": "someone-else"},
        {"JWT_AUDIENCE": "another-client"},
    ],
)
def test_renewal_rejects_foreign_access_token(
    client: TestClient, settings, clock: FakeClock, override: dict
) -> None:
    pair = register(client)
    forged = TokenIssuer(settings.model_copy(update=override), clock).issue_access_token(
        User(id=pair["id"], name="Ann", email="ann@x.com")
    )
    r = renew(client, forged, pair["refreshToken"])
    assert r.status_code == 400


def test_renewal_failures_are_indistinguishable(client: TestClient) -> None:
    pair = register(client)
    other = register(client, name="Bob", email="bob@x.com", password="secret2")

    responses = [
        renew(client, "", pair["refreshToken"]),
        renew(client, pair["token"], ""),
        renew(client, "garbage", pair["refreshToken"]),
        renew(client, pair["token"], other["refreshToken"]),
        renew(client, pair["token"], "ä" + pair["refreshToken"][1:]),
        renew(client, pair["token"], "Ã¤" + pair["refreshToken"][1:]),
        client.post("/api/users/refresh-token", json={}),
    ]
    assert {r.status_code for r in responses} == {400}
    assert len({r.text for r in responses}) == 1


def test_concurrent_renewal_loses_compare_and_swap(
    app: FastAPI, client: TestClient, clock: FakeClock, monkeypatch: pytest.MonkeyPatch
) -> None:
    pair = register(client)
    clock.advance(minutes=20)
    auth = app.state.auth_service
    issue_refresh_token = auth.issuer.issue_refresh_token

    def rotate_elsewhere_first():
        # A competing renewal commits its rotation between our checks and our write.
        other = app.state.session_factory()
        try:
            other.query(User).filter(User.id == pair["id"]).update({"refreshToken": "rotated-elsewhere"})
            other.commit()
        finally:
            other.close()
        return issue_refresh_token()

    monkeypatch.setattr(auth.issuer, "issue_refresh_token", rotate_elsewhere_first)

    db = app.state.session_factory()
    try:
        with pytest.raises(InvalidRenewalException):
            auth.renew(db, pair["token"], pair["refreshToken"])
    finally:
        db.close()
    assert _stored_refresh_token(app, pair["id"]) == "rotated-elsewhere"


def test_logout_invalidates_refresh_token(app: FastAPI, client: TestClient) -> None:
    pair = register(client)
    r = client.post("/api/users/logout", headers=bearer(pair))
    assert r.status_code == 204
    assert _stored_refresh_token(app, pair["id"]) is None
    assert renew(client, pair["token"], pair["refreshToken"]).status_code == 400


def test_health(client: TestClient) -> None:
    assert client.get("/health").json()["status"] == "ok"
