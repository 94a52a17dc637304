from __future__ import annotations

import time

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi import FastAPI
from fastapi.testclient import TestClient
from jose import jwk, jwt

from todo_api.dependencies import get_identity_verifier
from todo_api.services.google_identity import GoogleIdentityVerifier, VerifiedIdentity
from todo_api.utils.exceptions import InvalidAssertionError
from tests._helpers.auth import bearer, register
from tests._helpers.constants import TEST_GOOGLE_CLIENT_ID

CERTS_URL = "https://certs.test/oauth2/v3/certs"


def _rsa_key() -> tuple[str, dict]:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode()
    public_pem = key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    public_jwk = jwk.construct(public_pem, "RS256").to_dict()
    public_jwk["kid"] = "test-key"
    return private_pem, public_jwk


@pytest.fixture(scope="module")
def google_key() -> tuple[str, dict]:
    return _rsa_key()


@pytest.fixture
def certs_requests() -> list[httpx.Request]:
    return []


@pytest.fixture
def verifier(google_key, certs_requests) -> GoogleIdentityVerifier:
    _, public_jwk = google_key

    def handler(request: httpx.Request) -> httpx.Response:
        certs_requests.append(request)
        return httpx.Response(
            200,
            json={"keys": [public_jwk]},
            headers={"Cache-Control": "public, max-age=19800, must-revalidate, no-transform"},
        )

    http = httpx.Client(transport=httpx.MockTransport(handler))
    return GoogleIdentityVerifier(TEST_GOOGLE_CLIENT_ID, CERTS_URL, http_client=http)


def _id_token(private_pem: str, kid: str = "test-key", **overrides) -> str:
    now = int(time.time())
    claims = {
        "iss": "https://accounts.google.com",
        "aud": TEST_GOOGLE_CLIENT_ID,
        "sub": "109876543210",
        "email": "ann@gmail.com",
        "email_verified": True,
        "name": "Ann Example",
        "iat": now,
        "exp": now + 3600,
    }
    claims.update(overrides)
    claims = {k: v for k, v in claims.items() if v is not None}
    return jwt.encode(claims, private_pem, algorithm="RS256", headers={"kid": kid})


# ─── Verifier ─────────────────────────────────────────────────────────────────
def test_verifier_accepts_google_token(verifier, google_key) -> None:
    private_pem, _ = google_key
    identity = verifier.verify(_id_token(private_pem))
    assert identity == VerifiedIdentity(email="ann@gmail.com", name="Ann Example")


def test_verifier_accepts_bare_issuer(verifier, google_key) -> None:
    private_pem, _ = google_key
    assert verifier.verify(_id_token(private_pem, iss="accounts.google.com")).email == "ann@gmail.com"


def test_verifier_falls_back_to_email_local_part(verifier, google_key) -> None:
    private_pem, _ = google_key
    assert verifier.verify(_id_token(private_pem, name=None)).name == "ann"


@pytest.mark.parametrize(
    "overrides",
    [
        {"aud": "someone-elses-client-id"},
        {"iss": "https://evil.example"},
        {"exp": int(time.time()) - 10},
        {"email": None},
        {"email_verified": False},
    ],
)
def test_verifier_rejects_bad_claims(verifier, google_key, overrides) -> None:
    private_pem, _ = google_key
    with pytest.raises(InvalidAssertionError):
        verifier.verify(_id_token(private_pem, **overrides))


def test_verifier_rejects_foreign_signature(verifier) -> None:
    other_private_pem, _ = _rsa_key()
    with pytest.raises(InvalidAssertionError):
        verifier.verify(_id_token(other_private_pem))


def test_verifier_caches_signing_keys(verifier, google_key, certs_requests) -> None:
    private_pem, _ = google_key
    verifier.verify(_id_token(private_pem))
    verifier.verify(_id_token(private_pem, email="bob@gmail.com"))
    assert len(certs_requests) == 1
    assert str(certs_requests[0].url) == CERTS_URL


def test_verifier_refetches_keys_for_unknown_key_id(google_key) -> None:
    private_pem, public_jwk = google_key
    rotated_pem, rotated_jwk = _rsa_key()
    rotated_jwk["kid"] = "rotated-key"
    published = [public_jwk]
    fetches: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        fetches.append(request)
        return httpx.Response(200, json={"keys": list(published)}, headers={"Cache-Control": "max-age=19800"})

    http = httpx.Client(transport=httpx.MockTransport(handler))
    verifier = GoogleIdentityVerifier(TEST_GOOGLE_CLIENT_ID, CERTS_URL, http_client=http, refetch_interval=0)
    verifier.verify(_id_token(private_pem))

    published.append(rotated_jwk)
    assert verifier.verify(_id_token(rotated_pem, kid="rotated-key")).email == "ann@gmail.com"
    assert len(fetches) == 2


def test_verifier_limits_refetches_for_unknown_key_ids(verifier, google_key, certs_requests) -> None:
    private_pem, _ = google_key
    other_private_pem, _ = _rsa_key()
    verifier.verify(_id_token(private_pem))

    for _ in range(3):
        with pytest.raises(InvalidAssertionError):
            verifier.verify(_id_token(other_private_pem, kid="made-up"))
    assert len(certs_requests) == 1


def test_verifier_without_client_id_rejects_everything(google_key) -> None:
    private_pem, _ = google_key
    with pytest.raises(InvalidAssertionError):
        GoogleIdentityVerifier("").verify(_id_token(private_pem))


def test_verifier_key_fetch_failure(google_key) -> None:
    private_pem, _ = google_key
    http = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(503)))
    verifier = GoogleIdentityVerifier(TEST_GOOGLE_CLIENT_ID, CERTS_URL, http_client=http)
    with pytest.raises(InvalidAssertionError):
        verifier.verify(_id_token(private_pem))


# ─── Endpoint ─────────────────────────────────────────────────────────────────
class FakeVerifier:
    def __init__(self, identities: dict[str, VerifiedIdentity]) -> None:
        self.identities = identities

    def verify(self, id_token: str) -> VerifiedIdentity:
        try:
            return self.identities[id_token]
        except KeyError:
            raise InvalidAssertionError("unknown token")


@pytest.fixture
def google_app(app: FastAPI) -> FastAPI:
    fake = FakeVerifier({
        "ann-token-1": VerifiedIdentity(email="ann@gmail.com", name="Ann"),
        "ann-token-2": VerifiedIdentity(email="ann@gmail.com", name="Ann"),
        "bob-token":   VerifiedIdentity(email="bob@x.com", name="Bob"),
        "long-token":  VerifiedIdentity(email="long@gmail.com", name="L" * 300),
    })
    app.dependency_overrides[get_identity_verifier] = lambda: fake
    return app


def _google(client: TestClient, id_token: str):
    return client.post("/api/users/google-signin", json={"idToken": id_token})


def test_google_sign_in_provisions_once(google_app: FastAPI, client: TestClient) -> None:
    first = _google(client, "ann-token-1")
    assert first.status_code == 200
    second = _google(client, "ann-token-2")
    assert second.status_code == 200

    assert first.json()["id"] == second.json()["id"]
    assert first.json()["refreshToken"] != second.json()["refreshToken"]
    me = client.get("/api/users/me", headers=bearer(second.json()))
    assert me.json() == {"id": first.json()["id"], "name": "Ann", "email": "ann@gmail.com"}


def test_google_sign_in_rejects_invalid_assertion(google_app: FastAPI, client: TestClient) -> None:
    r = _google(client, "forged")
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "INVALID_ASSERTION"


def test_google_account_cannot_use_password_login(google_app: FastAPI, client: TestClient) -> None:
    assert _google(client, "ann-token-1").status_code == 200
    for password in ("", "anything"):
        r = client.post("/api/users/login", json={"email": "ann@gmail.com", "password": password})
        assert r.status_code == 401


def test_google_sign_in_reuses_registered_account(google_app: FastAPI, client: TestClient) -> None:
    registered = register(client, name="Bob", email="bob@x.com", password="secret2")
    signed_in = _google(client, "bob-token").json()
    assert signed_in["id"] == registered["id"]
    # Password login still works for the original account.
    r = client.post("/api/users/login", json={"email": "bob@x.com", "password": "secret2"})
    assert r.status_code == 200


def test_google_sign_in_truncates_overlong_name(google_app: FastAPI, client: TestClient) -> None:
    r = _google(client, "long-token")
    assert r.status_code == 200
    assert r.json()["name"] == "L" * 150
