"""
Google Sign-In ID token verification.

The browser obtains an ID token from Google Identity Services and posts it to
``/users/google-signin``. The token is an RS256 JWT signed with one of
Google's rotating keys, published as a JWKS document. Keys are fetched with
httpx and cached for as long as Google's ``Cache-Control: max-age`` allows.
"""
import logging
import re
import threading
import time
from dataclasses import dataclass

import httpx
from jose import JWTError, jwt

from todo_api.utils.exceptions import InvalidAssertionError

logger = logging.getLogger(__name__)

GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")
DEFAULT_CERTS_MAX_AGE = 3600
# Minimum seconds between refetches triggered by an unknown key id.
DEFAULT_REFETCH_INTERVAL = 60.0

_MAX_AGE_RE = re.compile(r"max-age=(\d+)")


@dataclass(frozen=True)
class VerifiedIdentity:
    email: str
    name:  str


class GoogleIdentityVerifier:

    def __init__(
        self,
        client_id: str,
        certs_url: str = "https://www.googleapis.com/oauth2/v3/certs",
        http_client: httpx.Client | None = None,
        request_timeout: float = 10.0,
        refetch_interval: float = DEFAULT_REFETCH_INTERVAL,
    ):
        self.client_id = client_id
        self.certs_url = certs_url
        self._http = http_client or httpx.Client(timeout=request_timeout)
        self._lock = threading.Lock()
        self._certs: dict | None = None
        self._certs_expire_at = 0.0
        self._fetched_at: float | None = None
        self.refetch_interval = refetch_interval

    # ─── Key retrieval ────────────────────────────────────────────────────────
    def _is_usable(self, kid: str | None, now: float) -> bool:
        if self._certs is None or now >= self._certs_expire_at:
            return False
        if kid is None or kid in {k.get("kid") for k in self._certs.get("keys", [])}:
            return True
        # Unknown kid: refetch, at most once per refetch_interval.
        return now - self._fetched_at < self.refetch_interval

    def _signing_keys(self, kid: str | None = None) -> dict:
        with self._lock:
            now = time.monotonic()
            if self._is_usable(kid, now):
                return self._certs

            try:
                response = self._http.get(self.certs_url)
                response.raise_for_status()
                certs = response.json()
            except (httpx.HTTPError, ValueError) as exc:
                logger.error(f"Could not fetch Google signing keys from {self.certs_url}: {exc}")
                raise InvalidAssertionError("Signing keys unavailable") from exc

            match = _MAX_AGE_RE.search(response.headers.get("cache-control", ""))
            max_age = int(match.group(1)) if match else DEFAULT_CERTS_MAX_AGE
            self._certs = certs
            self._fetched_at = now
            self._certs_expire_at = now + max_age
            logger.info(f"Loaded {len(certs.get('keys', []))} Google signing keys (max-age {max_age}s)")
            return certs

    # ─── Verification ─────────────────────────────────────────────────────────
    def verify(self, id_token: str) -> VerifiedIdentity:
        """
        Verify signature, audience, issuer and expiry of a Google ID token.
        Raises InvalidAssertionError on any failure.
        """
        if not self.client_id:
            raise InvalidAssertionError("GOOGLE_CLIENT_ID is not configured")
        if not id_token:
            raise InvalidAssertionError("Empty ID token")

        try:
            kid = jwt.get_unverified_header(id_token).get("kid")
            claims = jwt.decode(
                id_token,
                self._signing_keys(kid),
                algorithms=["RS256"],
                audience=self.client_id,
                issuer=GOOGLE_ISSUERS,
                options={"verify_at_hash": False, "require_exp": True},
            )
        except JWTError as exc:
            raise InvalidAssertionError(str(exc)) from exc

        email = claims.get("email")
        if not email:
            raise InvalidAssertionError("ID token carries no email")
        if claims.get("email_verified") in (False, "false"):
            raise InvalidAssertionError("Email address is not verified")

        name = claims.get("name") or email.split("@", 1)[0]
        return VerifiedIdentity(email=email, name=name)
