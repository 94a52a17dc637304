"""
Access-token issuing and validation.

Access tokens are HS256 JWTs carrying the user's id, email and name. The
validator has two modes that share every check except expiry:

* ``validate_live``        : per-request, expiry enforced (401 on failure)
* ``validate_for_renewal`` : renewal path, expiry ignored (InvalidTokenError)
"""
import logging
import uuid
from datetime import datetime, timedelta
from typing import Callable

from jose import JWTError, jwt

from todo_api.config import Settings
from todo_api.models.user import User
from todo_api.utils.exceptions import (
    ConfigurationError,
    InvalidTokenError,
    TokenExpiredException,
    UnauthorizedException,
)
from todo_api.utils.security import generate_refresh_token, utc_now

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

# Tokens minted by other issuers may carry the user id under the short
# name-identifier claim; ours use "sub". First present key wins.
SUBJECT_CLAIM_KEYS = ("nameid", "sub")


def subject_from_claims(claims: dict) -> int | None:
    """Return the user id from the first candidate subject claim, if it is an integer."""
    for key in SUBJECT_CLAIM_KEYS:
        if key in claims:
            try:
                return int(claims[key])
            except (TypeError, ValueError):
                return None
    return None


def _require_signing_key(settings: Settings) -> str:
    if not settings.JWT_SECRET_KEY:
        raise ConfigurationError("JWT_SECRET_KEY is not configured")
    return settings.JWT_SECRET_KEY


class TokenIssuer:

    def __init__(self, settings: Settings, clock: Clock = utc_now):
        self._key = _require_signing_key(settings)
        self._settings = settings
        self._clock = clock

    @property
    def refresh_token_lifetime(self) -> timedelta:
        return timedelta(days=self._settings.REFRESH_TOKEN_EXPIRE_DAYS)

    def issue_access_token(self, user: User) -> str:
        # JWT NumericDate is whole seconds.
        now = self._clock().replace(microsecond=0)
        expire = now + timedelta(minutes=self._settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        payload = {
            "sub":   str(user.id),
            "email": user.email,
            "name":  user.name,
            "jti":   uuid.uuid4().hex,
            "iat":   int(now.timestamp()),
            "exp":   int(expire.timestamp()),
            "iss":   self._settings.JWT_ISSUER,
            "aud":   self._settings.JWT_AUDIENCE,
        }
        return jwt.encode(payload, self._key, algorithm=self._settings.JWT_ALGORITHM)

    def issue_refresh_token(self) -> tuple[str, datetime]:
        """
        Create an opaque refresh token.
        Returns (token_string, expiry_datetime); persisting it is up to the caller.
        """
        return generate_refresh_token(), self._clock() + self.refresh_token_lifetime


class TokenValidator:

    def __init__(self, settings: Settings, clock: Clock = utc_now):
        self._key = _require_signing_key(settings)
        self._settings = settings
        self._clock = clock

    def _decode(self, token: str, verify_expiry: bool) -> dict:
        # jose's own expiry check reads the wall clock, so exp is checked here
        # against the injected clock instead. "require_exp" would switch
        # jose's check back on, hence the manual presence check below.
        try:
            claims = jwt.decode(
                token,
                self._key,
                algorithms=[self._settings.JWT_ALGORITHM],
                audience=self._settings.JWT_AUDIENCE,
                issuer=self._settings.JWT_ISSUER,
                options={
                    "verify_exp":  False,
                    "require_iss": True,
                    "require_aud": True,
                },
            )
        except JWTError as exc:
            raise InvalidTokenError(str(exc)) from exc

        exp = claims.get("exp")
        if not isinstance(exp, (int, float)) or isinstance(exp, bool):
            raise InvalidTokenError("Expiration claim must be a number")
        if verify_expiry and int(self._clock().timestamp()) > exp:
            raise TokenExpiredException()
        return claims

    def validate_live(self, token: str) -> dict:
        """
        Decode and validate an access token presented on a normal request.
        Raises 401 if invalid, 401 (TOKEN_EXPIRED) if expired.
        """
        try:
            return self._decode(token, verify_expiry=True)
        except InvalidTokenError as exc:
            logger.debug(f"Rejected access token: {exc}")
            raise UnauthorizedException("Invalid or malformed token")

    def validate_for_renewal(self, token: str) -> dict:
        """Same checks as validate_live, except that an expired token is accepted."""
        return self._decode(token, verify_expiry=False)
