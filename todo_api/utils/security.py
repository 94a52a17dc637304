import base64
import secrets
from datetime import datetime, timezone

from passlib.context import CryptContext

# ─── Password Hashing ─────────────────────────────────────────────────────────
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password using bcrypt."""
    return pwd_context.hash(plain_password)


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """
    Verify a plain-text password against a bcrypt hash.
    Accounts provisioned through Google carry an empty hash and never match.
    """
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


# ─── Refresh Tokens ───────────────────────────────────────────────────────────
REFRESH_TOKEN_BYTES = 64


def generate_refresh_token() -> str:
    """Opaque refresh token: 64 random bytes, base64-encoded."""
    return base64.b64encode(secrets.token_bytes(REFRESH_TOKEN_BYTES)).decode("ascii")


# ─── Time ─────────────────────────────────────────────────────────────────────
def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive timestamps; treat them as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
