import logging
import secrets

from sqlalchemy.orm import Session

from todo_api.models.user import User
from todo_api.schemas.auth import NAME_MAX_LENGTH, LoginRequest, RegisterRequest
from todo_api.services.google_identity import GoogleIdentityVerifier
from todo_api.services.tokens import Clock, TokenIssuer, TokenValidator, subject_from_claims
from todo_api.utils.exceptions import (
    DuplicateEmailException,
    InvalidAssertionError,
    InvalidAssertionException,
    InvalidCredentialsException,
    InvalidRenewalException,
    InvalidTokenError,
)
from todo_api.utils.security import as_utc, hash_password, utc_now, verify_password

logger = logging.getLogger(__name__)


class AuthService:

    def __init__(self, issuer: TokenIssuer, validator: TokenValidator, clock: Clock = utc_now):
        self.issuer = issuer
        self.validator = validator
        self.clock = clock

    # ─── Token pair ───────────────────────────────────────────────────────────
    def _issue_pair(self, db: Session, user: User) -> dict:
        """Mint a new pair and overwrite the user's stored refresh token."""
        refresh_token, refresh_expires = self.issuer.issue_refresh_token()
        user.refreshToken = refresh_token
        user.refreshTokenExpiry = refresh_expires
        db.commit()
        return self._pair(user, self.issuer.issue_access_token(user), refresh_token)

    @staticmethod
    def _pair(user: User, access_token: str, refresh_token: str) -> dict:
        return {
            "token":        access_token,
            "refreshToken": refresh_token,
            "id":           user.id,
            "name":         user.name,
            "email":        user.email,
        }

    # ─── Register ─────────────────────────────────────────────────────────────
    def register(self, db: Session, data: RegisterRequest) -> dict:
        if db.query(User).filter(User.email == data.email).first():
            raise DuplicateEmailException()

        user = User(
            name=data.name,
            email=data.email,
            passwordHash=hash_password(data.password),
        )
        db.add(user)
        db.flush()  # Get user.id without committing

        logger.info(f"Registered user {user.id}")
        return self._issue_pair(db, user)

    # ─── Login ────────────────────────────────────────────────────────────────
    def login(self, db: Session, data: LoginRequest) -> dict:
        user = db.query(User).filter(User.email == data.email).first()

        if not user or not verify_password(data.password, user.passwordHash):
            logger.info("Rejected login: invalid credentials")
            raise InvalidCredentialsException()

        return self._issue_pair(db, user)

    # ─── Google Sign-In ───────────────────────────────────────────────────────
    def google_sign_in(self, db: Session, verifier: GoogleIdentityVerifier, id_token: str) -> dict:
        try:
            identity = verifier.verify(id_token)
        except InvalidAssertionError as exc:
            logger.info(f"Rejected Google sign-in: {exc}")
            raise InvalidAssertionException()

        user = db.query(User).filter(User.email == identity.email).first()
        if not user:
            user = User(name=identity.name[:NAME_MAX_LENGTH], email=identity.email, passwordHash="")
            db.add(user)
            db.flush()
            logger.info(f"Provisioned Google account for user {user.id}")

        return self._issue_pair(db, user)

    # ─── Refresh Token ────────────────────────────────────────────────────────
    def renew(self, db: Session, token: str | None, refresh_token: str | None) -> dict:
        """
        Exchange a (possibly expired) access token plus the stored refresh
        token for a new pair. Every failed check ends in the same 400.
        """
        if not token or not refresh_token:
            logger.info("Rejected renewal: missing token")
            raise InvalidRenewalException()

        try:
            claims = self.validator.validate_for_renewal(token)
        except InvalidTokenError as exc:
            logger.info(f"Rejected renewal: {exc}")
            raise InvalidRenewalException()

        user_id = subject_from_claims(claims)
        if user_id is None:
            logger.info("Rejected renewal: no subject claim")
            raise InvalidRenewalException()

        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            logger.info("Rejected renewal: unknown subject")
            raise InvalidRenewalException()

        if not secrets.compare_digest((user.refreshToken or "").encode(), refresh_token.encode()):
            logger.info(f"Rejected renewal for user {user.id}: refresh token mismatch")
            raise InvalidRenewalException()

        if user.refreshTokenExpiry is None or as_utc(user.refreshTokenExpiry) <= self.clock():
            logger.info(f"Rejected renewal for user {user.id}: refresh token expired")
            raise InvalidRenewalException()

        new_refresh, new_expiry = self.issuer.issue_refresh_token()
        # Compare-and-swap: a concurrent renewal that rotated first wins.
        rotated = db.query(User).filter(
            User.id == user.id,
            User.refreshToken == refresh_token,
        ).update(
            {"refreshToken": new_refresh, "refreshTokenExpiry": new_expiry},
            synchronize_session=False,
        )
        if rotated != 1:
            db.rollback()
            logger.info(f"Rejected renewal for user {user.id}: refresh token already rotated")
            raise InvalidRenewalException()
        db.commit()

        return self._pair(user, self.issuer.issue_access_token(user), new_refresh)

    # ─── Logout ───────────────────────────────────────────────────────────────
    def logout(self, db: Session, user: User) -> None:
        user.refreshToken = None
        user.refreshTokenExpiry = None
        db.commit()
