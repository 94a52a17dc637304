from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from todo_api.database import get_db
from todo_api.models.user import User
from todo_api.services.auth_service import AuthService
from todo_api.services.google_identity import GoogleIdentityVerifier
from todo_api.services.tokens import TokenValidator, subject_from_claims
from todo_api.utils.exceptions import UnauthorizedException

# Bearer token extractor
bearer_scheme = HTTPBearer(auto_error=False)


# ─── Application components ───────────────────────────────────────────────────
# Built once by create_app() and kept on app.state.
def get_token_validator(request: Request) -> TokenValidator:
    return request.app.state.token_validator


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_identity_verifier(request: Request) -> GoogleIdentityVerifier:
    return request.app.state.identity_verifier


# ─── Get Current User ─────────────────────────────────────────────────────────
def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    validator: TokenValidator = Depends(get_token_validator),
    db: Session = Depends(get_db),
) -> User:
    """
    Validate JWT Bearer token and return the current User.
    Raises 401 if token is missing, invalid, or expired, or if the user is gone.
    """
    if not credentials:
        raise UnauthorizedException("No authentication token provided")

    claims = validator.validate_live(credentials.credentials)
    user_id = subject_from_claims(claims)

    if user_id is None:
        raise UnauthorizedException("User identifier not found in token claims")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise UnauthorizedException("User no longer exists")

    return user
