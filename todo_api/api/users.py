from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from todo_api.database import get_db
from todo_api.dependencies import get_auth_service, get_current_user, get_identity_verifier
from todo_api.models.user import User
from todo_api.schemas.auth import (
    GoogleSignInRequest, LoginRequest, RefreshTokenRequest, RegisterRequest,
    TokenPair, UserSummary,
)
from todo_api.schemas.common import error_responses
from todo_api.services.auth_service import AuthService
from todo_api.services.google_identity import GoogleIdentityVerifier

router = APIRouter(prefix="/users")


# ─── POST /users/register ─────────────────────────────────────────────────────
@router.post(
    "/register",
    status_code=status.HTTP_200_OK,
    summary="Register a new account and receive a token pair",
    response_model=TokenPair,
    responses=error_responses(400, 422),
)
def register(
    data: RegisterRequest,
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
):
    """
    Register a new user.
    - Email must be unique.
    - Password minimum 6 characters.
    """
    return auth.register(db, data)


# ─── POST /users/login ────────────────────────────────────────────────────────
@router.post(
    "/login",
    status_code=status.HTTP_200_OK,
    summary="Login and receive access + refresh tokens",
    response_model=TokenPair,
    responses=error_responses(401, 422),
)
def login(
    data: LoginRequest,
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
):
    """
    Authenticate user.
    Returns token (15 min) and refreshToken (7 days).
    """
    return auth.login(db, data)


# ─── POST /users/google-signin ────────────────────────────────────────────────
@router.post(
    "/google-signin",
    status_code=status.HTTP_200_OK,
    summary="Sign in with a Google ID token",
    response_model=TokenPair,
    responses=error_responses(401, 422),
)
def google_sign_in(
    data: GoogleSignInRequest,
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
    verifier: GoogleIdentityVerifier = Depends(get_identity_verifier),
):
    """
    Verify the Google credential and sign in.
    An account is created on first sign-in for a new email.
    """
    return auth.google_sign_in(db, verifier, data.idToken)


# ─── POST /users/refresh-token ────────────────────────────────────────────────
@router.post(
    "/refresh-token",
    status_code=status.HTTP_200_OK,
    summary="Exchange an expired access token and refresh token for a new pair",
    response_model=TokenPair,
    responses=error_responses(400),
)
def refresh_token(
    data: RefreshTokenRequest,
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
):
    return auth.renew(db, data.token, data.refreshToken)


# ─── POST /users/logout ───────────────────────────────────────────────────────
@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Invalidate the stored refresh token",
    response_class=Response,
    responses=error_responses(401),
)
def logout(
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
    current_user: User = Depends(get_current_user),
):
    auth.logout(db, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ─── GET /users/me ────────────────────────────────────────────────────────────
@router.get(
    "/me",
    status_code=status.HTTP_200_OK,
    summary="Get current authenticated user profile",
    response_model=UserSummary,
    responses=error_responses(401),
)
def get_me(current_user: User = Depends(get_current_user)):
    return current_user
