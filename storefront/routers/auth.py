# storefront/routers/auth.py
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Response, status
from sqlmodel import Session

from storefront.core.auth import get_current_user
from storefront.core.config import get_settings
from storefront.database import get_session
from storefront.models.user import User
from storefront.repositories.user_repo import UserRepository
from storefront.schemas.auth import (
    AuthResponse,
    GoogleAuthRequest,
    HealthResponse,
    LoginRequest,
    LoginResponse,
    MeResponse,
    RegisterRequest,
    VerifyAdminResponse,
)
from storefront.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["Auth"])

settings = get_settings()
repo = UserRepository()
service = AuthService(repo, settings)


# -------- Credentials --------


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    session: Session = Depends(get_session),
):
    """
    Register with email + password.

    Returns a signed token and the public profile.
    """
    return service.register(session, payload)


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    session: Session = Depends(get_session),
):
    """
    Log in with email + password.
    """
    return service.login(session, payload)


@router.post("/google-register", response_model=AuthResponse)
def google_register(
    payload: GoogleAuthRequest,
    response: Response,
    session: Session = Depends(get_session),
):
    """
    Sign up with a Google identity.

    Existing accounts (same email) are linked and logged in (200);
    new accounts answer 201.
    """
    result, created = service.google_auth(session, payload, record_login=False)
    if created:
        response.status_code = status.HTTP_201_CREATED
    return result


@router.post("/google-login", response_model=AuthResponse)
def google_login(
    payload: GoogleAuthRequest,
    session: Session = Depends(get_session),
):
    """
    Log in with a Google identity, creating the account on first use.
    """
    result, _ = service.google_auth(session, payload, record_login=True)
    return result


# -------- Token based --------


@router.post("/refresh", response_model=AuthResponse)
def refresh(current_user: User = Depends(get_current_user)):
    """
    Issue a new token for the bearer of a valid one.
    """
    return service.refresh(current_user)


@router.get("/me", response_model=MeResponse)
def read_me(current_user: User = Depends(get_current_user)):
    """
    Return the authenticated user's profile.
    """
    return MeResponse(user=current_user.get_public_profile())


@router.get("/verify-admin", response_model=VerifyAdminResponse)
def verify_admin(current_user: User = Depends(get_current_user)):
    """
    Report the caller's role and account state (any authenticated user).
    """
    return service.verify_admin(current_user)


@router.get("/test", response_model=HealthResponse)
def test_connection():
    """Connectivity check for clients."""
    return HealthResponse(
        message="API is working correctly!",
        timestamp=datetime.now(timezone.utc),
        environment=settings.ENVIRONMENT,
    )
