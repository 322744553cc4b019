# storefront/core/auth.py
import logging
import uuid

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from storefront.core.config import Settings, get_settings
from storefront.core.errors import AuthenticationFailed, PermissionDenied
from storefront.core.security import decode_access_token
from storefront.database import get_session
from storefront.models.user import User
from storefront.repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)

# HTTP Bearer scheme:
# - auto_error=False => a missing Authorization header does not raise inside
#   FastAPI so we can answer with our own 401 body.
bearer_scheme = HTTPBearer(auto_error=False)

user_repo = UserRepository()


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> User:
    """
    Resolve the current user from a bearer access token.

    Flow:
      1. No Authorization header => 401.
      2. Decode JWT => extract 'sub' (user id).
      3. Load the user row; missing => 401.

    Returns:
        The authenticated User.

    Raises:
        AuthenticationFailed(401): at any failed step.
    """
    if credentials is None:
        logger.info("Rejected request without authorization header")
        raise AuthenticationFailed("No authorization header")

    payload = decode_access_token(settings, credentials.credentials)
    sub = payload.get("sub")

    try:
        user_id = uuid.UUID(str(sub))
    except ValueError:
        logger.info("Rejected token with malformed subject")
        raise AuthenticationFailed("Authentication failed")

    user = user_repo.get_by_id(session, user_id)
    if user is None:
        logger.info("Token subject %s has no user row", user_id)
        raise AuthenticationFailed("User not found")

    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    """
    Enforce admin role.

    Route is accessible only if:
      - user.role == "admin"

    Raises:
        PermissionDenied(403): if role is not admin.
    """
    if user.role != "admin":
        logger.info("Admin access denied for %s (role=%s)", user.email, user.role)
        raise PermissionDenied("Access denied. Admin privileges required.")
    return user
