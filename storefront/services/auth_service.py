# storefront/services/auth_service.py
import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from storefront.core.config import Settings
from storefront.core.errors import Conflict, PermissionDenied, ValidationFailed
from storefront.core.security import create_access_token, hash_password, verify_password
from storefront.models.user import User
from storefront.repositories.user_repo import UserRepository
from storefront.schemas.auth import (
    MIN_PASSWORD_LENGTH,
    AuthResponse,
    GoogleAuthRequest,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    VerifiedUser,
    VerifyAdminResponse,
)

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


def _default_name_from_email(email: str) -> str:
    """
    Derive a default display name from email when none was given.
    """
    if "@" in email:
        return email.split("@", 1)[0]
    return email


class AuthService:
    """
    Registration, login and token issuing.

    Responsibilities:
      - validate credentials payloads (field-specific errors)
      - hash / verify passwords (bcrypt, cost from settings)
      - find-or-create accounts for Google sign-in
      - issue access tokens
    """

    def __init__(self, repo: UserRepository, settings: Settings):
        self.repo = repo
        self.settings = settings

    # ----- Helpers -----

    def issue_token(self, user: User) -> str:
        return create_access_token(self.settings, user.id, user.email)

    def _hash(self, raw: str) -> str:
        return hash_password(raw, rounds=self.settings.BCRYPT_ROUNDS)

    def _create_user(self, session: Session, user: User) -> User:
        try:
            return self.repo.create(session, user)
        except IntegrityError:
            session.rollback()
            raise Conflict("User already exists with this email", field="email")

    # ----- Email / password -----

    def register(self, session: Session, payload: RegisterRequest) -> AuthResponse:
        """
        Create an account from email + password.

        Rules:
          - email and password required
          - password at least MIN_PASSWORD_LENGTH characters
          - email unique (case-insensitive)
          - name defaults to the local part of the email
        """
        if not payload.email or not payload.password:
            raise ValidationFailed(
                "Email and password are required",
                field="email" if not payload.email else "password",
            )

        if len(payload.password) < MIN_PASSWORD_LENGTH:
            raise ValidationFailed(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
                field="password",
            )

        email = User.normalize_email(payload.email)
        if self.repo.get_by_email(session, email) is not None:
            logger.info("Registration rejected, email already used: %s", email)
            raise Conflict("User already exists with this email", field="email")

        user = self._create_user(
            session,
            User(
                name=payload.name or _default_name_from_email(email),
                email=email,
                password=self._hash(payload.password),
                role="user",
            ),
        )
        logger.info("User registered: %s", user.email)

        return AuthResponse(
            message="User created successfully",
            token=self.issue_token(user),
            user=user.get_public_profile(),
        )

    def login(self, session: Session, payload: LoginRequest) -> LoginResponse:
        """
        Verify email + password and record the login.

        Unknown email and wrong password share one message; `field` tells
        them apart. Deactivated accounts get 403.
        """
        if not payload.email or not payload.password:
            raise ValidationFailed(
                "Email and password are required",
                field="email" if not payload.email else "password",
            )

        user = self.repo.get_by_email(session, payload.email)
        if user is None:
            logger.info("Login failed, unknown email: %s", payload.email)
            raise ValidationFailed(INVALID_CREDENTIALS, field="email")

        if not user.is_active:
            logger.info("Login refused, account deactivated: %s", user.email)
            raise PermissionDenied(
                "Account is deactivated. Please contact support.",
                field="account",
            )

        if not verify_password(payload.password, user.password):
            logger.info("Login failed, wrong password for %s", user.email)
            raise ValidationFailed(INVALID_CREDENTIALS, field="password")

        user.record_login()
        user = self.repo.save(session, user)
        logger.info("Login successful for %s (role=%s)", user.email, user.role)

        return LoginResponse(
            message="Login successful",
            role=user.role,
            token=self.issue_token(user),
            user=user.get_public_profile(),
        )

    # ----- Google sign-in -----

    def google_auth(
        self,
        session: Session,
        payload: GoogleAuthRequest,
        record_login: bool,
    ) -> tuple[AuthResponse, bool]:
        """
        Find-or-create an account for a Google identity.

        - Existing email: link google_id/picture if not linked yet.
        - Unknown email: create a user with a random hashed password.
        - record_login: stamp last_login on an existing account (login
          variant); new accounts are stamped on creation anyway.

        Returns:
            (response, created)
        """
        if not payload.email or not payload.google_id:
            raise ValidationFailed(
                "Email and Google ID are required",
                field="email" if not payload.email else "google_id",
            )

        email = User.normalize_email(payload.email)
        user = self.repo.get_by_email(session, email)
        created = user is None

        if user is None:
            seed = f"{payload.google_id}{datetime.now(timezone.utc).timestamp()}"
            user = self._create_user(
                session,
                User(
                    name=(payload.name or "").strip() or _default_name_from_email(email),
                    email=email,
                    password=self._hash(seed),
                    google_id=payload.google_id,
                    picture=payload.picture,
                    role="user",
                ),
            )
            logger.info("Google account created: %s", user.email)
        else:
            linked = user.link_google(payload.google_id, payload.picture)
            if record_login:
                user.record_login()
            if linked or record_login:
                user = self.repo.save(session, user)

        if not user.is_active:
            raise PermissionDenied("Account is deactivated", field="account")

        if created:
            message = "Google signup successful"
        elif record_login:
            message = "Google login successful"
        else:
            message = "Login successful"

        response = AuthResponse(
            message=message,
            token=self.issue_token(user),
            user=user.get_public_profile(),
        )
        return response, created

    # ----- Token based -----

    def refresh(self, user: User) -> AuthResponse:
        """Issue a fresh token; earlier tokens stay valid until they expire."""
        return AuthResponse(
            message="Token refreshed successfully",
            token=self.issue_token(user),
            user=user.get_public_profile(),
        )

    def verify_admin(self, user: User) -> VerifyAdminResponse:
        return VerifyAdminResponse(
            message="User verified",
            user_data=VerifiedUser(
                id=user.id,
                email=user.email,
                role=user.role,
                is_admin=user.role == "admin",
                is_active=user.is_active,
            ),
        )
