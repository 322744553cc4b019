# storefront/schemas/auth.py
import uuid
from datetime import datetime

from pydantic import EmailStr, field_validator
from sqlmodel import SQLModel, Field

from storefront.schemas.user import Role, UserPublic

MIN_PASSWORD_LENGTH = 6


class RegisterRequest(SQLModel):
    """
    Payload for email/password registration.

    email and password are optional at the schema level so the service can
    answer a missing value with the field it is missing.
    """

    name: str | None = Field(default=None, max_length=100)
    email: EmailStr | None = None
    password: str | None = None

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class LoginRequest(SQLModel):
    email: str | None = None
    password: str | None = None


class GoogleAuthRequest(SQLModel):
    """Payload shared by /google-register and /google-login."""

    email: EmailStr | None = None
    google_id: str | None = None
    name: str | None = Field(default=None, max_length=100)
    picture: str | None = None


class AuthResponse(SQLModel):
    success: bool = True
    message: str
    token: str
    user: UserPublic


class LoginResponse(AuthResponse):
    role: Role


class MeResponse(SQLModel):
    success: bool = True
    user: UserPublic


class VerifiedUser(SQLModel):
    id: uuid.UUID
    email: str
    role: Role
    is_admin: bool
    is_active: bool


class VerifyAdminResponse(SQLModel):
    success: bool = True
    message: str
    user_data: VerifiedUser


class HealthResponse(SQLModel):
    success: bool = True
    message: str
    timestamp: datetime
    environment: str
