# storefront/schemas/user.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict
from sqlmodel import SQLModel

# App-level roles. Anonymous visitors have no token and no row.
Role = Literal["user", "admin"]


class UserPublic(SQLModel):
    """Public profile returned to clients (never includes the password)."""

    id: uuid.UUID
    name: str
    email: str
    role: Role
    picture: str | None = None
    created_at: datetime


class UserAdminRead(UserPublic):
    """Admin view of an account, adds state fields."""

    is_active: bool
    google_id: str | None = None
    last_login: datetime | None = None
    updated_at: datetime


class UserRoleUpdate(SQLModel):
    """
    Admin-only role update schema.
    """

    model_config = ConfigDict(extra="forbid")
    role: Role


class UserStatusUpdate(SQLModel):
    """
    Admin-only activation / deactivation schema.
    """

    model_config = ConfigDict(extra="forbid")
    is_active: bool
