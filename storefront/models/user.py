# storefront/models/user.py
import uuid
from datetime import datetime, timezone
from typing import Any

from sqlmodel import SQLModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(SQLModel, table=True):
    """
    Persistent user account.

    Role:
      - "user" | "admin"
      - anonymous visitors have no row and no token.

    `password` always holds a bcrypt hash, never the raw password. Accounts
    created through Google sign-in get a random hashed password so the column
    stays populated.
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(
        max_length=100,
        description="Display name; local part of the email by default",
    )

    # Stored lower-cased; uniqueness is enforced by the database
    email: str = Field(
        unique=True,
        index=True,
    )

    password: str = Field(description="bcrypt hash")

    role: str = Field(
        default="user",
        index=True,
        description="Application role: user | admin",
    )

    google_id: str | None = Field(
        default=None,
        index=True,
        description="External identity id from Google sign-in",
    )

    picture: str | None = Field(
        default=None,
        description="Avatar URL",
    )

    is_active: bool = Field(default=True, index=True)

    # Stamped on creation and by record_login()
    last_login: datetime | None = Field(default_factory=utcnow)

    created_at: datetime = Field(
        default_factory=utcnow,
        index=True,
        description="Creation timestamp (UTC)",
    )
    updated_at: datetime = Field(default_factory=utcnow)

    @staticmethod
    def normalize_email(email: str) -> str:
        return email.strip().lower()

    def record_login(self) -> None:
        self.last_login = utcnow()

    def link_google(self, google_id: str, picture: str | None) -> bool:
        """Attach a Google identity unless one is already linked."""
        if self.google_id:
            return False
        self.google_id = google_id
        self.picture = picture
        return True

    def get_public_profile(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "picture": self.picture,
            "created_at": self.created_at,
        }
