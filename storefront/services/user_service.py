# storefront/services/user_service.py
import logging
import uuid

from sqlmodel import Session

from storefront.core.errors import NotFound, ValidationFailed
from storefront.models.user import User
from storefront.repositories.user_repo import UserRepository
from storefront.schemas.user import UserRoleUpdate, UserStatusUpdate

logger = logging.getLogger(__name__)


class UserService:
    """
    Account administration.

    Responsibilities:
      - orchestrate repository operations
      - keep an admin from locking themselves out
      - map domain errors to HTTP errors
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    def list_users(self, session: Session, skip: int, limit: int) -> list[User]:
        """List users with pagination (admin only)."""
        return self.repo.list(session, skip=skip, limit=limit)

    def get_user(self, session: Session, user_id: uuid.UUID) -> User:
        """
        Get a user by id (admin only).

        Raises:
            NotFound(404): if not found.
        """
        user = self.repo.get_by_id(session, user_id)
        if not user:
            raise NotFound("User not found", field="user_id")
        return user

    def update_role(
        self,
        session: Session,
        actor: User,
        user_id: uuid.UUID,
        payload: UserRoleUpdate,
    ) -> User:
        """
        Change user's role (admin only).

        Role validation is enforced by the schema (Literal).
        """
        user = self.get_user(session, user_id)
        if user.id == actor.id and payload.role != "admin":
            raise ValidationFailed("Admins cannot remove their own admin role", field="role")
        user.role = payload.role
        logger.info("%s set role of %s to %s", actor.email, user.email, payload.role)
        return self.repo.save(session, user)

    def update_status(
        self,
        session: Session,
        actor: User,
        user_id: uuid.UUID,
        payload: UserStatusUpdate,
    ) -> User:
        """Activate or deactivate an account (admin only)."""
        user = self.get_user(session, user_id)
        if user.id == actor.id and not payload.is_active:
            raise ValidationFailed("Admins cannot deactivate themselves", field="is_active")
        user.is_active = payload.is_active
        logger.info("%s set is_active of %s to %s", actor.email, user.email, payload.is_active)
        return self.repo.save(session, user)
