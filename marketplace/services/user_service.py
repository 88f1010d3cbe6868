# marketplace/services/user_service.py
import uuid

from marketplace.core.errors import NotFoundError
from marketplace.database import DocumentStore
from marketplace.models.user import User
from marketplace.repositories.user_repo import UserRepository


class UserService:
    """
    Read-side user operations for admins.

    Writes to users happen through identity sync (webhooks, lazy creation)
    and the role service only.
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    def list_users(self, db: DocumentStore, skip: int, limit: int) -> list[User]:
        """List users with pagination (admin only)."""
        return self.repo.list(db, skip=skip, limit=limit)

    def get_user(self, db: DocumentStore, user_id: uuid.UUID) -> User:
        """
        Get a user by id (admin only).

        Raises:
            NotFoundError: if not found.
        """
        user = self.repo.get_by_id(db, user_id)
        if not user:
            raise NotFoundError(detail="User not found")
        return user
