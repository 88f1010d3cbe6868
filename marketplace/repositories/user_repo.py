# marketplace/repositories/user_repo.py
import uuid

from marketplace.database import USERS, DocumentStore
from marketplace.models.user import User


class UserRepository:
    """
    Data access layer for User.

    Responsibilities:
      - Pure document operations (CRUD + queries)
      - No FastAPI, no HTTP, no business logic
    """

    # ----- Basic CRUD -----

    def get_by_id(self, db: DocumentStore, user_id: uuid.UUID) -> User | None:
        """Return a User by primary key, or None if not found."""
        doc = db.get(USERS, user_id)
        return User.model_validate(doc) if doc else None

    def get_by_external_id(self, db: DocumentStore, external_id: str) -> User | None:
        """Return the User mirrored from an identity-provider id."""
        doc = db.find_one(USERS, {"external_id": external_id})
        return User.model_validate(doc) if doc else None

    def get_by_email(self, db: DocumentStore, email: str) -> User | None:
        doc = db.find_one(USERS, {"email": email})
        return User.model_validate(doc) if doc else None

    def list(self, db: DocumentStore, skip: int = 0, limit: int = 50) -> list[User]:
        """
        Paginated user listing, newest first.

        Args:
            skip: offset rows (for paging)
            limit: max number of rows returned
        """
        docs = db.find(USERS, order_by="created_at", descending=True, limit=skip + limit)
        return [User.model_validate(doc) for doc in docs[skip:]]

    def create(self, db: DocumentStore, user: User) -> User:
        """Insert a new User and return the persisted row."""
        return User.model_validate(db.insert(USERS, user.model_dump()))

    def update(self, db: DocumentStore, user: User, **changes) -> User | None:
        """Persist changes to an existing User; None if it vanished."""
        doc = db.update(USERS, user.id, changes)
        return User.model_validate(doc) if doc else None

    def delete(self, db: DocumentStore, user: User) -> None:
        db.delete(USERS, user.id)
