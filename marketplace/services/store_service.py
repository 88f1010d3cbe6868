# marketplace/services/store_service.py
import logging
import uuid
from datetime import datetime, timezone

from marketplace.core.config import get_settings
from marketplace.core.errors import InvalidRequestError, NotFoundError
from marketplace.database import DocumentStore
from marketplace.models.store import Store
from marketplace.models.user import ADMIN, User
from marketplace.repositories.store_repo import StoreRepository
from marketplace.schemas.store import StoreCreate, StoreUpdate

logger = logging.getLogger(__name__)


class StoreService:
    """
    Business logic for Store.

    Responsibilities:
      - per-owner store cap
      - ownership checks (owners see and change only their own stores)
      - explicit product cascade on delete
      - admin moderation (approve / disable / enable)
    """

    def __init__(self, repo: StoreRepository):
        self.repo = repo

    # ----- Owner operations -----

    def list_my_stores(self, db: DocumentStore, user: User) -> list[Store]:
        return self.repo.list_for_user(db, user.id)

    def get_owned_store(self, db: DocumentStore, user: User, store_id: uuid.UUID) -> Store:
        """
        Raises:
            NotFoundError: store missing, or owned by someone else (admins
            may access any store).
        """
        store = self.repo.get_by_id(db, store_id)
        if not store or (store.user_id != user.id and user.role != ADMIN):
            raise NotFoundError(detail="Store not found")
        return store

    def create_store(self, db: DocumentStore, user: User, payload: StoreCreate) -> Store:
        """
        Open a new store for the caller.

        Only existing stores count toward the cap, so deleting one frees
        a slot.
        """
        max_stores = get_settings().MAX_STORES_PER_USER
        if self.repo.count_for_user(db, user.id) >= max_stores:
            raise InvalidRequestError(
                detail=f"Maximum of {max_stores} stores allowed per user"
            )

        store = self.repo.create(
            db,
            Store(user_id=user.id, **payload.model_dump()),
        )
        logger.info("Store %s created for user %s", store.id, user.id)
        return store

    def update_store(
        self,
        db: DocumentStore,
        user: User,
        store_id: uuid.UUID,
        payload: StoreUpdate,
    ) -> Store:
        store = self.get_owned_store(db, user, store_id)
        changes = payload.model_dump(exclude_unset=True)
        changes["updated_at"] = datetime.now(timezone.utc)
        updated = self.repo.update(db, store.id, **changes)
        if updated is None:
            raise NotFoundError(detail="Store not found")
        return updated

    def delete_store(self, db: DocumentStore, user: User, store_id: uuid.UUID) -> None:
        """
        Delete a store and its products.

        Products go first: if the store delete then fails, a retry finds
        the store again and finishes the job.
        """
        store = self.get_owned_store(db, user, store_id)
        product_ids = self.repo.delete_with_products(db, store.id)
        logger.info("Store %s deleted with %d product(s)", store.id, len(product_ids))

    # ----- Admin operations -----

    def list_all_stores(self, db: DocumentStore) -> list[Store]:
        return self.repo.list_all(db)

    def moderate(self, db: DocumentStore, store_id: uuid.UUID, action: str) -> Store:
        if action == "approve":
            changes = {"is_approved": True}
        elif action == "disable":
            changes = {"is_active": False}
        elif action == "enable":
            changes = {"is_active": True}
        else:
            raise InvalidRequestError(detail="Unknown action")

        changes["updated_at"] = datetime.now(timezone.utc)
        store = self.repo.update(db, store_id, **changes)
        if store is None:
            raise NotFoundError(detail="Store not found")
        logger.info("Store %s moderated: %s", store_id, action)
        return store
