# marketplace/repositories/store_repo.py
import uuid

from marketplace.database import PRODUCTS, STORES, DocumentStore
from marketplace.models.store import Store


class StoreRepository:
    """
    Data access layer for Store.

    The document store has no cascades: removing a store's products is the
    caller's job (see StoreService.delete_store).
    """

    def get_by_id(self, db: DocumentStore, store_id: uuid.UUID) -> Store | None:
        doc = db.get(STORES, store_id)
        return Store.model_validate(doc) if doc else None

    def list_for_user(self, db: DocumentStore, user_id: uuid.UUID) -> list[Store]:
        docs = db.find(
            STORES, {"user_id": user_id}, order_by="created_at", descending=True
        )
        return [Store.model_validate(doc) for doc in docs]

    def list_all(self, db: DocumentStore) -> list[Store]:
        docs = db.find(STORES, order_by="created_at", descending=True)
        return [Store.model_validate(doc) for doc in docs]

    def count_for_user(self, db: DocumentStore, user_id: uuid.UUID) -> int:
        return db.count(STORES, {"user_id": user_id})

    def create(self, db: DocumentStore, store: Store) -> Store:
        return Store.model_validate(db.insert(STORES, store.model_dump()))

    def update(self, db: DocumentStore, store_id: uuid.UUID, **changes) -> Store | None:
        doc = db.update(STORES, store_id, changes)
        return Store.model_validate(doc) if doc else None

    def delete_with_products(self, db: DocumentStore, store_id: uuid.UUID) -> list[str]:
        """
        Delete the store's products, then the store itself.

        Returns:
            Ids of the products removed.
        """
        product_ids = db.delete_where_in(PRODUCTS, "store_id", [store_id])
        db.delete(STORES, store_id)
        return product_ids
