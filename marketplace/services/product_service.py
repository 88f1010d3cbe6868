# marketplace/services/product_service.py
import uuid
from datetime import datetime, timezone

from marketplace.core.errors import NotFoundError
from marketplace.database import DocumentStore
from marketplace.models.product import Product
from marketplace.models.user import ADMIN, User
from marketplace.repositories.product_repo import ProductRepository
from marketplace.schemas.product import ProductCreate, ProductUpdate
from marketplace.services.store_service import StoreService


class ProductService:
    """
    Business logic for Product.

    Responsibilities:
      - validation beyond pydantic (store ownership)
      - catalog visibility: anyone may browse an active store, owners and
        admins always see their catalog
    """

    def __init__(self, repo: ProductRepository, stores: StoreService):
        self.repo = repo
        self.stores = stores

    def list_products(
        self,
        db: DocumentStore,
        user: User,
        store_id: uuid.UUID,
    ) -> list[Product]:
        store = self.stores.repo.get_by_id(db, store_id)
        is_manager = store is not None and (store.user_id == user.id or user.role == ADMIN)
        if not store or not (store.is_active or is_manager):
            raise NotFoundError(detail="Store not found")
        return self.repo.list_for_store(db, store.id)

    def get_product(self, db: DocumentStore, user: User, product_id: uuid.UUID) -> Product:
        """
        Load a product the caller manages (through its store).
        """
        product = self.repo.get_by_id(db, product_id)
        if not product:
            raise NotFoundError(detail="Product not found")
        # Raises NotFoundError when the store is gone or not the caller's
        self.stores.get_owned_store(db, user, product.store_id)
        return product

    def create_product(self, db: DocumentStore, user: User, payload: ProductCreate) -> Product:
        store = self.stores.get_owned_store(db, user, payload.store_id)
        product = Product(
            store_id=store.id,
            name=payload.name,
            description=payload.description,
            price=payload.price,
            stock=payload.stock,
            category=payload.category,
            images=payload.images,
        )
        return self.repo.create(db, product)

    def update_product(
        self,
        db: DocumentStore,
        user: User,
        product_id: uuid.UUID,
        payload: ProductUpdate,
    ) -> Product:
        """
        Partial update of a product.
        """
        product = self.get_product(db, user, product_id)
        changes = payload.model_dump(exclude_unset=True)
        changes["updated_at"] = datetime.now(timezone.utc)
        updated = self.repo.update(db, product.id, **changes)
        if updated is None:
            raise NotFoundError(detail="Product not found")
        return updated

    def delete_product(self, db: DocumentStore, user: User, product_id: uuid.UUID) -> None:
        product = self.get_product(db, user, product_id)
        self.repo.delete(db, product.id)
