# marketplace/repositories/product_repo.py
import uuid

from marketplace.database import PRODUCTS, DocumentStore
from marketplace.models.product import Product


class ProductRepository:
    """
    Data access layer for Product.

    - Pure document operations (CRUD + queries).
    - No FastAPI, no business logic.
    """

    def get_by_id(self, db: DocumentStore, product_id: uuid.UUID) -> Product | None:
        doc = db.get(PRODUCTS, product_id)
        return Product.model_validate(doc) if doc else None

    def list_for_store(self, db: DocumentStore, store_id: uuid.UUID) -> list[Product]:
        docs = db.find(
            PRODUCTS, {"store_id": store_id}, order_by="created_at", descending=True
        )
        return [Product.model_validate(doc) for doc in docs]

    def create(self, db: DocumentStore, product: Product) -> Product:
        return Product.model_validate(db.insert(PRODUCTS, product.model_dump()))

    def update(self, db: DocumentStore, product_id: uuid.UUID, **changes) -> Product | None:
        doc = db.update(PRODUCTS, product_id, changes)
        return Product.model_validate(doc) if doc else None

    def delete(self, db: DocumentStore, product_id: uuid.UUID) -> None:
        db.delete(PRODUCTS, product_id)
