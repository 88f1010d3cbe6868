# marketplace/routers/products.py
import uuid

from fastapi import APIRouter, Depends, status

from marketplace.core.auth import get_current_user, require_owner
from marketplace.database import DocumentStore, get_store
from marketplace.models.user import User
from marketplace.repositories.product_repo import ProductRepository
from marketplace.repositories.store_repo import StoreRepository
from marketplace.schemas.product import ProductCreate, ProductRead, ProductUpdate
from marketplace.services.product_service import ProductService
from marketplace.services.store_service import StoreService

router = APIRouter(prefix="/products", tags=["Products"])

service = ProductService(ProductRepository(), StoreService(StoreRepository()))


@router.get("", response_model=list[ProductRead])
def list_products(
    store_id: uuid.UUID,
    db: DocumentStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    """
    Products of one store, newest first.

    Inactive stores are only visible to their owner and admins.
    """
    return service.list_products(db, current_user, store_id)


@router.post("", response_model=ProductRead, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: ProductCreate,
    db: DocumentStore = Depends(get_store),
    current_user: User = Depends(require_owner),
):
    """
    Create a product in one of the caller's stores.
    """
    return service.create_product(db, current_user, payload)


@router.patch("/{product_id}", response_model=ProductRead)
def update_product(
    product_id: uuid.UUID,
    payload: ProductUpdate,
    db: DocumentStore = Depends(get_store),
    current_user: User = Depends(require_owner),
):
    return service.update_product(db, current_user, product_id, payload)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: uuid.UUID,
    db: DocumentStore = Depends(get_store),
    current_user: User = Depends(require_owner),
):
    service.delete_product(db, current_user, product_id)
    return None
