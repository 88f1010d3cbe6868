# marketplace/routers/stores.py
import uuid

from fastapi import APIRouter, Depends, status

from marketplace.core.auth import require_owner
from marketplace.database import DocumentStore, get_store
from marketplace.models.user import User
from marketplace.repositories.store_repo import StoreRepository
from marketplace.schemas.store import StoreCreate, StoreRead, StoreUpdate
from marketplace.services.store_service import StoreService

router = APIRouter(prefix="/stores", tags=["Stores"])

service = StoreService(StoreRepository())


@router.get("", response_model=list[StoreRead])
def list_my_stores(
    db: DocumentStore = Depends(get_store),
    current_user: User = Depends(require_owner),
):
    """
    List the caller's stores, newest first.
    """
    return service.list_my_stores(db, current_user)


@router.post("", response_model=StoreRead, status_code=status.HTTP_201_CREATED)
def create_store(
    payload: StoreCreate,
    db: DocumentStore = Depends(get_store),
    current_user: User = Depends(require_owner),
):
    """
    Open a new store (max 3 per user).
    """
    return service.create_store(db, current_user, payload)


@router.put("/{store_id}", response_model=StoreRead)
def update_store(
    store_id: uuid.UUID,
    payload: StoreUpdate,
    db: DocumentStore = Depends(get_store),
    current_user: User = Depends(require_owner),
):
    return service.update_store(db, current_user, store_id, payload)


@router.delete("/{store_id}")
def delete_store(
    store_id: uuid.UUID,
    db: DocumentStore = Depends(get_store),
    current_user: User = Depends(require_owner),
):
    """
    Delete a store together with all its products.
    """
    service.delete_store(db, current_user, store_id)
    return {"message": "Store deleted successfully"}
