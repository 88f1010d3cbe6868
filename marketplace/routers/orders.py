# marketplace/routers/orders.py
import uuid

from fastapi import APIRouter, Depends, status

from marketplace.core.auth import get_current_user
from marketplace.database import DocumentStore, get_store
from marketplace.models.user import User
from marketplace.repositories.order_repo import OrderRepository
from marketplace.repositories.store_repo import StoreRepository
from marketplace.schemas.order import (
    OrderCreate,
    OrderRead,
    OrderUpdate,
    OrderWithItemsRead,
)
from marketplace.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])

order_repo = OrderRepository()
store_repo = StoreRepository()
service = OrderService(order_repo, store_repo)


# -------- Purchaser endpoints --------


@router.post(
    "",
    response_model=OrderWithItemsRead,
    status_code=status.HTTP_201_CREATED,
)
def place_order(
    payload: OrderCreate,
    db: DocumentStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    """
    Place an order against an active store.

    The order is created in status 'new'; the total is computed from the
    submitted items.
    """
    return service.create_order(db, current_user, payload)


@router.get(
    "/me",
    response_model=list[OrderRead],
)
def list_my_orders(
    db: DocumentStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
    skip: int = 0,
    limit: int = 50,
):
    """
    List the authenticated user's orders (without items).
    """
    return service.list_user_orders(db, current_user, skip, limit)


# -------- Store endpoints --------


@router.get(
    "",
    response_model=list[OrderWithItemsRead],
)
def list_store_orders(
    store_id: uuid.UUID,
    status: str | None = None,
    limit: int | None = None,
    db: DocumentStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    """
    Orders of a store the caller owns.

    status: new | in_progress | completed | <exact status>
    """
    return service.list_store_orders(db, current_user, store_id, status, limit)


# -------- Shared endpoints --------


@router.get(
    "/{order_id}",
    response_model=OrderWithItemsRead,
)
def get_order(
    order_id: uuid.UUID,
    db: DocumentStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    """
    Get an order with items (purchaser, store owner or admin).
    """
    return service.get_order(db, current_user, order_id)


@router.patch(
    "/{order_id}",
    response_model=OrderWithItemsRead,
)
def update_order(
    order_id: uuid.UUID,
    payload: OrderUpdate,
    db: DocumentStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    """
    Update order status and/or delivery details.

      new          -> accepted, cancelled, declined

      accepted     -> preparing, cancelled, declined

      preparing    -> for_delivery, cancelled, declined

      for_delivery -> completed, cancelled, declined

      completed, cancelled, declined -> (no change)

    Purchasers may only cancel and edit notes.
    """
    return service.update_order(db, current_user, order_id, payload)


@router.delete("/{order_id}")
def delete_order(
    order_id: uuid.UUID,
    db: DocumentStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    """
    Delete an order and its items (store owner or admin).
    """
    service.delete_order(db, current_user, order_id)
    return {"message": "Order deleted successfully"}
