# marketplace/services/order_service.py
import logging
import secrets
import uuid
from datetime import datetime, timezone

from marketplace.core.errors import (
    AuthorizationError,
    InfrastructureError,
    InvalidRequestError,
    InvalidTransitionError,
    NotFoundError,
)
from marketplace.database import DocumentStore
from marketplace.models.order import Order, OrderItem
from marketplace.models.user import ADMIN, User
from marketplace.repositories.order_repo import OrderRepository
from marketplace.repositories.store_repo import StoreRepository
from marketplace.schemas.order import (
    OrderCreate,
    OrderItemRead,
    OrderUpdate,
    OrderWithItemsRead,
)

logger = logging.getLogger(__name__)

# Forward-only lifecycle. cancelled/declined are reachable from every
# non-terminal status; statuses with no successors are terminal.
STATUS_TRANSITIONS: dict[str, frozenset[str]] = {
    "new": frozenset({"accepted", "cancelled", "declined"}),
    "accepted": frozenset({"preparing", "cancelled", "declined"}),
    "preparing": frozenset({"for_delivery", "cancelled", "declined"}),
    "for_delivery": frozenset({"completed", "cancelled", "declined"}),
    "completed": frozenset(),
    "cancelled": frozenset(),
    "declined": frozenset(),
}

TERMINAL_STATUSES = frozenset(s for s, nxt in STATUS_TRANSITIONS.items() if not nxt)

# Dashboard filters
STATUS_FILTERS: dict[str, frozenset[str]] = {
    "new": frozenset({"new"}),
    "in_progress": frozenset({"accepted", "preparing", "for_delivery"}),
    "completed": frozenset({"completed"}),
}

# What a purchaser may do to their own order
PURCHASER_STATUSES = frozenset({"cancelled"})

# Caller capabilities on an order
PURCHASER = "purchaser"
STORE_OWNER = "store_owner"
ADMINISTRATOR = "admin"


def validate_transition(current: str, new: str) -> None:
    """
    Raise InvalidTransitionError unless `current -> new` is a lifecycle edge.

    Terminal statuses have no edges, so any request on them (including
    re-completing a completed order) is rejected.
    """
    if current in TERMINAL_STATUSES:
        raise InvalidTransitionError(detail=f"Order is already {current}")
    if new not in STATUS_TRANSITIONS.get(current, frozenset()):
        raise InvalidTransitionError(
            detail=f"Invalid status transition: {current} -> {new}"
        )


def generate_order_number(now: datetime | None = None) -> str:
    """ORD-<yyyymmdd>-<6 hex chars>"""
    now = now or datetime.now(timezone.utc)
    return f"ORD-{now:%Y%m%d}-{secrets.token_hex(3).upper()}"


class OrderService:
    """
    Business logic for orders.

    Responsibilities:
      - Place an order against an active store (order row, then items)
      - Resolve who may see / change an order (purchaser, store owner, admin)
      - Enforce the status lifecycle and its timestamps
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        store_repo: StoreRepository,
    ):
        self.order_repo = order_repo
        self.store_repo = store_repo

    # -------- Purchaser operations --------

    def create_order(
        self,
        db: DocumentStore,
        user: User,
        payload: OrderCreate,
    ) -> OrderWithItemsRead:
        """
        Place an order.

        Steps:
          1. Store must exist and be active.
          2. Compute total_amount from the submitted items.
          3. Create the Order row (status='new').
          4. Create OrderItem rows one by one.

        Orders and items are separate collections with no shared
        transaction. If an item write fails the order stays in 'new' with
        the items written so far, and the error says how far it got.
        """
        store = self.store_repo.get_by_id(db, payload.store_id)
        if not store:
            raise NotFoundError(detail="Store not found")
        if not store.is_active:
            raise InvalidRequestError(detail="Store is not accepting orders")

        total_amount = round(sum(i.price * i.quantity for i in payload.items), 2)

        order = Order(
            user_id=user.id,
            store_id=store.id,
            order_number=generate_order_number(),
            customer_name=payload.customer_name,
            customer_email=payload.customer_email,
            customer_phone=payload.customer_phone,
            customer_address=payload.customer_address,
            payment_method=payload.payment_method,
            payment_status=payload.payment_status,
            notes=payload.notes,
            estimated_delivery_time=payload.estimated_delivery_time,
            status="new",
            total_amount=total_amount,
        )
        order = self.order_repo.create_order(db, order)

        items: list[OrderItem] = []
        for line in payload.items:
            try:
                items.append(
                    self.order_repo.create_item(
                        db,
                        OrderItem(
                            order_id=order.id,
                            product_id=line.product_id,
                            product_name=line.product_name,
                            quantity=line.quantity,
                            price=line.price,
                            image_url=line.image_url,
                        ),
                    )
                )
            except InfrastructureError as exc:
                logger.error(
                    "Order %s created but item %d/%d failed",
                    order.id,
                    len(items) + 1,
                    len(payload.items),
                )
                raise InfrastructureError(
                    detail={
                        "message": "Order created but not all items were saved",
                        "order_id": str(order.id),
                        "items_saved": len(items),
                        "items_expected": len(payload.items),
                    }
                ) from exc

        logger.info("Order %s (%s) placed at store %s", order.order_number, order.id, store.id)
        return self._build_order_with_items_dto(order, items)

    def list_user_orders(
        self,
        db: DocumentStore,
        user: User,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Order]:
        """
        List orders placed by the given user (without items).
        """
        return self.order_repo.list_for_user(db, user.id, skip, limit)

    # -------- Store owner operations --------

    def list_store_orders(
        self,
        db: DocumentStore,
        user: User,
        store_id: uuid.UUID,
        status_filter: str | None = None,
        limit: int | None = None,
    ) -> list[OrderWithItemsRead]:
        """
        Orders of a store the caller owns (or any store, for admins).

        status_filter: 'new', 'in_progress', 'completed' or any exact status.
        """
        store = self.store_repo.get_by_id(db, store_id)
        if not store or (store.user_id != user.id and user.role != ADMIN):
            raise NotFoundError(detail="Store not found or access denied")

        statuses: frozenset[str] | None = None
        if status_filter:
            if status_filter in STATUS_FILTERS:
                statuses = STATUS_FILTERS[status_filter]
            elif status_filter in STATUS_TRANSITIONS:
                statuses = frozenset({status_filter})
            else:
                raise InvalidRequestError(detail=f"Unknown status filter: {status_filter}")

        orders = self.order_repo.list_for_store(db, store.id, statuses, limit)
        return [
            self._build_order_with_items_dto(
                o, self.order_repo.list_items_for_order(db, o.id)
            )
            for o in orders
        ]

    # -------- Shared operations --------

    def get_order(
        self,
        db: DocumentStore,
        user: User,
        order_id: uuid.UUID,
    ) -> OrderWithItemsRead:
        """
        Get a single order including items.

        - 404 if the order does not exist or the caller has no relation to it.
        """
        order, _ = self._load_for(db, user, order_id)
        items = self.order_repo.list_items_for_order(db, order.id)
        return self._build_order_with_items_dto(order, items)

    def update_order(
        self,
        db: DocumentStore,
        user: User,
        order_id: uuid.UUID,
        payload: OrderUpdate,
    ) -> OrderWithItemsRead:
        """
        Apply a status transition and/or delivery details.

        Rules:
          - terminal orders (completed, cancelled, declined) are frozen
          - status must follow STATUS_TRANSITIONS, no skipping ahead
          - purchasers may only cancel and edit notes
          - completed_at is set on the transition to 'completed'
          - updated_at is refreshed on every accepted change

        Any rejection leaves the order untouched.
        """
        if (
            payload.status is None
            and payload.estimated_delivery_time is None
            and payload.notes is None
        ):
            raise InvalidRequestError(detail="No changes supplied")

        order, capabilities = self._load_for(db, user, order_id)
        can_manage = bool(capabilities & {STORE_OWNER, ADMINISTRATOR})

        if order.status in TERMINAL_STATUSES:
            raise InvalidTransitionError(detail=f"Order is already {order.status}")

        now = datetime.now(timezone.utc)
        changes: dict = {"updated_at": now}

        if payload.status is not None:
            if not can_manage and payload.status not in PURCHASER_STATUSES:
                raise AuthorizationError(
                    detail="Only the store can move an order to " + payload.status
                )
            validate_transition(order.status, payload.status)
            changes["status"] = payload.status
            if payload.status == "completed":
                changes["completed_at"] = now

        if payload.estimated_delivery_time is not None:
            if not can_manage:
                raise AuthorizationError(detail="Only the store can set delivery time")
            changes["estimated_delivery_time"] = payload.estimated_delivery_time

        if payload.notes is not None:
            changes["notes"] = payload.notes

        updated = self.order_repo.update_order(db, order.id, **changes)
        if updated is None:
            raise NotFoundError(detail="Order not found")

        if "status" in changes:
            logger.info(
                "Order %s: %s -> %s by %s",
                order.id,
                order.status,
                updated.status,
                user.id,
            )

        items = self.order_repo.list_items_for_order(db, updated.id)
        return self._build_order_with_items_dto(updated, items)

    def delete_order(
        self,
        db: DocumentStore,
        user: User,
        order_id: uuid.UUID,
    ) -> None:
        """
        Delete an order (store owner or admin). Items go first so no item
        is ever left pointing at a missing order.
        """
        order, capabilities = self._load_for(db, user, order_id)
        if not capabilities & {STORE_OWNER, ADMINISTRATOR}:
            raise AuthorizationError(detail="Only the store can delete an order")

        item_ids = self.order_repo.delete_order(db, order.id)
        logger.info("Order %s deleted with %d item(s)", order.id, len(item_ids))

    # -------- Helpers --------

    def _load_for(
        self,
        db: DocumentStore,
        user: User,
        order_id: uuid.UUID,
    ) -> tuple[Order, set[str]]:
        """
        Load an order and the caller's capabilities on it.

        Callers with no relation to the order get the same 404 as for a
        missing order, so other users' order ids are not revealed.
        """
        order = self.order_repo.get_by_id(db, order_id)
        if not order:
            raise NotFoundError(detail="Order not found")

        capabilities: set[str] = set()
        if order.user_id == user.id:
            capabilities.add(PURCHASER)
        if user.role == ADMIN:
            capabilities.add(ADMINISTRATOR)
        store = self.store_repo.get_by_id(db, order.store_id)
        if store and store.user_id == user.id:
            capabilities.add(STORE_OWNER)

        if not capabilities:
            raise NotFoundError(detail="Order not found")
        return order, capabilities

    def _build_order_with_items_dto(
        self,
        order: Order,
        items: list[OrderItem],
    ) -> OrderWithItemsRead:
        item_dtos = [
            OrderItemRead(
                id=it.id,
                order_id=it.order_id,
                product_id=it.product_id,
                product_name=it.product_name,
                quantity=it.quantity,
                price=it.price,
                image_url=it.image_url,
                line_total=round(it.quantity * it.price, 2),
            )
            for it in items
        ]
        return OrderWithItemsRead(**order.model_dump(), items=item_dtos)
