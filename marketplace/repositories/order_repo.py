# marketplace/repositories/order_repo.py
import uuid

from marketplace.database import ORDER_ITEMS, ORDERS, DocumentStore
from marketplace.models.order import Order, OrderItem


class OrderRepository:
    """
    Data access layer for orders and order_items.

    NOTE:
      - Orders and their items live in separate collections and there is
        no transaction spanning both. Callers write the order first and the
        items second, and delete in the opposite order.
    """

    # ---- Orders ----

    def list_for_user(
        self,
        db: DocumentStore,
        user_id: uuid.UUID,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Order]:
        docs = db.find(
            ORDERS,
            {"user_id": user_id},
            order_by="created_at",
            descending=True,
            limit=skip + limit,
        )
        return [Order.model_validate(doc) for doc in docs[skip:]]

    def list_for_store(
        self,
        db: DocumentStore,
        store_id: uuid.UUID,
        statuses: set[str] | None = None,
        limit: int | None = None,
    ) -> list[Order]:
        """
        Orders of one store, newest first, optionally restricted to statuses.

        Status filtering happens here since the store only offers equality
        filters and "in_progress" spans several statuses.
        """
        docs = db.find(ORDERS, {"store_id": store_id}, order_by="created_at", descending=True)
        if statuses:
            docs = [doc for doc in docs if doc["status"] in statuses]
        if limit is not None:
            docs = docs[:limit]
        return [Order.model_validate(doc) for doc in docs]

    def get_by_id(self, db: DocumentStore, order_id: uuid.UUID) -> Order | None:
        doc = db.get(ORDERS, order_id)
        return Order.model_validate(doc) if doc else None

    def create_order(self, db: DocumentStore, order: Order) -> Order:
        return Order.model_validate(db.insert(ORDERS, order.model_dump()))

    def update_order(self, db: DocumentStore, order_id: uuid.UUID, **changes) -> Order | None:
        doc = db.update(ORDERS, order_id, changes)
        return Order.model_validate(doc) if doc else None

    def delete_order(self, db: DocumentStore, order_id: uuid.UUID) -> list[str]:
        """
        Delete an order's items, then the order.

        Returns:
            Ids of the items removed.
        """
        item_ids = db.delete_where_in(ORDER_ITEMS, "order_id", [order_id])
        db.delete(ORDERS, order_id)
        return item_ids

    # ---- Order items ----

    def list_items_for_order(
        self,
        db: DocumentStore,
        order_id: uuid.UUID,
    ) -> list[OrderItem]:
        docs = db.find(ORDER_ITEMS, {"order_id": order_id})
        return [OrderItem.model_validate(doc) for doc in docs]

    def create_item(self, db: DocumentStore, item: OrderItem) -> OrderItem:
        return OrderItem.model_validate(db.insert(ORDER_ITEMS, item.model_dump()))
