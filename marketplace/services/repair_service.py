# marketplace/services/repair_service.py
import logging

from marketplace.core.errors import InfrastructureError, RepairError
from marketplace.database import (
    ORDER_ITEMS,
    ORDERS,
    PRODUCTS,
    STORES,
    USERS,
    DocumentStore,
)
from marketplace.schemas.maintenance import RepairAction, RepairReport
from marketplace.services.consistency_service import (
    ConsistencyScanner,
    find_orphan_items,
    find_orphan_orders,
    find_orphan_products,
    find_orphan_stores,
)

logger = logging.getLogger(__name__)


class RepairExecutor:
    """
    Deletes orphaned records, parents before children.

    Modes:
      - dry run (default): report what the scanner finds, touch nothing.
      - apply: delete in strict dependency order, re-reading the parent
        collection before each child phase so records orphaned by an
        earlier phase of the same run are caught:

          1. stores whose user is gone
          2. products whose store is gone (including stores deleted in 1)
          3. orders whose user or store is gone; their items first
          4. items whose order is gone (including orders deleted in 3)

    There is no cross-collection transaction and no rollback. A failing
    phase raises RepairError with the actions applied so far; running the
    repair again is the recovery path, and it is safe because deleting an
    already-deleted id is a no-op.
    """

    def __init__(self, db: DocumentStore):
        self.db = db

    def run(self, apply: bool = False) -> RepairReport:
        if not apply:
            return self._dry_run()

        actions: list[RepairAction] = []
        phase = "users"
        try:
            user_ids = self.db.ids(USERS)

            phase = "stores"
            orphan_stores = find_orphan_stores(self.db.find(STORES), user_ids)
            if orphan_stores:
                self._record(actions, "orphan-stores", orphan_stores)
                deleted = self.db.delete_where_in(STORES, "id", orphan_stores)
                self._record(actions, "deleted-stores", deleted)

            phase = "products"
            store_ids = self.db.ids(STORES)
            orphan_products = find_orphan_products(self.db.find(PRODUCTS), store_ids)
            if orphan_products:
                self._record(actions, "orphan-products", orphan_products)
                deleted = self.db.delete_where_in(PRODUCTS, "id", orphan_products)
                self._record(actions, "deleted-products", deleted)

            phase = "orders"
            orphan_orders = find_orphan_orders(self.db.find(ORDERS), user_ids, store_ids)
            if orphan_orders:
                self._record(actions, "orphan-orders", orphan_orders)
                deleted_items = self.db.delete_where_in(ORDER_ITEMS, "order_id", orphan_orders)
                self._record(actions, "deleted-order-items", deleted_items)
                deleted = self.db.delete_where_in(ORDERS, "id", orphan_orders)
                self._record(actions, "deleted-orders", deleted)

            phase = "order-items"
            order_ids = self.db.ids(ORDERS)
            orphan_items = find_orphan_items(self.db.find(ORDER_ITEMS), order_ids)
            if orphan_items:
                self._record(actions, "orphan-order-items", orphan_items)
                deleted = self.db.delete_where_in(ORDER_ITEMS, "id", orphan_items)
                self._record(actions, "deleted-orphan-items", deleted)
        except InfrastructureError as exc:
            logger.error(
                "Repair stopped in phase '%s' after %d action(s): %s",
                phase,
                len(actions),
                exc.detail,
            )
            raise RepairError(phase, actions, exc) from exc

        logger.info("Repair applied: %d action(s)", len(actions))
        return RepairReport(dry_run=False, actions=actions)

    def _dry_run(self) -> RepairReport:
        try:
            report = ConsistencyScanner(self.db).scan()
        except InfrastructureError as exc:
            raise RepairError("scan", [], exc) from exc

        actions: list[RepairAction] = []
        for action_type, ids in (
            ("orphan-stores", report.orphan_stores),
            ("orphan-products", report.orphan_products),
            ("orphan-orders", report.orphan_orders),
            ("orphan-order-items", report.orphan_order_items),
        ):
            if ids:
                actions.append(RepairAction(type=action_type, count=len(ids), ids=ids))
        return RepairReport(dry_run=True, actions=actions)

    @staticmethod
    def _record(actions: list[RepairAction], action_type: str, ids: list[str]) -> None:
        actions.append(RepairAction(type=action_type, count=len(ids), ids=ids))
        logger.info("%s: %d %s", action_type, len(ids), ids)
