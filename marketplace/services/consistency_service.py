# marketplace/services/consistency_service.py
"""
Referential-integrity scan over the document store.

The store enforces no foreign keys, so every parent reference is checked
here against plain id-sets, parents before children:

    users  -> stores   -> products
    users  + stores    -> orders -> order_items

Children are checked against the *surviving* parents (parents minus the
ones already classified as orphans), so a product whose store is itself
orphaned is reported in the same pass. The helpers below are shared with
the repair executor, which applies them phase by phase.
"""

import logging
from typing import Any, Iterable

from marketplace.database import (
    ORDER_ITEMS,
    ORDERS,
    PRODUCTS,
    STORES,
    USERS,
    DocumentStore,
)
from marketplace.schemas.maintenance import ScanReport

logger = logging.getLogger(__name__)

Document = dict[str, Any]


def id_set(docs: Iterable[Document]) -> set[str]:
    return {str(doc["id"]) for doc in docs}


def _resolves(doc: Document, field: str, parent_ids: set[str]) -> bool:
    # A missing reference field never resolves.
    return doc.get(field) is not None and str(doc[field]) in parent_ids


def _dangling(docs: Iterable[Document], field: str, parent_ids: set[str]) -> list[str]:
    return [str(doc["id"]) for doc in docs if not _resolves(doc, field, parent_ids)]


def find_orphan_stores(stores: Iterable[Document], user_ids: set[str]) -> list[str]:
    return _dangling(stores, "user_id", user_ids)


def find_orphan_products(products: Iterable[Document], store_ids: set[str]) -> list[str]:
    return _dangling(products, "store_id", store_ids)


def find_orphan_orders(
    orders: Iterable[Document],
    user_ids: set[str],
    store_ids: set[str],
) -> list[str]:
    return [
        str(order["id"])
        for order in orders
        if not _resolves(order, "user_id", user_ids)
        or not _resolves(order, "store_id", store_ids)
    ]


def find_orphan_items(items: Iterable[Document], order_ids: set[str]) -> list[str]:
    return _dangling(items, "order_id", order_ids)


def classify(
    users: list[Document],
    stores: list[Document],
    products: list[Document],
    orders: list[Document],
    items: list[Document],
) -> ScanReport:
    """
    Pure, dependency-ordered classification of already-loaded collections.
    """
    user_ids = id_set(users)

    orphan_stores = find_orphan_stores(stores, user_ids)
    surviving_stores = id_set(stores) - set(orphan_stores)

    orphan_products = find_orphan_products(products, surviving_stores)

    orphan_orders = find_orphan_orders(orders, user_ids, surviving_stores)
    surviving_orders = id_set(orders) - set(orphan_orders)

    orphan_items = find_orphan_items(items, surviving_orders)

    return ScanReport(
        orphan_stores=orphan_stores,
        orphan_products=orphan_products,
        orphan_orders=orphan_orders,
        orphan_order_items=orphan_items,
    )


class ConsistencyScanner:
    """
    Read-only scan producing a ScanReport.

    All five collections are read up front. If any read fails the
    InfrastructureError propagates and no report is produced, so nothing
    ever acts on a half-read snapshot.
    """

    def __init__(self, db: DocumentStore):
        self.db = db

    def scan(self) -> ScanReport:
        users = self.db.find(USERS)
        stores = self.db.find(STORES)
        products = self.db.find(PRODUCTS)
        orders = self.db.find(ORDERS)
        items = self.db.find(ORDER_ITEMS)

        report = classify(users, stores, products, orders, items)

        logger.info(
            "Consistency scan: %d stores, %d products, %d orders, %d items orphaned",
            len(report.orphan_stores),
            len(report.orphan_products),
            len(report.orphan_orders),
            len(report.orphan_order_items),
        )
        return report
