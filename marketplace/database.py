# marketplace/database.py
"""
Document store adapter.

The marketplace data lives in independent collections with no foreign keys,
no cascades and no multi-collection transactions. Everything above this
module talks to a `DocumentStore`:

    from fastapi import Depends

    @router.get("/example")
    def example_endpoint(db: DocumentStore = Depends(get_store)):
        ...

Two backends:
  - SupabaseDocumentStore: one Supabase (PostgREST) table per collection,
    accessed with the service-role client.
  - InMemoryDocumentStore: plain dicts keyed by id, for local development
    (STORE_BACKEND=memory) and tests.

Both treat deletion of an unknown id as a no-op, which is what makes
repair runs safe to repeat.
"""

import copy
import logging
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any, Iterable, Iterator

import httpx
from fastapi.encoders import jsonable_encoder
from postgrest.exceptions import APIError

from marketplace.core.config import get_settings
from marketplace.core.errors import InfrastructureError

logger = logging.getLogger(__name__)

USERS = "users"
STORES = "stores"
PRODUCTS = "products"
ORDERS = "orders"
ORDER_ITEMS = "order_items"

COLLECTIONS = (USERS, STORES, PRODUCTS, ORDERS, ORDER_ITEMS)

Document = dict[str, Any]


def _chunks(values: list, size: int) -> Iterator[list]:
    for start in range(0, len(values), size):
        yield values[start : start + size]


class DocumentStore(ABC):
    """
    Collection-scoped CRUD with equality filters.

    All documents are JSON-compatible dicts carrying an "id" key.
    Implementations raise InfrastructureError for any backend failure.
    """

    @abstractmethod
    def find(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Document]:
        """Return every document matching all `filters` (field == value)."""

    @abstractmethod
    def find_in(self, collection: str, field: str, values: Iterable[Any]) -> list[Document]:
        """Return documents whose `field` is one of `values`."""

    @abstractmethod
    def count(self, collection: str, filters: dict[str, Any] | None = None) -> int: ...

    @abstractmethod
    def insert(self, collection: str, doc: Document) -> Document: ...

    @abstractmethod
    def update(self, collection: str, doc_id: Any, changes: Document) -> Document | None:
        """Apply `changes` to one document; None if it does not exist."""

    @abstractmethod
    def delete_where_in(self, collection: str, field: str, values: Iterable[Any]) -> list[str]:
        """
        Delete documents whose `field` is one of `values`.

        Returns the ids actually deleted. Values matching nothing are ignored.
        """

    # ----- Derived helpers -----

    def get(self, collection: str, doc_id: Any) -> Document | None:
        return self.find_one(collection, {"id": doc_id})

    def find_one(self, collection: str, filters: dict[str, Any]) -> Document | None:
        rows = self.find(collection, filters, limit=1)
        return rows[0] if rows else None

    def delete(self, collection: str, doc_id: Any) -> bool:
        return bool(self.delete_where_in(collection, "id", [doc_id]))

    def ids(self, collection: str) -> set[str]:
        """Full id-set of a collection."""
        return {str(doc["id"]) for doc in self.find(collection)}

    @staticmethod
    def encode(value: Any) -> Any:
        """UUIDs, datetimes and models -> JSON-compatible values."""
        return jsonable_encoder(value)


class SupabaseDocumentStore(DocumentStore):
    """
    Supabase-backed store.

    Notes:
      - PostgREST caps unbounded selects (1000 rows by default), so full
        collection reads are paged with .range().
      - `in` filters are sent in the URL, so long id lists are chunked.
    """

    PAGE_SIZE = 1000
    IN_CHUNK_SIZE = 100

    def __init__(self, client):
        self.client = client

    def _run(self, op: str, collection: str, query):
        try:
            return query.execute()
        except (APIError, httpx.HTTPError) as exc:
            logger.error("Document store %s on '%s' failed: %s", op, collection, exc)
            raise InfrastructureError(
                detail=f"Document store {op} on '{collection}' failed"
            ) from exc

    def _select(self, collection: str, filters: dict[str, Any] | None):
        query = self.client.table(collection).select("*")
        for field, value in (filters or {}).items():
            if value is None:
                query = query.is_(field, "null")
            else:
                query = query.eq(field, self.encode(value))
        return query

    def find(self, collection, filters=None, order_by=None, descending=False, limit=None):
        if limit is not None:
            query = self._select(collection, filters)
            if order_by:
                query = query.order(order_by, desc=descending)
            return self._run("read", collection, query.limit(limit)).data

        rows: list[Document] = []
        offset = 0
        while True:
            query = self._select(collection, filters).order(
                order_by or "id", desc=descending
            )
            page = self._run(
                "read", collection, query.range(offset, offset + self.PAGE_SIZE - 1)
            ).data
            rows.extend(page)
            if len(page) < self.PAGE_SIZE:
                return rows
            offset += self.PAGE_SIZE

    def find_in(self, collection, field, values):
        values = [self.encode(v) for v in values]
        rows: list[Document] = []
        for chunk in _chunks(values, self.IN_CHUNK_SIZE):
            query = self.client.table(collection).select("*").in_(field, chunk)
            rows.extend(self._run("read", collection, query).data)
        return rows

    def count(self, collection, filters=None):
        query = self.client.table(collection).select("id", count="exact")
        for field, value in (filters or {}).items():
            query = query.eq(field, self.encode(value))
        return self._run("count", collection, query).count or 0

    def insert(self, collection, doc):
        query = self.client.table(collection).insert(self.encode(doc))
        return self._run("insert", collection, query).data[0]

    def update(self, collection, doc_id, changes):
        query = (
            self.client.table(collection)
            .update(self.encode(changes))
            .eq("id", self.encode(doc_id))
        )
        rows = self._run("update", collection, query).data
        return rows[0] if rows else None

    def delete_where_in(self, collection, field, values):
        values = [self.encode(v) for v in values]
        deleted: list[str] = []
        for chunk in _chunks(values, self.IN_CHUNK_SIZE):
            query = self.client.table(collection).delete().in_(field, chunk)
            rows = self._run("delete", collection, query).data
            deleted.extend(str(row["id"]) for row in rows)
        return deleted


class InMemoryDocumentStore(DocumentStore):
    """
    Independent keyed maps, one per collection.

    Documents are deep-copied in and out so callers can never mutate
    stored state behind the store's back.
    """

    def __init__(self, data: dict[str, list[Document]] | None = None):
        self.collections: dict[str, dict[str, Document]] = {
            name: {} for name in COLLECTIONS
        }
        for name, docs in (data or {}).items():
            for doc in docs:
                self.insert(name, doc)

    def _table(self, collection: str) -> dict[str, Document]:
        return self.collections.setdefault(collection, {})

    @staticmethod
    def _matches(doc: Document, filters: dict[str, Any]) -> bool:
        return all(doc.get(field) == value for field, value in filters.items())

    def find(self, collection, filters=None, order_by=None, descending=False, limit=None):
        filters = self.encode(filters or {})
        rows = [
            copy.deepcopy(doc)
            for doc in self._table(collection).values()
            if self._matches(doc, filters)
        ]
        if order_by:
            rows.sort(
                key=lambda d: (d.get(order_by) is None, d.get(order_by)),
                reverse=descending,
            )
        if limit is not None:
            rows = rows[:limit]
        return rows

    def find_in(self, collection, field, values):
        wanted = set(self.encode(list(values)))
        return [
            copy.deepcopy(doc)
            for doc in self._table(collection).values()
            if doc.get(field) in wanted
        ]

    def count(self, collection, filters=None):
        return len(self.find(collection, filters))

    def insert(self, collection, doc):
        doc = self.encode(doc)
        self._table(collection)[str(doc["id"])] = doc
        return copy.deepcopy(doc)

    def update(self, collection, doc_id, changes):
        table = self._table(collection)
        doc = table.get(str(self.encode(doc_id)))
        if doc is None:
            return None
        doc.update(self.encode(changes))
        return copy.deepcopy(doc)

    def delete_where_in(self, collection, field, values):
        wanted = set(self.encode(list(values)))
        table = self._table(collection)
        doomed = [key for key, doc in table.items() if doc.get(field) in wanted]
        for key in doomed:
            del table[key]
        return doomed


@lru_cache
def _configured_store() -> DocumentStore:
    settings = get_settings()
    if settings.STORE_BACKEND == "memory":
        logger.warning("Using in-memory document store; data is not persisted")
        return InMemoryDocumentStore()

    from marketplace.core.supabase_client import supabase_admin

    return SupabaseDocumentStore(supabase_admin())


def get_store() -> DocumentStore:
    """FastAPI dependency returning the configured document store."""
    return _configured_store()


def check_connection(db: DocumentStore) -> int:
    """
    Minimal query to validate connectivity.

    Returns:
        Number of users.

    Raises:
        InfrastructureError: if the store cannot be reached.
    """
    return db.count(USERS)
