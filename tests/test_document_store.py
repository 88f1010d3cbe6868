import uuid

import httpx
import pytest
from postgrest.exceptions import APIError

from marketplace.core.errors import InfrastructureError
from marketplace.database import InMemoryDocumentStore, SupabaseDocumentStore


class FakeResponse:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


class FakeQuery:
    """Records the builder calls made against one table."""

    def __init__(self, client, table):
        self.client = client
        self.table = table
        self.calls = []

    def __getattr__(self, name):
        def record(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self

        return record

    def call(self, name):
        return next((c for c in self.calls if c[0] == name), None)

    def execute(self):
        return self.client.respond(self)


class FakeClient:
    def __init__(self, rows=None, error=None):
        self.rows = rows or []
        self.error = error
        self.queries = []

    def table(self, name):
        query = FakeQuery(self, name)
        self.queries.append(query)
        return query

    def respond(self, query):
        if self.error is not None:
            raise self.error
        ranged = query.call("range")
        if ranged:
            start, end = ranged[1]
            return FakeResponse(self.rows[start : end + 1])
        if query.call("delete"):
            wanted = set(query.call("in_")[1][1])
            return FakeResponse([r for r in self.rows if r["id"] in wanted])
        return FakeResponse(self.rows, count=len(self.rows))


# -------- Supabase adapter --------


def test_full_read_is_paged():
    client = FakeClient(rows=[{"id": str(i)} for i in range(5)])
    db = SupabaseDocumentStore(client)
    db.PAGE_SIZE = 2

    rows = db.find("products")

    assert [r["id"] for r in rows] == ["0", "1", "2", "3", "4"]
    assert [q.call("range")[1] for q in client.queries] == [(0, 1), (2, 3), (4, 5)]


def test_delete_is_chunked_and_returns_deleted_ids():
    client = FakeClient(rows=[{"id": "a"}, {"id": "c"}])
    db = SupabaseDocumentStore(client)
    db.IN_CHUNK_SIZE = 2

    deleted = db.delete_where_in("stores", "id", ["a", "b", "c"])

    assert sorted(deleted) == ["a", "c"]
    assert len(client.queries) == 2


def test_none_filter_becomes_is_null():
    client = FakeClient(rows=[{"id": "s1"}])
    db = SupabaseDocumentStore(client)

    db.find("stores", {"user_id": None}, limit=1)

    assert client.queries[0].call("is_")[1] == ("user_id", "null")


def test_filters_are_json_encoded():
    client = FakeClient(rows=[])
    db = SupabaseDocumentStore(client)
    store_id = uuid.uuid4()

    db.find("products", {"store_id": store_id}, limit=10)

    assert client.queries[0].call("eq")[1] == ("store_id", str(store_id))


@pytest.mark.parametrize(
    "error",
    [
        APIError({"message": "relation does not exist", "code": "42P01"}),
        httpx.ConnectError("connection refused"),
    ],
)
def test_backend_errors_become_infrastructure_errors(error):
    db = SupabaseDocumentStore(FakeClient(error=error))

    with pytest.raises(InfrastructureError) as excinfo:
        db.count("users")

    assert excinfo.value.status_code == 503
    assert excinfo.value.detail == "Document store count on 'users' failed"


# -------- In-memory adapter --------


def test_memory_store_returns_copies():
    db = InMemoryDocumentStore({"products": [{"id": "p1", "images": ["a.jpg"]}]})

    doc = db.get("products", "p1")
    doc["images"].append("b.jpg")

    assert db.get("products", "p1")["images"] == ["a.jpg"]


def test_memory_store_orders_and_limits():
    db = InMemoryDocumentStore(
        {
            "orders": [
                {"id": "o1", "created_at": "2026-01-01T00:00:00+00:00"},
                {"id": "o2", "created_at": "2026-03-01T00:00:00+00:00"},
                {"id": "o3", "created_at": "2026-02-01T00:00:00+00:00"},
            ]
        }
    )

    rows = db.find("orders", order_by="created_at", descending=True, limit=2)

    assert [r["id"] for r in rows] == ["o2", "o3"]


def test_memory_store_update_missing_returns_none():
    db = InMemoryDocumentStore()

    assert db.update("users", "nobody", {"name": "x"}) is None


def test_memory_store_find_in_and_count():
    db = InMemoryDocumentStore(
        {
            "stores": [
                {"id": "s1", "user_id": "u1"},
                {"id": "s2", "user_id": "u2"},
                {"id": "s3", "user_id": "u1"},
            ]
        }
    )

    assert {d["id"] for d in db.find_in("stores", "user_id", ["u1"])} == {"s1", "s3"}
    assert db.count("stores", {"user_id": "u2"}) == 1
    assert db.ids("stores") == {"s1", "s2", "s3"}


def test_health_endpoints(client, db):
    db.insert("users", {"id": "u1"})

    assert client.get("/").json() == {"status": "ok", "service": "marketplace-backend"}
    assert client.get("/db/health").json() == {"ok": True, "users_count": 1}
