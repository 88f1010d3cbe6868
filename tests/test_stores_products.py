import uuid

import pytest

from factories import ProductFactory, StoreFactory, UserFactory

STORE = {
    "name": "Corner Bakery",
    "description": "Fresh bread every morning",
    "store_type": "food",
    "village": "Green Village",
    "phase_number": "1",
    "block_number": "4",
    "lot_number": "12",
}


def _product(store_id, **overrides) -> dict:
    return {
        "store_id": str(store_id),
        "name": "Pandesal",
        "description": "Bread roll",
        "price": 5.0,
        "stock": 100,
        "category": "bakery",
        "images": ["https://cdn.village.test/pandesal.jpg"],
        **overrides,
    }


@pytest.fixture
def shop(db, owner):
    return StoreFactory.insert(db, user_id=owner.id)


# -------- Stores --------


def test_customer_cannot_open_store(client, customer, headers_for):
    resp = client.post("/api/v1/stores", json=STORE, headers=headers_for(customer))
    assert resp.status_code == 403


def test_open_store(client, owner, headers_for):
    resp = client.post("/api/v1/stores", json=STORE, headers=headers_for(owner))

    assert resp.status_code == 201
    body = resp.json()
    assert body["user_id"] == str(owner.id)
    assert body["is_approved"] is False
    assert body["is_active"] is True


def test_store_cap_counts_existing_stores(client, owner, headers_for):
    headers = headers_for(owner)
    created = [client.post("/api/v1/stores", json=STORE, headers=headers) for _ in range(3)]
    assert all(r.status_code == 201 for r in created)

    fourth = client.post("/api/v1/stores", json=STORE, headers=headers)
    assert fourth.status_code == 400
    assert fourth.json()["detail"] == "Maximum of 3 stores allowed per user"

    client.delete(f"/api/v1/stores/{created[0].json()['id']}", headers=headers)
    assert client.post("/api/v1/stores", json=STORE, headers=headers).status_code == 201


def test_list_my_stores_only(client, db, owner, shop, headers_for):
    StoreFactory.insert(db, user_id=uuid.uuid4(), name="Someone else's")

    resp = client.get("/api/v1/stores", headers=headers_for(owner))

    assert [s["id"] for s in resp.json()] == [str(shop.id)]


def test_update_store(client, owner, shop, headers_for):
    resp = client.put(f"/api/v1/stores/{shop.id}", json={"name": "  Bakery 2  "}, headers=headers_for(owner))

    assert resp.status_code == 200
    assert resp.json()["name"] == "Bakery 2"
    assert resp.json()["village"] == "Green Village"


def test_update_other_owners_store_is_404(client, db, shop, headers_for):
    other = UserFactory.insert(db, role="OWNER")

    resp = client.put(f"/api/v1/stores/{shop.id}", json={"name": "Mine now"}, headers=headers_for(other))

    assert resp.status_code == 404


def test_delete_store_removes_its_products(client, db, owner, shop, headers_for):
    ProductFactory.insert(db, store_id=shop.id)
    ProductFactory.insert(db, store_id=shop.id, name="Ensaymada")
    untouched = ProductFactory.insert(db, store_id=uuid.uuid4())

    resp = client.delete(f"/api/v1/stores/{shop.id}", headers=headers_for(owner))

    assert resp.status_code == 200
    assert db.count("stores") == 0
    assert db.ids("products") == {str(untouched.id)}


# -------- Products --------


def test_create_product(client, owner, shop, headers_for):
    resp = client.post("/api/v1/products", json=_product(shop.id), headers=headers_for(owner))

    assert resp.status_code == 201
    assert resp.json()["store_id"] == str(shop.id)


def test_product_requires_an_image(client, owner, shop, headers_for):
    resp = client.post("/api/v1/products", json=_product(shop.id, images=[]), headers=headers_for(owner))
    assert resp.status_code == 422


def test_product_price_must_be_positive(client, owner, shop, headers_for):
    resp = client.post("/api/v1/products", json=_product(shop.id, price=0), headers=headers_for(owner))
    assert resp.status_code == 422


def test_create_product_in_foreign_store_is_404(client, db, shop, headers_for):
    other = UserFactory.insert(db, role="OWNER")

    resp = client.post("/api/v1/products", json=_product(shop.id), headers=headers_for(other))

    assert resp.status_code == 404
    assert db.count("products") == 0


def test_customer_browses_active_store(client, db, shop, customer, headers_for):
    product = ProductFactory.insert(db, store_id=shop.id)

    resp = client.get(f"/api/v1/products?store_id={shop.id}", headers=headers_for(customer))

    assert resp.status_code == 200
    assert [p["id"] for p in resp.json()] == [str(product.id)]


def test_inactive_store_catalog_hidden_from_customers(client, db, owner, customer, headers_for):
    store = StoreFactory.insert(db, user_id=owner.id, is_active=False)
    ProductFactory.insert(db, store_id=store.id)
    url = f"/api/v1/products?store_id={store.id}"

    assert client.get(url, headers=headers_for(customer)).status_code == 404
    assert len(client.get(url, headers=headers_for(owner)).json()) == 1


def test_update_and_delete_product(client, db, owner, shop, headers_for):
    product = ProductFactory.insert(db, store_id=shop.id)
    headers = headers_for(owner)

    patched = client.patch(f"/api/v1/products/{product.id}", json={"stock": 3}, headers=headers)
    assert patched.status_code == 200
    assert patched.json()["stock"] == 3
    assert patched.json()["name"] == product.name

    deleted = client.delete(f"/api/v1/products/{product.id}", headers=headers)
    assert deleted.status_code == 204
    assert db.count("products") == 0


# -------- Admin --------


def test_admin_endpoints_reject_non_admins(client, owner, headers_for):
    for path in ("/api/v1/admin/users", "/api/v1/admin/stores"):
        assert client.get(path, headers=headers_for(owner)).status_code == 403


def test_admin_lists_users(client, admin, customer, headers_for):
    resp = client.get("/api/v1/admin/users", headers=headers_for(admin))

    assert resp.status_code == 200
    assert {u["id"] for u in resp.json()} == {str(admin.id), str(customer.id)}


def test_admin_get_unknown_user(client, admin, headers_for):
    resp = client.get(f"/api/v1/admin/users/{uuid.uuid4()}", headers=headers_for(admin))
    assert resp.status_code == 404


def test_admin_changes_user_role(client, db, admin, customer, headers_for):
    resp = client.patch(
        f"/api/v1/admin/users/{customer.id}",
        json={"role": "owner"},
        headers=headers_for(admin),
    )

    assert resp.status_code == 200
    assert resp.json()["role"] == "OWNER"
    assert db.get("users", customer.id)["role"] == "OWNER"


def test_admin_cannot_grant_admin(client, db, admin, customer, headers_for):
    resp = client.patch(
        f"/api/v1/admin/users/{customer.id}",
        json={"role": "ADMIN"},
        headers=headers_for(admin),
    )

    assert resp.status_code == 400
    assert db.get("users", customer.id)["role"] == "CUSTOMER"


def test_admin_cannot_demote_another_admin(client, db, admin, headers_for):
    other = UserFactory.insert(db, role="ADMIN", onboarded=True)

    resp = client.patch(
        f"/api/v1/admin/users/{other.id}",
        json={"role": "CUSTOMER"},
        headers=headers_for(admin),
    )

    assert resp.status_code == 403
    assert resp.json()["detail"] == "Admin role locked"
    assert db.get("users", other.id)["role"] == "ADMIN"


def test_admin_changes_role_of_unknown_user(client, admin, headers_for):
    resp = client.patch(
        f"/api/v1/admin/users/{uuid.uuid4()}",
        json={"role": "OWNER"},
        headers=headers_for(admin),
    )
    assert resp.status_code == 404


def test_admin_moderates_store(client, db, admin, shop, headers_for):
    headers = headers_for(admin)
    url = f"/api/v1/admin/stores/{shop.id}"

    approved = client.patch(url, json={"action": "approve"}, headers=headers)
    assert approved.json()["is_approved"] is True

    disabled = client.patch(url, json={"action": "disable"}, headers=headers)
    assert disabled.json()["is_active"] is False
    assert db.get("stores", shop.id)["is_active"] is False

    assert [s["id"] for s in client.get("/api/v1/admin/stores", headers=headers).json()] == [str(shop.id)]


def test_admin_moderates_missing_store(client, admin, headers_for):
    resp = client.patch(
        f"/api/v1/admin/stores/{uuid.uuid4()}",
        json={"action": "enable"},
        headers=headers_for(admin),
    )
    assert resp.status_code == 404
