import json
import time

import pytest

from marketplace.core.config import get_settings
from marketplace.core.errors import InfrastructureError, WebhookVerificationError
from marketplace.core.webhooks import sign, verify_webhook
from marketplace.database import InMemoryDocumentStore
from marketplace.repositories.user_repo import UserRepository
from marketplace.schemas.identity import Identity
from marketplace.services.consistency_service import ConsistencyScanner
from marketplace.services.identity_service import IdentityService
from factories import StoreFactory, UserFactory

URL = "/api/v1/webhooks/identity"


def _event(event_type: str, external_id: str = "user_jane", email: str | None = "jane@village.test", **attrs) -> dict:
    data = {"id": external_id, **attrs}
    if email is not None:
        data["email_addresses"] = [{"id": "idn_1", "email_address": email}]
        data["primary_email_address_id"] = "idn_1"
    return {"type": event_type, "object": "event", "data": data}


def _signed_headers(body: bytes, secret: str | None = None, timestamp: int | None = None) -> dict:
    secret = secret or get_settings().IDENTITY_WEBHOOK_SECRET
    ts = str(timestamp if timestamp is not None else int(time.time()))
    return {
        "svix-id": "msg_2abc",
        "svix-timestamp": ts,
        "svix-signature": sign(secret, "msg_2abc", ts, body),
        "content-type": "application/json",
    }


def _send(client, event: dict, **header_kwargs):
    body = json.dumps(event).encode("utf-8")
    return client.post(URL, content=body, headers=_signed_headers(body, **header_kwargs))


# -------- Signature --------


def test_verify_accepts_any_listed_signature():
    secret = get_settings().IDENTITY_WEBHOOK_SECRET
    body = b'{"type":"user.updated"}'
    ts = str(int(time.time()))
    headers = {
        "webhook-id": "msg_1",
        "webhook-timestamp": ts,
        "webhook-signature": "v1,bm90LWl0 " + sign(secret, "msg_1", ts, body),
    }

    verify_webhook(body, headers, secret)


def test_verify_rejects_tampered_body():
    secret = get_settings().IDENTITY_WEBHOOK_SECRET
    ts = str(int(time.time()))
    headers = {
        "webhook-id": "msg_1",
        "webhook-timestamp": ts,
        "webhook-signature": sign(secret, "msg_1", ts, b'{"a":1}'),
    }

    with pytest.raises(WebhookVerificationError):
        verify_webhook(b'{"a":2}', headers, secret)


def test_bad_signature_rejected_before_any_write(client, db):
    body = json.dumps(_event("user.created")).encode("utf-8")
    headers = _signed_headers(body, secret="whsec_" + "d3Jvbmcta2V5")

    resp = client.post(URL, content=body, headers=headers)

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid webhook signature"
    assert db.count("users") == 0


def test_missing_signature_headers_rejected(client, db):
    resp = client.post(URL, json=_event("user.created"))

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Missing webhook signature headers"
    assert db.count("users") == 0


def test_stale_timestamp_rejected(client, db):
    resp = _send(client, _event("user.created"), timestamp=int(time.time()) - 3600)

    assert resp.status_code == 400
    assert db.count("users") == 0


def test_unsupported_event_is_acknowledged(client, db):
    resp = _send(client, {"type": "session.created", "data": {"id": "sess_1"}})

    assert resp.status_code == 200
    assert resp.json() == {"ok": True, "ignored": True}


# -------- created --------


def test_created_inserts_customer(client, db):
    resp = _send(client, _event("user.created", first_name="Jane", last_name="Doe"))

    assert resp.status_code == 200
    user = db.find_one("users", {"external_id": "user_jane"})
    assert user["email"] == "jane@village.test"
    assert user["name"] == "Jane Doe"
    assert user["role"] == "CUSTOMER"
    assert user["onboarded"] is False


def test_created_replay_converges(client, db):
    _send(client, _event("user.created", first_name="Jane"))
    _send(client, _event("user.created", first_name="Jane"))

    assert db.count("users") == 1


def test_created_for_admin_email(client, db):
    _send(client, _event("user.created", email="admin@village.test"))

    user = db.find_one("users", {"external_id": "user_jane"})
    assert user["role"] == "ADMIN"
    assert user["onboarded"] is True


def test_created_without_primary_email_creates_nothing(client, db):
    resp = _send(client, _event("user.created", email=None))

    assert resp.status_code == 400
    assert resp.json()["detail"] == "No primary email found"
    assert db.count("users") == 0


def test_created_after_lazy_creation_keeps_role(client, db):
    UserFactory.insert(db, external_id="user_jane", email="jane@village.test", role="OWNER")

    _send(client, _event("user.created", first_name="Jane", last_name="Doe"))

    user = db.find_one("users", {"external_id": "user_jane"})
    assert db.count("users") == 1
    assert user["role"] == "OWNER"
    assert user["name"] == "Jane Doe"


# -------- updated --------


def test_updated_refreshes_profile_only(client, db):
    UserFactory.insert(db, external_id="user_jane", email="jane@village.test", role="OWNER")

    resp = _send(
        client,
        _event(
            "user.updated",
            email="jane.doe@village.test",
            first_name="Jane",
            image_url="https://img.village.test/jane.png",
        ),
    )

    assert resp.status_code == 200
    user = db.find_one("users", {"external_id": "user_jane"})
    assert user["email"] == "jane.doe@village.test"
    assert user["image_url"] == "https://img.village.test/jane.png"
    assert user["role"] == "OWNER"


def test_updated_unknown_user_is_a_no_op(client, db):
    resp = _send(client, _event("user.updated", external_id="user_unknown"))

    assert resp.status_code == 200
    assert db.count("users") == 0


# -------- deleted --------


def test_deleted_removes_user_and_leaves_orphans(client, db):
    user = UserFactory.insert(db, external_id="user_jane", role="OWNER")
    store = StoreFactory.insert(db, user_id=user.id)

    first = _send(client, _event("user.deleted", email=None))
    replay = _send(client, _event("user.deleted", email=None))

    assert first.status_code == 200
    assert replay.status_code == 200
    assert db.count("users") == 0
    # No cascade: the store is left for the consistency scan
    assert db.count("stores") == 1
    assert ConsistencyScanner(db).scan().orphan_stores == [str(store.id)]


# -------- lazy creation --------


class RacingUsersStore(InMemoryDocumentStore):
    """Another request inserts the same identity just before our insert fails."""

    def insert(self, collection, doc):
        if collection == "users" and not self.count("users"):
            super().insert(collection, UserFactory.create(external_id=doc["external_id"]).model_dump())
            raise InfrastructureError(detail="Document store insert on 'users' failed")
        return super().insert(collection, doc)


def test_get_or_create_returns_concurrently_created_user():
    db = RacingUsersStore()
    identity = Identity(external_id="user_jane", email="jane@village.test")

    user = IdentityService(UserRepository()).get_or_create(db, identity)

    assert user.external_id == "user_jane"
    assert db.count("users") == 1


def test_get_or_create_reraises_when_nothing_was_created():
    class BrokenUsersStore(InMemoryDocumentStore):
        def insert(self, collection, doc):
            raise InfrastructureError(detail="Document store insert on 'users' failed")

    db = BrokenUsersStore()
    identity = Identity(external_id="user_jane", email="jane@village.test")

    with pytest.raises(InfrastructureError):
        IdentityService(UserRepository()).get_or_create(db, identity)
    assert db.count("users") == 0
