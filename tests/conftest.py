import base64
import os
import time

# Settings are read once at import time; configure before importing the app.
os.environ["SUPABASE_URL"] = "http://localhost:54321"
os.environ["SUPABASE_KEY"] = "test-anon-key"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret"
os.environ["STORE_BACKEND"] = "memory"
os.environ["ADMIN_EMAIL"] = "admin@village.test"
os.environ["IDENTITY_WEBHOOK_SECRET"] = "whsec_" + base64.b64encode(
    b"marketplace-webhook-test-key"
).decode("ascii")

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from marketplace.core.config import get_settings
from marketplace.database import InMemoryDocumentStore, get_store
from marketplace.main import app
from marketplace.models.user import User
from factories import UserFactory


@pytest.fixture
def db():
    """Fresh in-memory document store per test, wired into the app."""
    store = InMemoryDocumentStore()
    app.dependency_overrides[get_store] = lambda: store
    yield store
    app.dependency_overrides.pop(get_store, None)


@pytest.fixture
def client(db):
    with TestClient(app) as c:
        yield c


def make_token(sub: str, email: str, name: str | None = None, expires_in: int = 3600) -> str:
    settings = get_settings()
    claims = {
        "sub": sub,
        "email": email,
        "exp": int(time.time()) + expires_in,
        "user_metadata": {"full_name": name} if name else {},
    }
    return jwt.encode(claims, settings.SUPABASE_JWT_SECRET, algorithm=settings.SUPABASE_JWT_ALG)


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user.external_id, user.email)}"}


@pytest.fixture
def headers_for():
    """headers_for(user) -> Authorization header carrying a valid token."""
    return auth_headers


@pytest.fixture
def customer(db):
    return UserFactory.insert(db, role="CUSTOMER", onboarded=True)


@pytest.fixture
def owner(db):
    return UserFactory.insert(db, role="OWNER", onboarded=True)


@pytest.fixture
def admin(db):
    return UserFactory.insert(db, email="admin@village.test", role="ADMIN", onboarded=True)
