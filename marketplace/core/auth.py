# marketplace/core/auth.py
from typing import Any

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError

from marketplace.core.config import get_settings
from marketplace.core.errors import AuthenticationError, AuthorizationError
from marketplace.database import DocumentStore, get_store
from marketplace.models.user import ADMIN, OWNER, User
from marketplace.repositories.user_repo import UserRepository
from marketplace.schemas.identity import Identity
from marketplace.services.identity_service import IdentityService

# HTTP Bearer scheme:
# - auto_error=False => missing Authorization header does not raise here,
#   so we can answer with our own 401 body.
bearer_scheme = HTTPBearer(auto_error=False)

identity_service = IdentityService(UserRepository())


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and verify an identity-provider access token (JWT).

    Verification:
      - signature (HS256 using SUPABASE_JWT_SECRET)
      - expiration time (exp)
      - audience is NOT verified (provider 'aud' may vary)

    Raises:
        AuthenticationError: if token is invalid/expired.
    """
    settings = get_settings()
    try:
        return jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.SUPABASE_JWT_ALG],
            options={"verify_aud": False},
        )
    except JWTError:
        raise AuthenticationError(detail="Invalid or expired token")


def get_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Identity:
    """
    Resolve the caller's identity from the bearer token.

    Claims used:
      - sub: identity-provider user id (required)
      - email (required)
      - user_metadata.full_name / name, user_metadata.avatar_url (optional)
    """
    if credentials is None:
        raise AuthenticationError(detail="Authentication required")

    payload = decode_access_token(credentials.credentials)
    sub = payload.get("sub")
    email = payload.get("email")

    if not sub or not email:
        raise AuthenticationError(detail="Token missing sub/email")

    metadata = payload.get("user_metadata") or {}
    return Identity(
        external_id=str(sub),
        email=email,
        name=metadata.get("full_name") or metadata.get("name"),
        image_url=metadata.get("avatar_url"),
    )


def get_current_user(
    identity: Identity = Depends(get_identity),
    db: DocumentStore = Depends(get_store),
) -> User:
    """
    Map the caller's identity to the local User, creating it on first use.

    Creation goes through IdentityService.get_or_create, the single place
    where lazy creation happens.
    """
    return identity_service.get_or_create(db, identity)


def require_owner(user: User = Depends(get_current_user)) -> User:
    """
    Enforce store-owner capability (OWNER, or ADMIN acting on any store).

    Raises:
        AuthorizationError: for customers.
    """
    if user.role not in (OWNER, ADMIN):
        raise AuthorizationError(detail="Store owner access required")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    """
    Enforce admin role.

    Raises:
        AuthorizationError: if role is not ADMIN.
    """
    if user.role != ADMIN:
        raise AuthorizationError(detail="Admin access required")
    return user
