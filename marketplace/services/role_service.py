# marketplace/services/role_service.py
"""
Role & onboarding state.

Each user is in one of role x onboarded. The only self-service transition
is CUSTOMER/OWNER selection during onboarding; ADMIN is assigned at account
creation (configured admin email) or out-of-band via `promote_admin`, and
once assigned it can never be left through `set_role`.
"""

import logging
import uuid
from typing import NamedTuple

from marketplace.core.config import get_settings
from marketplace.core.errors import InvalidRequestError, NotFoundError, RoleLockedError
from marketplace.database import DocumentStore
from marketplace.models.user import ADMIN, CUSTOMER, OWNER, User
from marketplace.repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)

SELF_SELECTABLE_ROLES = (CUSTOMER, OWNER)

LANDING_PATHS = {
    ADMIN: "/admin",
    OWNER: "/dashboard",
    CUSTOMER: "/customer",
}
ONBOARDING_PATH = "/onboarding/role"


class RoleState(NamedTuple):
    role: str
    onboarded: bool


def initial_role_state(email: str | None) -> RoleState:
    """State of a freshly created account."""
    if get_settings().is_admin_email(email):
        return RoleState(ADMIN, True)
    return RoleState(CUSTOMER, False)


def next_role_state(current: RoleState, requested: str) -> RoleState:
    """
    The single authoritative role transition.

    Raises:
        InvalidRequestError: requested role is not self-selectable.
        RoleLockedError: current role is ADMIN.
    """
    if requested not in SELF_SELECTABLE_ROLES:
        raise InvalidRequestError(detail="Invalid role")
    if current.role == ADMIN:
        raise RoleLockedError(detail="Admin role locked")
    return RoleState(requested, True)


def landing_path(state: RoleState) -> str:
    """Which surface a user lands on after sign-in."""
    if not state.onboarded and state.role != ADMIN:
        return ONBOARDING_PATH
    return LANDING_PATHS.get(state.role, LANDING_PATHS[CUSTOMER])


class RoleService:
    def __init__(self, repo: UserRepository):
        self.repo = repo

    def get_role(self, user: User) -> RoleState:
        return RoleState(user.role, user.onboarded)

    def set_role(self, db: DocumentStore, user: User, requested: str) -> User:
        updated = self.assign_role(db, user.id, requested)
        logger.info("User %s selected role %s", updated.id, updated.role)
        return updated

    def assign_role(self, db: DocumentStore, user_id: uuid.UUID, requested: str) -> User:
        """
        Move a user to `requested` through `next_role_state`.

        Used by self-selection and by admin role changes, so ADMIN can
        neither be granted nor left here.

        Raises:
            NotFoundError: no such user.
        """
        # Re-read so a concurrent promotion to ADMIN is not overwritten.
        fresh = self.repo.get_by_id(db, user_id)
        if fresh is None:
            raise NotFoundError(detail="User not found")

        state = next_role_state(self.get_role(fresh), requested)
        updated = self.repo.update(db, fresh, role=state.role, onboarded=state.onboarded)
        if updated is None:
            raise NotFoundError(detail="User not found")
        return updated

    def promote_admin(self, db: DocumentStore) -> User:
        """
        Privileged out-of-band promotion of the configured ADMIN_EMAIL user.

        Raises:
            InvalidRequestError: ADMIN_EMAIL is not configured.
            NotFoundError: no user has that email.
        """
        admin_email = get_settings().ADMIN_EMAIL
        if not admin_email:
            raise InvalidRequestError(detail="ADMIN_EMAIL is not set")

        user = self.repo.get_by_email(db, admin_email.strip().lower())
        if user is None:
            raise NotFoundError(detail=f"No user found with email: {admin_email}")

        if user.role == ADMIN and user.onboarded:
            return user

        logger.warning("Promoting %s to ADMIN", user.email)
        return self.repo.update(db, user, role=ADMIN, onboarded=True)
