# marketplace/routers/users.py
from fastapi import APIRouter, Depends

from marketplace.core.auth import get_current_user
from marketplace.database import DocumentStore, get_store
from marketplace.models.user import User
from marketplace.repositories.user_repo import UserRepository
from marketplace.schemas.user import RoleRead, RoleUpdate, UserRead
from marketplace.services.role_service import RoleService, landing_path

router = APIRouter(prefix="/users", tags=["Users"])

role_service = RoleService(UserRepository())


@router.get("/me", response_model=UserRead)
def read_me(current_user: User = Depends(get_current_user)):
    """
    Return the authenticated user's profile.

    The profile row is created on the first authenticated request.
    """
    return current_user


@router.get("/me/role", response_model=RoleRead)
def read_my_role(current_user: User = Depends(get_current_user)):
    """
    Current role and onboarding flag of the caller.
    """
    state = role_service.get_role(current_user)
    return RoleRead(role=state.role, onboarded=state.onboarded)


@router.post("/me/role")
def set_my_role(
    payload: RoleUpdate,
    db: DocumentStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    """
    Onboarding role selection.

    Allowed roles: CUSTOMER, OWNER. Selecting one marks the user onboarded.

    Errors:
      - 400: any other role (ADMIN cannot be self-assigned)
      - 403: caller is ADMIN (role locked)
    """
    role_service.set_role(db, current_user, payload.role)
    return {"ok": True}


@router.get("/me/landing")
def read_my_landing(current_user: User = Depends(get_current_user)):
    """
    Where the client should route the caller after sign-in.

    Users who have not picked a role yet are sent to onboarding.
    """
    return {"path": landing_path(role_service.get_role(current_user))}
