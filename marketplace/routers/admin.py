# marketplace/routers/admin.py
import logging
import uuid

from fastapi import APIRouter, Depends

from marketplace.core.auth import require_admin
from marketplace.database import DocumentStore, get_store
from marketplace.repositories.store_repo import StoreRepository
from marketplace.repositories.user_repo import UserRepository
from marketplace.schemas.maintenance import ScanReport
from marketplace.schemas.store import StoreAdminAction, StoreRead
from marketplace.schemas.user import RoleUpdate, UserRead
from marketplace.services.consistency_service import ConsistencyScanner
from marketplace.services.role_service import RoleService
from marketplace.services.store_service import StoreService
from marketplace.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(require_admin)],
)

user_service = UserService(UserRepository())
role_service = RoleService(UserRepository())
store_service = StoreService(StoreRepository())


@router.get("/users", response_model=list[UserRead])
def list_users(
    db: DocumentStore = Depends(get_store),
    skip: int = 0,
    limit: int = 50,
):
    """
    List all users (admin only).

    Pagination via skip/limit.
    """
    return user_service.list_users(db, skip, limit)


@router.get("/users/{user_id}", response_model=UserRead)
def get_user(
    user_id: uuid.UUID,
    db: DocumentStore = Depends(get_store),
):
    return user_service.get_user(db, user_id)


@router.patch("/users/{user_id}", response_model=UserRead)
def change_user_role(
    user_id: uuid.UUID,
    payload: RoleUpdate,
    db: DocumentStore = Depends(get_store),
):
    """
    Switch a user between CUSTOMER and OWNER.

    ADMIN cannot be granted here (400) and an ADMIN cannot be moved (403).
    """
    updated = role_service.assign_role(db, user_id, payload.role)
    logger.info("Admin set role of user %s to %s", user_id, updated.role)
    return updated


@router.get("/stores", response_model=list[StoreRead])
def list_stores(db: DocumentStore = Depends(get_store)):
    """
    All stores of all owners, newest first.
    """
    return store_service.list_all_stores(db)


@router.patch("/stores/{store_id}", response_model=StoreRead)
def moderate_store(
    store_id: uuid.UUID,
    payload: StoreAdminAction,
    db: DocumentStore = Depends(get_store),
):
    """
    approve -> is_approved = True
    disable -> is_active = False
    enable  -> is_active = True
    """
    return store_service.moderate(db, store_id, payload.action)


@router.get("/integrity", response_model=ScanReport)
def integrity_report(db: DocumentStore = Depends(get_store)):
    """
    Dry-run consistency scan: orphaned ids per entity type.

    Nothing is deleted here; repairs run from the maintenance script.
    """
    return ConsistencyScanner(db).scan()
