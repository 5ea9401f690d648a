# teashop/routers/users.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from teashop.core.auth import require_auth, require_manager
from teashop.database import get_session
from teashop.models.user import User
from teashop.repositories.order_repo import OrderRepository
from teashop.repositories.product_repo import ProductRepository
from teashop.repositories.user_repo import UserRepository
from teashop.schemas.auth import ManagerUpgradeRequest
from teashop.schemas.common import MessageResponse
from teashop.schemas.user import (
    NicknameUpdate,
    PurchasesResponse,
    RoleResponse,
    RoleUpdate,
    StatusUpdate,
    UserAdminRead,
    UserDetailResponse,
    UserListResponse,
)
from teashop.services.order_service import OrderService
from teashop.services.user_service import UserService

router = APIRouter(prefix="/products", tags=["Users"])

order_repo = OrderRepository()
service = UserService(UserRepository(), order_repo)
order_service = OrderService(order_repo, ProductRepository())


# -------- Signed-in customer --------


@router.get("/user/role", response_model=RoleResponse)
def read_my_role(current_user: User = Depends(require_auth)):
    """
    Role of the caller, as stored in the database.
    """
    return RoleResponse(role=current_user.role)


@router.get("/user/purchases", response_model=PurchasesResponse)
def read_my_purchases(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Lifetime purchase totals plus the latest orders of the caller.
    """
    stats, orders = order_service.purchase_history(session, current_user.email)
    return PurchasesResponse(stats=stats, orders=orders)


@router.post("/upgrade-manager", response_model=MessageResponse)
def upgrade_manager(
    payload: ManagerUpgradeRequest,
    session: Session = Depends(get_session),
):
    """
    Grant the manager role with the shop's upgrade code.

    Disabled (403) unless MANAGER_UPGRADE_CODE is configured.
    """
    service.upgrade_to_manager(session, payload.email, payload.code)
    return MessageResponse(message="Upgraded to manager")


# -------- Manager endpoints --------


@router.get(
    "/users",
    response_model=UserListResponse,
    dependencies=[Depends(require_manager)],
)
def list_users(session: Session = Depends(get_session)):
    """
    All users. Cached order stats older than the cache window are
    recomputed before listing.
    """
    users = service.list_users(session)
    return UserListResponse(users=[UserAdminRead.model_validate(u) for u in users])


@router.get(
    "/users/{user_id}",
    response_model=UserDetailResponse,
    dependencies=[Depends(require_manager)],
)
def get_user(
    user_id: int,
    session: Session = Depends(get_session),
):
    """
    One user with live order stats and full order history.
    """
    user, stats, orders = service.get_user_detail(session, user_id)
    return UserDetailResponse(
        user=UserAdminRead.model_validate(user),
        stats=stats,
        orders=orders,
    )


@router.put("/users/{user_id}/role", response_model=MessageResponse)
def change_role(
    user_id: int,
    payload: RoleUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_manager),
):
    """
    Allowed roles: user, manager. Managers cannot demote themselves.
    """
    service.update_role(session, current_user, user_id, payload)
    return MessageResponse(message="User role updated")


@router.put("/users/{user_id}/status", response_model=MessageResponse)
def change_status(
    user_id: int,
    payload: StatusUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_manager),
):
    """
    Enable or disable an account. Managers cannot disable themselves.
    """
    user = service.update_status(session, current_user, user_id, payload)
    message = "User enabled" if user.status == "active" else "User disabled"
    return MessageResponse(message=message)


@router.put(
    "/users/{user_id}/nickname",
    response_model=MessageResponse,
    dependencies=[Depends(require_manager)],
)
def change_nickname(
    user_id: int,
    payload: NicknameUpdate,
    session: Session = Depends(get_session),
):
    service.update_nickname(session, user_id, payload)
    return MessageResponse(message="User nickname updated")
