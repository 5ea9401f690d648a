# teashop/routers/orders.py
from fastapi import APIRouter, BackgroundTasks, Depends
from sqlmodel import Session

from teashop.core.auth import get_active_user_or_guest, require_manager
from teashop.core.config import get_settings
from teashop.database import get_session
from teashop.models.user import User
from teashop.repositories.order_repo import OrderRepository
from teashop.repositories.product_repo import ProductRepository
from teashop.repositories.user_repo import UserRepository
from teashop.schemas.common import MessageResponse
from teashop.schemas.order import (
    MarkAllReadResponse,
    OrderListResponse,
    PurchaseRequest,
    PurchaseResponse,
    UnreadCountResponse,
)
from teashop.services.order_service import OrderService
from teashop.services.user_service import UserService

router = APIRouter(prefix="/products", tags=["Orders"])

settings = get_settings()

order_repo = OrderRepository()
service = OrderService(order_repo, ProductRepository())
user_service = UserService(UserRepository(), order_repo)


# -------- Storefront --------


@router.post("/purchase", response_model=PurchaseResponse)
def purchase(
    payload: PurchaseRequest,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    current_user: User | None = Depends(get_active_user_or_guest),
):
    """
    Buy a product.

    Auth:
      - Optional. Anonymous purchases are recorded under the guest email.

    The buyer's cached order stats are refreshed after the response.
    """
    customer_email = current_user.email if current_user else settings.GUEST_EMAIL
    result = service.purchase(session, payload, current_user)
    background_tasks.add_task(
        user_service.refresh_stats_in_background,
        session.get_bind(),
        customer_email,
    )
    return PurchaseResponse(message="Purchase successful", data=result)


# -------- Manager order queue --------


@router.get(
    "/orders",
    response_model=OrderListResponse,
    dependencies=[Depends(require_manager)],
)
def list_orders(session: Session = Depends(get_session)):
    """
    All orders, newest first.
    """
    return OrderListResponse(orders=service.list_all_orders(session))


@router.get(
    "/orders/unread-count",
    response_model=UnreadCountResponse,
    dependencies=[Depends(require_manager)],
)
def unread_count(session: Session = Depends(get_session)):
    """
    Number of orders not yet seen by a manager (polled by the client).
    """
    return UnreadCountResponse(count=service.unread_count(session))


@router.post(
    "/orders/mark-all-read",
    response_model=MarkAllReadResponse,
    dependencies=[Depends(require_manager)],
)
def mark_all_read(session: Session = Depends(get_session)):
    updated = service.mark_all_read(session)
    return MarkAllReadResponse(message="All orders marked as read", updated=updated)


@router.post(
    "/orders/{order_id}/mark-read",
    response_model=MessageResponse,
    dependencies=[Depends(require_manager)],
)
def mark_read(
    order_id: int,
    session: Session = Depends(get_session),
):
    service.mark_read(session, order_id)
    return MessageResponse(message="Order marked as read")
