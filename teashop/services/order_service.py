# teashop/services/order_service.py
import json
import logging

from sqlmodel import Session

from teashop.core.config import get_settings
from teashop.core.errors import InsufficientStockError, NotFoundError
from teashop.models.order import Order
from teashop.models.user import User
from teashop.repositories.order_repo import OrderRepository
from teashop.repositories.product_repo import ProductRepository
from teashop.schemas.order import Customization, OrderRead, PurchaseRequest, PurchaseResult
from teashop.schemas.user import PurchaseStats
from teashop.services.product_service import effective_price

logger = logging.getLogger(__name__)

settings = get_settings()

# Customer-facing purchase history size
PURCHASE_HISTORY_LIMIT = 50


class OrderService:
    """
    Business logic for purchases and the manager's order queue.

    Responsibilities:
      - Validate purchase quantity/customization against the product
      - Take stock and record the order in one transaction
      - Price orders from the product at purchase time (discount aware)
      - Read/unread triage for managers
    """

    def __init__(self, order_repo: OrderRepository, product_repo: ProductRepository):
        self.order_repo = order_repo
        self.product_repo = product_repo

    # -------- Purchase --------

    def purchase(
        self,
        session: Session,
        payload: PurchaseRequest,
        customer: User | None,
    ) -> PurchaseResult:
        """
        Buy `quantity` units of one product.

        Steps:
          1. Load product; 404 if missing.
          2. Drop customization keys the product does not offer.
          3. Price from the product snapshot (discount price if set).
          4. Conditionally decrement stock (single UPDATE ... WHERE
             stock >= quantity); no row updated => insufficient stock.
          5. Insert order snapshot.
          6. Commit 4 + 5 together.

        Anonymous shoppers are recorded under GUEST_EMAIL.

        Raises:
            NotFoundError(404), InsufficientStockError(409)
        """
        product = self.product_repo.get_by_id(session, payload.product_id)
        if not product:
            raise NotFoundError("Product not found")

        customization = payload.customization
        if customization is not None:
            # The storefront always sends both keys, even for hidden options
            customization = Customization(
                sweetness=customization.sweetness if product.has_sweetness else None,
                ice_level=customization.ice_level if product.has_ice_level else None,
            )
            if customization.is_empty():
                customization = None

        # Snapshot before the UPDATE; the row may be expired afterwards
        product_id = product.id
        product_name = product.name
        product_image = product.image_url
        unit_price = effective_price(product)
        total_price = round(unit_price * payload.quantity, 2)

        remaining = self.product_repo.decrement_stock(
            session, product_id, payload.quantity
        )
        if remaining is None:
            session.rollback()
            raise InsufficientStockError(
                f"Insufficient stock (requested {payload.quantity})"
            )

        customer_email = customer.email if customer else settings.GUEST_EMAIL
        order = Order(
            product_id=product_id,
            product_name=product_name,
            product_image=product_image,
            quantity=payload.quantity,
            price=unit_price,
            total_price=total_price,
            customization=customization.to_json() if customization else None,
            customer_email=customer_email,
        )
        order = self.order_repo.create(session, order)
        session.commit()

        logger.info(
            "Order %s: %s x%d for %s, stock left %d",
            order.id,
            product_name,
            payload.quantity,
            customer_email,
            remaining,
        )

        return PurchaseResult(
            product_id=product_id,
            order_id=order.id,
            quantity=payload.quantity,
            total_price=total_price,
            remaining_stock=remaining,
            customization=json.loads(order.customization) if order.customization else None,
        )

    # -------- Customer views --------

    def purchase_history(
        self,
        session: Session,
        email: str,
    ) -> tuple[PurchaseStats, list[OrderRead]]:
        """
        Lifetime totals (computed live, not from the cached user stats)
        plus the latest orders.
        """
        count, total, _ = self.order_repo.stats_for_email(session, email)
        orders = self.order_repo.list_for_email(
            session, email, limit=PURCHASE_HISTORY_LIMIT
        )
        stats = PurchaseStats(order_count=count, total_amount=total)
        return stats, [OrderRead.model_validate(o) for o in orders]

    # -------- Manager queue --------

    def list_all_orders(self, session: Session) -> list[OrderRead]:
        return [OrderRead.model_validate(o) for o in self.order_repo.list_all(session)]

    def unread_count(self, session: Session) -> int:
        return self.order_repo.count_unread(session)

    def mark_read(self, session: Session, order_id: int) -> Order:
        order = self.order_repo.get_by_id(session, order_id)
        if not order:
            raise NotFoundError("Order not found")
        if order.is_read:
            return order
        return self.order_repo.mark_read(session, order)

    def mark_all_read(self, session: Session) -> int:
        return self.order_repo.mark_all_read(session)
