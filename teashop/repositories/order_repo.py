# teashop/repositories/order_repo.py
from datetime import datetime

from sqlalchemy import func, update
from sqlmodel import Session, select

from teashop.models.order import Order


class OrderRepository:
    """
    Data access layer for orders.

    NOTE:
      - create() does not commit; a purchase writes stock and the order
        in one transaction and the service commits.
    """

    def get_by_id(self, session: Session, order_id: int) -> Order | None:
        return session.get(Order, order_id)

    def list_all(self, session: Session) -> list[Order]:
        stmt = select(Order).order_by(Order.created_at.desc(), Order.id.desc())
        return list(session.exec(stmt).all())

    def list_for_email(
        self,
        session: Session,
        email: str,
        limit: int | None = None,
    ) -> list[Order]:
        stmt = (
            select(Order)
            .where(Order.customer_email == email)
            .order_by(Order.created_at.desc(), Order.id.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(session.exec(stmt).all())

    def create(self, session: Session, order: Order) -> Order:
        """
        Insert an Order without committing, but ensure id is populated.
        """
        session.add(order)
        session.flush()
        session.refresh(order)
        return order

    # ---- Aggregates ----

    def stats_for_email(
        self,
        session: Session,
        email: str,
    ) -> tuple[int, float, datetime | None]:
        """
        (order_count, total_spent, last_order_at) over all orders for email.
        """
        stmt = select(
            func.count(Order.id),
            func.coalesce(func.sum(Order.total_price), 0.0),
            func.max(Order.created_at),
        ).where(Order.customer_email == email)
        count, total, last_at = session.exec(stmt).one()
        return int(count or 0), float(total or 0.0), last_at

    # ---- Read / unread queue ----

    def count_unread(self, session: Session) -> int:
        stmt = select(func.count()).select_from(Order).where(Order.is_read == False)  # noqa: E712
        return int(session.exec(stmt).one() or 0)

    def mark_read(self, session: Session, order: Order) -> Order:
        order.is_read = True
        session.add(order)
        session.commit()
        session.refresh(order)
        return order

    def mark_all_read(self, session: Session) -> int:
        stmt = (
            update(Order)
            .where(Order.is_read == False)  # noqa: E712
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        changed = session.execute(stmt).rowcount
        session.commit()
        return changed
