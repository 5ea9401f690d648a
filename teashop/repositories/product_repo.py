# teashop/repositories/product_repo.py
from sqlalchemy import func, update
from sqlmodel import Session, select

from teashop.models.product import Product


class ProductRepository:
    """
    Data access layer for Product.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    """

    def get_by_id(self, session: Session, product_id: int) -> Product | None:
        return session.get(Product, product_id)

    def list_products(
        self,
        session: Session,
        category: str | None = None,
        hot_only: bool = False,
    ) -> list[Product]:
        """
        Storefront listing: hot products first (by hot_priority),
        then newest first.
        """
        stmt = select(Product)
        if category:
            stmt = stmt.where(Product.category == category)
        if hot_only:
            stmt = stmt.where(Product.is_hot == True)  # noqa: E712
        stmt = stmt.order_by(
            Product.hot_priority.desc(),
            Product.created_at.desc(),
            Product.id.desc(),
        )
        return list(session.exec(stmt).all())

    def list_category_names(self, session: Session) -> list[str]:
        stmt = select(Product.category).distinct().order_by(Product.category)
        return list(session.exec(stmt).all())

    def count(self, session: Session) -> int:
        stmt = select(func.count()).select_from(Product)
        return int(session.exec(stmt).one() or 0)

    def create(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def update(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def delete(self, session: Session, product: Product) -> None:
        session.delete(product)
        session.commit()

    def decrement_stock(
        self,
        session: Session,
        product_id: int,
        quantity: int,
    ) -> int | None:
        """
        Atomically take `quantity` units out of stock.

        Executes a single conditional UPDATE:

            UPDATE products SET stock = stock - :q
            WHERE id = :id AND stock >= :q
            RETURNING stock

        The stock check and the write happen in one statement, so two
        concurrent purchases cannot both pass the check on a stale read.

        Does not commit; the caller commits together with the order row.

        Returns:
            The new stock value, or None if the row does not exist or has
            fewer than `quantity` units.
        """
        stmt = (
            update(Product)
            .where(Product.id == product_id, Product.stock >= quantity)
            .values(stock=Product.stock - quantity)
            .returning(Product.stock)
            .execution_options(synchronize_session=False)
        )
        return session.execute(stmt).scalar_one_or_none()

    def rename_category(self, session: Session, old_name: str, new_name: str) -> int:
        """
        Repoint products from one category name to another.
        Does not commit.
        """
        stmt = (
            update(Product)
            .where(Product.category == old_name)
            .values(category=new_name)
            .execution_options(synchronize_session=False)
        )
        return session.execute(stmt).rowcount
