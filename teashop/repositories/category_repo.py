# teashop/repositories/category_repo.py
from sqlalchemy import func
from sqlmodel import Session, select

from teashop.models.product import Category, Product


class CategoryRepository:

    def get_by_id(self, session: Session, category_id: int) -> Category | None:
        return session.get(Category, category_id)

    def get_by_name(self, session: Session, name: str) -> Category | None:
        stmt = select(Category).where(Category.name == name)
        return session.exec(stmt).first()

    def list_all(self, session: Session) -> list[Category]:
        stmt = select(Category).order_by(Category.created_at, Category.id)
        return list(session.exec(stmt).all())

    def usage_counts(self, session: Session) -> dict[str, int]:
        """Number of products per category name."""
        stmt = select(Product.category, func.count(Product.id)).group_by(
            Product.category
        )
        return {name: int(count) for name, count in session.exec(stmt).all()}

    def usage_count(self, session: Session, name: str) -> int:
        stmt = (
            select(func.count())
            .select_from(Product)
            .where(Product.category == name)
        )
        return int(session.exec(stmt).one() or 0)

    # CRUD
    def create(self, session: Session, category: Category) -> Category:
        session.add(category)
        session.commit()
        session.refresh(category)
        return category

    def delete(self, session: Session, category: Category) -> None:
        session.delete(category)
        session.commit()
