# teashop/services/category_service.py
from sqlmodel import Session

from teashop.core.errors import ConflictError, NotFoundError
from teashop.models.product import Category
from teashop.repositories.category_repo import CategoryRepository
from teashop.repositories.product_repo import ProductRepository
from teashop.schemas.category import CategoryCreate, CategoryUpdate, CategoryWithCount

DEFAULT_EMOJI = "📦"


class CategoryService:
    """
    Business logic for categories.

    Products reference categories by name, so:
      - renaming a category renames it on its products too
      - a category still used by products cannot be deleted
    """

    def __init__(self, repo: CategoryRepository, product_repo: ProductRepository):
        self.repo = repo
        self.product_repo = product_repo

    def list_with_counts(self, session: Session) -> list[CategoryWithCount]:
        counts = self.repo.usage_counts(session)
        return [
            CategoryWithCount(
                id=c.id,
                name=c.name,
                emoji=c.emoji,
                created_at=c.created_at,
                product_count=counts.get(c.name, 0),
            )
            for c in self.repo.list_all(session)
        ]

    def get_category(self, session: Session, category_id: int) -> Category:
        category = self.repo.get_by_id(session, category_id)
        if not category:
            raise NotFoundError("Category not found")
        return category

    def create_category(self, session: Session, payload: CategoryCreate) -> Category:
        if self.repo.get_by_name(session, payload.name) is not None:
            raise ConflictError("Category name already exists")

        category = Category(name=payload.name, emoji=payload.emoji or DEFAULT_EMOJI)
        return self.repo.create(session, category)

    def update_category(
        self,
        session: Session,
        category_id: int,
        payload: CategoryUpdate,
    ) -> Category:
        category = self.get_category(session, category_id)

        if payload.name != category.name:
            clash = self.repo.get_by_name(session, payload.name)
            if clash is not None:
                raise ConflictError("Category name already exists")
            self.product_repo.rename_category(session, category.name, payload.name)
            category.name = payload.name

        if payload.emoji:
            category.emoji = payload.emoji

        # Product rename and category rename commit together
        session.add(category)
        session.commit()
        session.refresh(category)
        return category

    def delete_category(self, session: Session, category_id: int) -> None:
        category = self.get_category(session, category_id)
        in_use = self.repo.usage_count(session, category.name)
        if in_use > 0:
            raise ConflictError(
                f"Cannot delete category: {in_use} product(s) still use it"
            )
        self.repo.delete(session, category)
