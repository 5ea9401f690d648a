# teashop/services/product_service.py
import logging

from sqlmodel import Session

from teashop.core.errors import BadRequestError, NotFoundError
from teashop.models.product import Product
from teashop.repositories.category_repo import CategoryRepository
from teashop.repositories.product_repo import ProductRepository
from teashop.schemas.product import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)

DEFAULT_HOT_BADGE = "🔥 Hot"


def discount_percentage(price: float, discount_price: float | None) -> int | None:
    """
    Percent off the list price, rounded to an integer.

    None when there is no (valid) discount.
    """
    if discount_price is None or discount_price >= price:
        return None
    return round((1 - discount_price / price) * 100)


def effective_price(product: Product) -> float:
    """Unit price charged at checkout: the discount price when present."""
    if product.discount_price is not None and product.discount_price < product.price:
        return product.discount_price
    return product.price


class ProductService:
    """
    Business logic for the catalog.

    Responsibilities:
      - category names must exist in the categories table
      - discount price must stay below the list price
      - discount percentage is derived, never client-supplied
      - manager-only operations (enforced at router via require_manager)
    """

    def __init__(self, repo: ProductRepository, category_repo: CategoryRepository):
        self.repo = repo
        self.category_repo = category_repo

    # ----- Helpers -----

    def _ensure_category(self, session: Session, name: str) -> None:
        if self.category_repo.get_by_name(session, name) is None:
            raise BadRequestError(f"Unknown category: {name}")

    # ----- Queries -----

    def list_products(
        self,
        session: Session,
        category: str | None = None,
        hot_only: bool = False,
    ) -> list[Product]:
        return self.repo.list_products(session, category=category, hot_only=hot_only)

    def list_category_names(self, session: Session) -> list[str]:
        return self.repo.list_category_names(session)

    def get_product(self, session: Session, product_id: int) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if not product:
            raise NotFoundError("Product not found")
        return product

    # ----- Mutations -----

    def create_product(self, session: Session, payload: ProductCreate) -> Product:
        self._ensure_category(session, payload.category)

        badge = payload.hot_badge_text
        if payload.is_hot and not badge:
            badge = DEFAULT_HOT_BADGE

        product = Product(
            name=payload.name,
            description=payload.description,
            price=payload.price,
            discount_price=payload.discount_price,
            discount_percentage=discount_percentage(payload.price, payload.discount_price),
            image_url=payload.image_url,
            category=payload.category,
            stock=payload.stock,
            has_sweetness=payload.has_sweetness,
            has_ice_level=payload.has_ice_level,
            is_hot=payload.is_hot,
            hot_priority=payload.hot_priority,
            hot_badge_text=badge,
        )
        product = self.repo.create(session, product)
        logger.info("Created product %s (%s)", product.id, product.name)
        return product

    def update_product(
        self,
        session: Session,
        product_id: int,
        payload: ProductUpdate,
    ) -> Product:
        """
        Partial update of a product.

        - Only fields present in the payload are touched.
        - An explicit null discount price removes the discount.
        - Price/discount consistency is checked on the merged result.
        """
        product = self.get_product(session, product_id)
        changes = payload.model_dump(exclude_unset=True)

        # Nullable columns that may be cleared explicitly
        nullable = {"discount_price", "description", "image_url", "hot_badge_text"}
        changes = {
            field: value
            for field, value in changes.items()
            if value is not None or field in nullable
        }

        # Validate the merged result before touching the row
        if "category" in changes:
            self._ensure_category(session, changes["category"])
        price = changes.get("price", product.price)
        discount = changes.get("discount_price", product.discount_price)
        if discount is not None and discount >= price:
            raise BadRequestError("Discount price must be lower than price")

        for field, value in changes.items():
            setattr(product, field, value)

        product.discount_percentage = discount_percentage(
            product.price, product.discount_price
        )
        if product.is_hot and not product.hot_badge_text:
            product.hot_badge_text = DEFAULT_HOT_BADGE

        return self.repo.update(session, product)

    def delete_product(self, session: Session, product_id: int) -> None:
        """
        Delete a product. Orders keep their snapshot of it.
        """
        product = self.get_product(session, product_id)
        self.repo.delete(session, product)
        logger.info("Deleted product %s", product_id)
