# teashop/services/seed_service.py
import logging

from sqlmodel import Session

from teashop.core.config import get_settings
from teashop.models.product import Category, Product
from teashop.models.user import User
from teashop.repositories.category_repo import CategoryRepository
from teashop.repositories.product_repo import ProductRepository
from teashop.repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)

settings = get_settings()

DEFAULT_CATEGORIES: list[tuple[str, str]] = [
    ("Lemonade", "🍋"),
    ("Juice", "🍊"),
    ("Milk", "🥛"),
    ("Tea", "🍵"),
    ("Coffee", "☕"),
    ("Snacks", "🍪"),
]

# Categories whose products get sweetness / ice options
DRINK_CATEGORIES = {"Lemonade", "Juice", "Milk", "Tea", "Coffee"}

SAMPLE_PRODUCTS: list[dict] = [
    {
        "name": "Honey Lemonade",
        "description": "Natural honey with fresh lemon, sweet and refreshing",
        "price": 18.0,
        "image_url": "🍯",
        "category": "Lemonade",
        "stock": 35,
        "is_hot": True,
        "hot_priority": 100,
        "hot_badge_text": "🔥 Best seller",
    },
    {
        "name": "Lemon Juice",
        "description": "100% pressed lemon, rich in vitamin C",
        "price": 15.5,
        "image_url": "🍋",
        "category": "Lemonade",
        "stock": 40,
    },
    {
        "name": "Apple Juice",
        "description": "Freshly pressed apples",
        "price": 12.0,
        "image_url": "🍎",
        "category": "Juice",
        "stock": 45,
    },
    {
        "name": "Orange Juice",
        "description": "Fresh squeezed oranges",
        "price": 14.0,
        "image_url": "🍊",
        "category": "Juice",
        "stock": 38,
    },
    {
        "name": "Milk",
        "description": "Fresh whole milk",
        "price": 8.5,
        "image_url": "🥛",
        "category": "Milk",
        "stock": 60,
    },
    {
        "name": "Chocolate Milk",
        "description": "Rich chocolate blended with milk",
        "price": 11.0,
        "image_url": "🍫",
        "category": "Milk",
        "stock": 30,
    },
    {
        "name": "Double Chocolate",
        "description": "Twice the chocolate",
        "price": 16.5,
        "image_url": "🍩",
        "category": "Milk",
        "stock": 25,
        "is_hot": True,
        "hot_priority": 90,
        "hot_badge_text": "⭐ Fan favourite",
    },
]


class SeedService:
    """
    First-boot data. Each step only fills an empty table, so restarting
    the server never overwrites real data.
    """

    def __init__(
        self,
        user_repo: UserRepository,
        category_repo: CategoryRepository,
        product_repo: ProductRepository,
    ):
        self.user_repo = user_repo
        self.category_repo = category_repo
        self.product_repo = product_repo

    def seed(self, session: Session) -> None:
        self.ensure_guest_user(session)
        self.seed_categories(session)
        self.seed_products(session)

    def ensure_guest_user(self, session: Session) -> None:
        """Account that anonymous purchases are attributed to."""
        if self.user_repo.get_by_email(session, settings.GUEST_EMAIL) is None:
            self.user_repo.create(
                session,
                User(email=settings.GUEST_EMAIL.lower(), username="Guest"),
            )
            logger.info("Created guest account %s", settings.GUEST_EMAIL)

    def seed_categories(self, session: Session) -> None:
        if self.category_repo.list_all(session):
            return
        for name, emoji in DEFAULT_CATEGORIES:
            session.add(Category(name=name, emoji=emoji))
        session.commit()
        logger.info("Seeded %d default categories", len(DEFAULT_CATEGORIES))

    def seed_products(self, session: Session) -> None:
        if self.product_repo.count(session) > 0:
            return
        for data in SAMPLE_PRODUCTS:
            is_drink = data["category"] in DRINK_CATEGORIES
            session.add(
                Product(
                    **data,
                    has_sweetness=is_drink,
                    has_ice_level=is_drink,
                )
            )
        session.commit()
        logger.info("Seeded %d sample products", len(SAMPLE_PRODUCTS))
