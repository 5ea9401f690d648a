# teashop/models/product.py
from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    """
    Catalog entry (a drink or snack).

    - category references Category.name by value (no FK); services
      validate it against the categories table.
    - has_sweetness / has_ice_level gate which customization keys a
      purchase may carry.
    - is_hot / hot_priority / hot_badge_text drive storefront ordering
      and badge display.
    """

    __tablename__ = "products"

    id: int | None = Field(default=None, primary_key=True)

    name: str = Field(
        max_length=100,
        index=True,
        description="Display name",
    )

    description: str | None = Field(
        default=None,
        description="Optional long description",
    )

    price: float = Field(
        gt=0,
        description="Unit list price",
    )

    discount_price: float | None = Field(
        default=None,
        description="Sale price; charged instead of price when set",
    )

    discount_percentage: int | None = Field(
        default=None,
        description="Derived from price and discount_price",
    )

    image_url: str | None = Field(
        default=None,
        description="Emoji or image URL",
    )

    category: str = Field(
        max_length=50,
        index=True,
        description="Category name",
    )

    stock: int = Field(
        default=0,
        ge=0,
        description="Units currently in stock",
    )

    has_sweetness: bool = Field(default=False)
    has_ice_level: bool = Field(default=False)

    is_hot: bool = Field(default=False, index=True)
    hot_priority: int = Field(
        default=0,
        index=True,
        description="Higher sorts first on the storefront",
    )
    hot_badge_text: str | None = Field(default=None, max_length=30)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_type=DateTime(timezone=True),
        description="Creation timestamp (UTC)",
    )


class Category(SQLModel, table=True):
    __tablename__ = "categories"

    id: int | None = Field(default=None, primary_key=True)

    name: str = Field(
        max_length=50,
        unique=True,
        index=True,
    )

    emoji: str = Field(default="📦", max_length=16)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_type=DateTime(timezone=True),
    )
