# teashop/models/order.py
from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field


class Order(SQLModel, table=True):
    """
    A single-product purchase.

    Snapshot semantics:
      - product_name, product_image and price are copied from the product
        at purchase time, so later catalog edits or deletes do not change
        order history.
      - product_id is a weak reference (no FK); the product may be gone.

    Orders are immutable after creation except for the is_read flag used
    by the manager's order queue.
    """

    __tablename__ = "orders"

    id: int | None = Field(default=None, primary_key=True)

    product_id: int = Field(index=True)
    product_name: str
    product_image: str | None = None

    quantity: int = Field(
        gt=0,
        description="Quantity ordered (>=1)",
    )

    # Unit price actually charged (discount price when present)
    price: float
    total_price: float

    # JSON text: {"sweetness": ..., "iceLevel": ...}
    customization: str | None = None

    customer_email: str = Field(index=True)

    status: str = Field(default="pending", index=True)

    is_read: bool = Field(default=False, index=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_type=DateTime(timezone=True),
        index=True,
        description="Creation timestamp (UTC)",
    )
