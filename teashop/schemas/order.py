# teashop/schemas/order.py
import json
from datetime import datetime
from typing import Any, Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

# Values offered by the storefront's customization dialog
Sweetness = Literal["0", "3", "5", "7", "10"]
IceLevel = Literal["none", "less", "normal"]


class Customization(SQLModel):
    """
    Per-order drink options. Stored on the order as JSON:
        {"sweetness": "5", "iceLevel": "less"}
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    sweetness: Sweetness | None = None
    ice_level: IceLevel | None = Field(default=None, alias="iceLevel")

    @field_validator("sweetness", mode="before")
    @classmethod
    def sweetness_as_str(cls, v: Any) -> Any:
        # The client may send the level as a number.
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    def is_empty(self) -> bool:
        return self.sweetness is None and self.ice_level is None

    def to_json(self) -> str:
        return json.dumps(self.model_dump(by_alias=True))


class PurchaseRequest(SQLModel):
    """
    Storefront purchase payload: {productId, quantity, customization}.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    product_id: int = Field(alias="productId")
    quantity: int = Field(default=1, ge=1)
    customization: Customization | None = None


class PurchaseResult(SQLModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: int = Field(alias="productId")
    order_id: int = Field(alias="orderId")
    quantity: int
    total_price: float = Field(alias="totalPrice")
    remaining_stock: int = Field(alias="remainingStock")
    customization: dict[str, Any] | None = None


class PurchaseResponse(SQLModel):
    success: bool = True
    message: str
    data: PurchaseResult


class OrderRead(SQLModel):
    """
    Order as shown in the manager queue and purchase history.
    customization is decoded from its stored JSON text.
    """

    id: int
    product_id: int
    product_name: str
    product_image: str | None
    quantity: int
    price: float
    total_price: float
    customization: dict[str, Any] | None = None
    customer_email: str
    status: str
    is_read: bool
    created_at: datetime

    @field_validator("customization", mode="before")
    @classmethod
    def decode_customization(cls, v: Any) -> Any:
        if isinstance(v, str):
            return json.loads(v) if v else None
        return v


class OrderListResponse(SQLModel):
    success: bool = True
    orders: list[OrderRead]


class UnreadCountResponse(SQLModel):
    success: bool = True
    count: int


class MarkAllReadResponse(SQLModel):
    success: bool = True
    message: str
    updated: int
