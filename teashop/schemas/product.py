# teashop/schemas/product.py
from datetime import datetime

from pydantic import ConfigDict, field_validator, model_validator
from sqlmodel import SQLModel, Field


class ProductCreate(SQLModel):
    """
    Payload for creating a product (manager only).

    Accepts the storefront client's camelCase keys (imageUrl, hasSweetness,
    ...) as well as snake_case.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: str = Field(max_length=100)
    description: str | None = None
    price: float = Field(gt=0)
    discount_price: float | None = Field(default=None, gt=0, alias="discountPrice")
    image_url: str | None = Field(default=None, alias="imageUrl")
    category: str = Field(max_length=50)
    stock: int = Field(default=0, ge=0)
    has_sweetness: bool = Field(default=False, alias="hasSweetness")
    has_ice_level: bool = Field(default=False, alias="hasIceLevel")
    is_hot: bool = Field(default=False, alias="isHot")
    hot_priority: int = Field(default=0, ge=0, alias="hotPriority")
    hot_badge_text: str | None = Field(default=None, max_length=30, alias="hotBadgeText")

    @field_validator("name", "category")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v

    @model_validator(mode="after")
    def discount_below_price(self):
        if self.discount_price is not None and self.discount_price >= self.price:
            raise ValueError("discount price must be lower than price")
        return self


class ProductUpdate(SQLModel):
    """
    Partial update payload for products.
    All fields are optional; discountPrice=null clears a discount.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: str | None = Field(default=None, max_length=100)
    description: str | None = None
    price: float | None = Field(default=None, gt=0)
    discount_price: float | None = Field(default=None, gt=0, alias="discountPrice")
    image_url: str | None = Field(default=None, alias="imageUrl")
    category: str | None = Field(default=None, max_length=50)
    stock: int | None = Field(default=None, ge=0)
    has_sweetness: bool | None = Field(default=None, alias="hasSweetness")
    has_ice_level: bool | None = Field(default=None, alias="hasIceLevel")
    is_hot: bool | None = Field(default=None, alias="isHot")
    hot_priority: int | None = Field(default=None, ge=0, alias="hotPriority")
    hot_badge_text: str | None = Field(default=None, max_length=30, alias="hotBadgeText")

    @field_validator("name", "category")
    @classmethod
    def not_empty(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class ProductRead(SQLModel):
    """
    Product representation for clients (snake_case, as stored).
    """

    id: int
    name: str
    description: str | None
    price: float
    discount_price: float | None
    discount_percentage: int | None
    image_url: str | None
    category: str
    stock: int
    has_sweetness: bool
    has_ice_level: bool
    is_hot: bool
    hot_priority: int
    hot_badge_text: str | None
    created_at: datetime


class ProductListResponse(SQLModel):
    success: bool = True
    products: list[ProductRead]


class ProductResponse(SQLModel):
    success: bool = True
    product: ProductRead


class ProductSavedResponse(SQLModel):
    success: bool = True
    message: str
    product: ProductRead
