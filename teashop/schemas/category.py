# teashop/schemas/category.py
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class CategoryCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=50)
    emoji: str | None = Field(default=None, max_length=16)

    @field_validator("name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("category name cannot be empty")
        return v


class CategoryUpdate(CategoryCreate):
    """
    Rename / re-emoji a category. Name is required, emoji keeps the
    current value when omitted.
    """


class CategoryRead(SQLModel):
    id: int
    name: str
    emoji: str
    created_at: datetime


class CategoryWithCount(CategoryRead):
    model_config = ConfigDict(populate_by_name=True)

    product_count: int = Field(alias="productCount")


class CategoryListResponse(SQLModel):
    success: bool = True
    data: list[CategoryWithCount]


class CategoryCreatedResponse(SQLModel):
    success: bool = True
    message: str
    data: CategoryRead


class CategoryNamesResponse(SQLModel):
    success: bool = True
    categories: list[str]
