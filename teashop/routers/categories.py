# teashop/routers/categories.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from teashop.core.auth import require_manager
from teashop.database import get_session
from teashop.repositories.category_repo import CategoryRepository
from teashop.repositories.product_repo import ProductRepository
from teashop.schemas.category import (
    CategoryCreate,
    CategoryCreatedResponse,
    CategoryListResponse,
    CategoryNamesResponse,
    CategoryRead,
    CategoryUpdate,
)
from teashop.schemas.common import MessageResponse
from teashop.services.category_service import CategoryService
from teashop.services.product_service import ProductService

router = APIRouter(prefix="/products/categories", tags=["Categories"])

category_repo = CategoryRepository()
product_repo = ProductRepository()
service = CategoryService(category_repo, product_repo)
product_service = ProductService(product_repo, category_repo)


# -------- Public endpoints --------


@router.get("", response_model=CategoryListResponse)
def list_categories(session: Session = Depends(get_session)):
    """
    All categories with the number of products in each.
    """
    return CategoryListResponse(data=service.list_with_counts(session))


@router.get("/list", response_model=CategoryNamesResponse)
def list_category_names(session: Session = Depends(get_session)):
    """
    Distinct category names currently used by products.
    """
    return CategoryNamesResponse(categories=product_service.list_category_names(session))


# -------- Manager endpoints --------


@router.post(
    "",
    response_model=CategoryCreatedResponse,
    dependencies=[Depends(require_manager)],
)
def create_category(
    payload: CategoryCreate,
    session: Session = Depends(get_session),
):
    category = service.create_category(session, payload)
    return CategoryCreatedResponse(
        message="Category created",
        data=CategoryRead.model_validate(category),
    )


@router.put(
    "/{category_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_manager)],
)
def update_category(
    category_id: int,
    payload: CategoryUpdate,
    session: Session = Depends(get_session),
):
    """
    Rename a category; products using the old name follow.
    """
    service.update_category(session, category_id, payload)
    return MessageResponse(message="Category updated")


@router.delete(
    "/{category_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_manager)],
)
def delete_category(
    category_id: int,
    session: Session = Depends(get_session),
):
    """
    Delete an unused category (409 while products still reference it).
    """
    service.delete_category(session, category_id)
    return MessageResponse(message="Category deleted")
