# teashop/routers/products.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from teashop.core.auth import require_manager
from teashop.database import get_session
from teashop.repositories.category_repo import CategoryRepository
from teashop.repositories.product_repo import ProductRepository
from teashop.schemas.common import MessageResponse
from teashop.schemas.product import (
    ProductCreate,
    ProductListResponse,
    ProductRead,
    ProductResponse,
    ProductSavedResponse,
    ProductUpdate,
)
from teashop.services.product_service import ProductService

# Included last: "/{product_id}" would otherwise shadow the literal
# paths of the other /products routers.
router = APIRouter(prefix="/products", tags=["Products"])

repo = ProductRepository()
service = ProductService(repo, CategoryRepository())


# -------- Public endpoints --------


@router.get("", response_model=ProductListResponse)
def list_products(
    session: Session = Depends(get_session),
    category: str | None = None,
    hot_only: bool = False,
):
    """
    List products, hot items first.

    - `category` filters by category name.
    - `hot_only=true` returns only promoted products.
    """
    products = service.list_products(session, category=category, hot_only=hot_only)
    return ProductListResponse(products=[ProductRead.model_validate(p) for p in products])


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: int,
    session: Session = Depends(get_session),
):
    return ProductResponse(
        product=ProductRead.model_validate(service.get_product(session, product_id))
    )


# -------- Manager endpoints --------


@router.post(
    "",
    response_model=ProductSavedResponse,
    dependencies=[Depends(require_manager)],
)
def create_product(
    payload: ProductCreate,
    session: Session = Depends(get_session),
):
    product = service.create_product(session, payload)
    return ProductSavedResponse(
        message="Product created",
        product=ProductRead.model_validate(product),
    )


@router.put(
    "/{product_id}",
    response_model=ProductSavedResponse,
    dependencies=[Depends(require_manager)],
)
def update_product(
    product_id: int,
    payload: ProductUpdate,
    session: Session = Depends(get_session),
):
    """
    Partial update; only fields present in the body change.
    """
    product = service.update_product(session, product_id, payload)
    return ProductSavedResponse(
        message="Product updated",
        product=ProductRead.model_validate(product),
    )


@router.delete(
    "/{product_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_manager)],
)
def delete_product(
    product_id: int,
    session: Session = Depends(get_session),
):
    """
    Delete a product. Existing orders keep their snapshot.
    """
    service.delete_product(session, product_id)
    return MessageResponse(message="Product deleted")
