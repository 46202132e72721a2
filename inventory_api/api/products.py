from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from inventory_api.api.errors import unwrap
from inventory_api.database import get_db
from inventory_api.services.product_service import ProductService
from inventory_api.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductListResponse
)
from inventory_api.schemas.error import ErrorResponse
from inventory_api.utils.cache import CacheService, get_cache

router = APIRouter(prefix="/products", tags=["Products"])


def get_product_service(
    db: Session = Depends(get_db),
    cache: Optional[CacheService] = Depends(get_cache),
) -> ProductService:
    return ProductService(db, cache)


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new product",
    responses={409: {"model": ErrorResponse}},
)
def create_product(
    product_data: ProductCreate,
    service: ProductService = Depends(get_product_service)
):
    """
    Create a new product.

    - **article_number**: exactly 8 characters, unique
    - **min_stock_level** / **max_stock_level**: max must be greater than min
    """
    return unwrap(service.create(product_data))


@router.get(
    "",
    response_model=ProductListResponse,
    summary="List all products",
    description="Get a paginated list of products with optional search by name or article number."
)
def list_products(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(10, ge=1, le=100, description="Items per page"),
    search: Optional[str] = Query(None, description="Search by name or article number"),
    service: ProductService = Depends(get_product_service)
):
    """Get paginated list of products."""
    products, total, total_pages = service.get_all(page, page_size, search)

    return ProductListResponse(
        items=[ProductResponse.model_validate(p) for p in products],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages
    )


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Get product by ID",
    description="Results are cached in Redis.",
    responses={404: {"model": ErrorResponse}},
)
def get_product(
    product_id: int,
    service: ProductService = Depends(get_product_service)
):
    """Get product by ID."""
    return unwrap(service.get_by_id_cached(product_id))


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Update a product",
    description="Replace every field of a product. The article number must stay unique.",
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def update_product(
    product_id: int,
    product_data: ProductUpdate,
    service: ProductService = Depends(get_product_service)
):
    """Update an existing product."""
    return unwrap(service.update(product_id, product_data))


@router.delete(
    "/{product_id}",
    summary="Delete a product",
    description="Products still stocked in any warehouse cannot be deleted.",
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def delete_product(
    product_id: int,
    service: ProductService = Depends(get_product_service)
):
    """Delete a product that is not stocked anywhere."""
    unwrap(service.delete(product_id))
    return {"message": f"Product with ID {product_id} deleted"}
