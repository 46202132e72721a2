from fastapi import APIRouter, Depends, Query, Response, status
from kombu.exceptions import OperationalError
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from inventory_api.api.errors import unwrap
from inventory_api.database import get_db
from inventory_api.services.stock_service import StockService
from inventory_api.schemas.stock import (
    StockCreate,
    StockUpdate,
    StockResponse,
    StockListResponse
)
from inventory_api.schemas.error import ErrorResponse
from inventory_api.tasks.stock_tasks import check_stock_levels

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/warehouse-stocks", tags=["Warehouse stocks"])


def get_stock_service(db: Session = Depends(get_db)) -> StockService:
    return StockService(db)


def schedule_level_check(*product_ids: int) -> None:
    """Queue a stock-level check; a broker outage does not undo the write."""
    for product_id in set(product_ids):
        try:
            check_stock_levels.delay(product_id)
        except OperationalError as e:
            logger.error(f"Could not queue stock level check for product #{product_id}: {e}")


@router.post(
    "",
    response_model=StockResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a stock record",
    description="""
    Put a product into a warehouse.

    **Capacity handling:**
    The warehouse row is locked while its stored total is summed, so two
    concurrent requests cannot both squeeze into the last free units.
    The request is rejected when the total would exceed the capacity;
    filling the warehouse exactly to capacity is allowed.
    """,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def create_stock(
    stock_data: StockCreate,
    service: StockService = Depends(get_stock_service)
):
    """Create a stock record and queue a level check for its product."""
    stock = unwrap(service.create(stock_data))
    schedule_level_check(stock.product_id)
    return stock


@router.get(
    "",
    response_model=StockListResponse,
    summary="List stock records",
)
def list_stocks(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(10, ge=1, le=100, description="Items per page"),
    warehouse_id: Optional[int] = Query(None, description="Filter by warehouse"),
    product_id: Optional[int] = Query(None, description="Filter by product"),
    service: StockService = Depends(get_stock_service)
):
    """Get paginated list of stock records."""
    stocks, total, total_pages = service.get_all(page, page_size, warehouse_id, product_id)

    return StockListResponse(
        items=[StockResponse.model_validate(s) for s in stocks],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages
    )


@router.get(
    "/product/{product_id}",
    response_model=List[StockResponse],
    summary="Stock records of a product",
    description="All stock records of one product across warehouses.",
    responses={404: {"model": ErrorResponse}},
)
def get_stocks_by_product(
    product_id: int,
    service: StockService = Depends(get_stock_service)
):
    """Get every stock record of a product."""
    return unwrap(service.get_by_product(product_id))


@router.get(
    "/{stock_id}",
    response_model=StockResponse,
    summary="Get stock record by ID",
    responses={404: {"model": ErrorResponse}},
)
def get_stock(
    stock_id: int,
    service: StockService = Depends(get_stock_service)
):
    """Get a stock record by ID."""
    return unwrap(service.get_by_id(stock_id))


@router.put(
    "/{stock_id}",
    response_model=StockResponse,
    summary="Update a stock record",
    description="Only the fields present in the request are changed.",
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def update_stock(
    stock_id: int,
    stock_data: StockUpdate,
    service: StockService = Depends(get_stock_service)
):
    """Update a stock record and re-check levels of the affected products."""
    stock, previous_product_id = unwrap(service.update(stock_id, stock_data))
    schedule_level_check(previous_product_id, stock.product_id)
    return stock


@router.delete(
    "/{stock_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a stock record",
    responses={404: {"model": ErrorResponse}},
)
def delete_stock(
    stock_id: int,
    service: StockService = Depends(get_stock_service)
):
    """Delete a stock record."""
    product_id = unwrap(service.delete(stock_id))
    schedule_level_check(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
