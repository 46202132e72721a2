from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from inventory_api.api.errors import unwrap
from inventory_api.database import get_db
from inventory_api.models.warehouse import WarehouseStatus
from inventory_api.services.warehouse_service import WarehouseService
from inventory_api.schemas.warehouse import (
    WarehouseCreate,
    WarehouseUpdate,
    WarehouseResponse,
    WarehouseListResponse
)
from inventory_api.schemas.error import ErrorResponse
from inventory_api.utils.cache import CacheService, get_cache

router = APIRouter(prefix="/warehouses", tags=["Warehouses"])


def get_warehouse_service(
    db: Session = Depends(get_db),
    cache: Optional[CacheService] = Depends(get_cache),
) -> WarehouseService:
    return WarehouseService(db, cache)


@router.post(
    "",
    response_model=WarehouseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new warehouse",
    responses={409: {"model": ErrorResponse}},
)
def create_warehouse(
    warehouse_data: WarehouseCreate,
    service: WarehouseService = Depends(get_warehouse_service)
):
    """
    Create a new warehouse.

    - **name**: unique
    - **capacity**: 1 to 100000 units
    - **status**: ACTIVE (default) or INACTIVE
    """
    return unwrap(service.create(warehouse_data))


@router.get(
    "",
    response_model=WarehouseListResponse,
    summary="List all warehouses",
)
def list_warehouses(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(10, ge=1, le=100, description="Items per page"),
    search: Optional[str] = Query(None, description="Search by warehouse name"),
    status: Optional[WarehouseStatus] = Query(None, description="Filter by warehouse status"),
    service: WarehouseService = Depends(get_warehouse_service)
):
    """Get paginated list of warehouses."""
    warehouses, total, total_pages = service.get_all(page, page_size, search, status)

    return WarehouseListResponse(
        items=[WarehouseResponse.model_validate(w) for w in warehouses],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages
    )


@router.get(
    "/{warehouse_id}",
    response_model=WarehouseResponse,
    summary="Get warehouse by ID",
    responses={404: {"model": ErrorResponse}},
)
def get_warehouse(
    warehouse_id: int,
    service: WarehouseService = Depends(get_warehouse_service)
):
    """Get warehouse by ID."""
    return unwrap(service.get_by_id_cached(warehouse_id))


@router.put(
    "/{warehouse_id}",
    response_model=WarehouseResponse,
    summary="Update a warehouse",
    description="""
    Replace the fields of a warehouse.

    A warehouse that holds stock cannot be switched from ACTIVE to INACTIVE
    (409), and its capacity cannot be set below the quantity already stored (400).
    """,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
def update_warehouse(
    warehouse_id: int,
    warehouse_data: WarehouseUpdate,
    service: WarehouseService = Depends(get_warehouse_service)
):
    """Update an existing warehouse."""
    return unwrap(service.update(warehouse_id, warehouse_data))


@router.delete(
    "/{warehouse_id}",
    summary="Delete a warehouse",
    description="Warehouses holding stock cannot be deleted.",
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def delete_warehouse(
    warehouse_id: int,
    service: WarehouseService = Depends(get_warehouse_service)
):
    """Delete a warehouse that holds no stock."""
    unwrap(service.delete(warehouse_id))
    return {"message": f"Warehouse with ID {warehouse_id} deleted"}
