from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import Optional, List, Tuple
import math
import logging

from inventory_api.models.warehouse import Warehouse, WarehouseStatus
from inventory_api.models.stock import Stock
from inventory_api.schemas.warehouse import WarehouseCreate, WarehouseUpdate, WarehouseResponse
from inventory_api.services import rules
from inventory_api.services.result import Result
from inventory_api.services.stock_service import stored_quantity
from inventory_api.utils.cache import CacheService

logger = logging.getLogger(__name__)


class WarehouseService:
    """
    Service class for Warehouse operations.

    Besides plain CRUD it guards the warehouse lifecycle:
    - names are unique
    - a warehouse holding stock cannot be deleted
    - a warehouse holding stock cannot go from ACTIVE to INACTIVE
    - capacity cannot drop below the quantity already stored
    """

    CACHE_PREFIX = "warehouse"

    def __init__(self, db: Session, cache: Optional[CacheService] = None):
        self.db = db
        self.cache = cache

    def create(self, warehouse_data: WarehouseCreate) -> Result[Warehouse]:
        """
        Create a new warehouse.

        Status defaults to ACTIVE when the request does not set it.
        """
        if self._name_taken(warehouse_data.name):
            return Result.conflict(f"Warehouse with name '{warehouse_data.name}' already exists")

        values = warehouse_data.model_dump()
        if values["status"] is None:
            values["status"] = WarehouseStatus.ACTIVE

        warehouse = Warehouse(**values)
        self.db.add(warehouse)
        if not self._commit():
            return Result.conflict(f"Warehouse with name '{warehouse_data.name}' already exists")
        self.db.refresh(warehouse)

        logger.info(f"Warehouse #{warehouse.id} '{warehouse.name}' created")
        return Result.success(warehouse)

    def get_by_id(self, warehouse_id: int) -> Result[Warehouse]:
        warehouse = self.db.query(Warehouse).filter(Warehouse.id == warehouse_id).first()
        if not warehouse:
            return Result.not_found(f"Warehouse with ID {warehouse_id} not found")
        return Result.success(warehouse)

    def get_by_id_cached(self, warehouse_id: int) -> Result[dict]:
        """Get warehouse details from cache, falling back to the database."""
        if self.cache:
            cached = self.cache.get(self.CACHE_PREFIX, str(warehouse_id))
            if cached:
                return Result.success(cached)

        result = self.get_by_id(warehouse_id)
        if not result.ok:
            return result

        warehouse_dict = WarehouseResponse.model_validate(result.value).model_dump(mode="json")
        if self.cache:
            self.cache.set(self.CACHE_PREFIX, str(warehouse_id), warehouse_dict)
        return Result.success(warehouse_dict)

    def get_all(
        self,
        page: int = 1,
        page_size: int = 10,
        search: str = None,
        status: WarehouseStatus = None
    ) -> Tuple[List[Warehouse], int, int]:
        """
        Get paginated list of warehouses.

        Args:
            page: Page number
            page_size: Items per page
            search: Optional search term for warehouse name
            status: Filter by warehouse status

        Returns:
            Tuple of (warehouses list, total count, total pages)
        """
        query = self.db.query(Warehouse)

        if search:
            query = query.filter(Warehouse.name.ilike(f"%{search}%"))
        if status:
            query = query.filter(Warehouse.status == status)

        total = query.count()
        total_pages = math.ceil(total / page_size) if total > 0 else 1

        offset = (page - 1) * page_size
        warehouses = query.order_by(Warehouse.id.desc()).offset(offset).limit(page_size).all()

        return warehouses, total, total_pages

    def update(self, warehouse_id: int, warehouse_data: WarehouseUpdate) -> Result[Warehouse]:
        """
        Replace the fields of a warehouse.

        Args:
            warehouse_id: ID of warehouse to update
            warehouse_data: New field values; a missing status keeps the current one

        Returns:
            Result with the updated warehouse, or:
            - not found if the warehouse does not exist
            - conflict if the name is taken or the status change is blocked
            - bad request if the new capacity is below the stored quantity
        """
        # Locked like stock writes: the stored total is fixed until commit
        warehouse = (
            self.db.query(Warehouse)
            .filter(Warehouse.id == warehouse_id)
            .with_for_update()
            .first()
        )

        if not warehouse:
            return Result.not_found(f"Warehouse with ID {warehouse_id} not found")

        if warehouse.name != warehouse_data.name and self._name_taken(warehouse_data.name):
            return Result.conflict(f"Warehouse with name '{warehouse_data.name}' already exists")

        new_status = warehouse_data.status or warehouse.status
        has_stock = self.has_stock(warehouse_id)

        if rules.status_change_blocked(warehouse.status, new_status, has_stock):
            return Result.conflict(
                "Cannot change warehouse status from ACTIVE to INACTIVE while it holds stock"
            )

        stored = stored_quantity(self.db, warehouse_id) if has_stock else 0
        if rules.exceeds_capacity(stored, 0, warehouse_data.capacity):
            return Result.bad_request(
                f"Capacity {warehouse_data.capacity} is below the {stored} units already stored"
            )

        values = warehouse_data.model_dump()
        values["status"] = new_status
        for field, value in values.items():
            setattr(warehouse, field, value)

        if not self._commit():
            return Result.conflict(f"Warehouse with name '{warehouse_data.name}' already exists")
        self.db.refresh(warehouse)

        self._invalidate_cache(warehouse_id)
        logger.info(f"Warehouse #{warehouse_id} '{warehouse.name}' updated")
        return Result.success(warehouse)

    def delete(self, warehouse_id: int) -> Result[None]:
        """Delete a warehouse that holds no stock."""
        warehouse = self.db.query(Warehouse).filter(Warehouse.id == warehouse_id).first()

        if not warehouse:
            return Result.not_found(f"Warehouse with ID {warehouse_id} not found")

        if self.has_stock(warehouse_id):
            return Result.bad_request("Cannot delete warehouse: it still holds stock")

        self.db.delete(warehouse)
        if not self._commit():
            return Result.bad_request("Cannot delete warehouse: it still holds stock")

        self._invalidate_cache(warehouse_id)
        logger.info(f"Warehouse #{warehouse_id} deleted")
        return Result.success()

    def has_stock(self, warehouse_id: int) -> bool:
        """True iff at least one stock record belongs to the warehouse."""
        return self.db.query(Stock).filter(Stock.warehouse_id == warehouse_id).count() > 0

    def _name_taken(self, name: str) -> bool:
        return self.db.query(Warehouse.id).filter(Warehouse.name == name).first() is not None

    def _commit(self) -> bool:
        try:
            self.db.commit()
            return True
        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"Integrity error saving warehouse: {e}")
            return False

    def _invalidate_cache(self, warehouse_id: int) -> None:
        if self.cache:
            self.cache.delete(self.CACHE_PREFIX, str(warehouse_id))
