from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import func
from typing import Optional, List, Tuple
import math
import logging

from inventory_api.models.product import Product
from inventory_api.models.stock import Stock
from inventory_api.models.warehouse import Warehouse
from inventory_api.schemas.stock import StockCreate, StockUpdate, RESERVED_EXCEEDS_CURRENT
from inventory_api.services import rules
from inventory_api.services.result import Result

logger = logging.getLogger(__name__)


def stored_quantity(db: Session, warehouse_id: int) -> int:
    """Sum of current quantities over every stock record of a warehouse."""
    total = (
        db.query(func.coalesce(func.sum(Stock.current_quantity), 0))
        .filter(Stock.warehouse_id == warehouse_id)
        .scalar()
    )
    return int(total)


class StockService:
    """
    Service class for warehouse stock records.

    CAPACITY HANDLING:
    ==================
    Every write that adds units to a warehouse reads the warehouse row
    with SELECT ... FOR UPDATE before summing its stock. Updates also lock
    and re-read the stock record itself first, so the old quantity used for
    the delta is the committed one. Concurrent writers
    targeting the same warehouse therefore run the capacity check one after
    another, and the check-then-insert sequence cannot be interleaved:

    1. Lock the warehouse row
    2. Sum current_quantity over its stock records
    3. Reject if total + delta > capacity
    4. Write the stock record and commit (releases the lock)

    SQLite ignores FOR UPDATE; there the check is best-effort.
    """

    def __init__(self, db: Session):
        self.db = db

    def create(self, stock_data: StockCreate) -> Result[Stock]:
        """
        Create a stock record for a (product, warehouse) pair.

        Args:
            stock_data: Stock creation data

        Returns:
            Result with the created record, or:
            - not found if the product or warehouse does not exist
            - bad request if the pair already has a record
            - bad request if the warehouse cannot take the quantity
        """
        product = self.db.query(Product).filter(Product.id == stock_data.product_id).first()
        if not product:
            return Result.not_found(f"Product with ID {stock_data.product_id} not found")

        warehouse = self._lock_warehouse(stock_data.warehouse_id)
        if not warehouse:
            return self._fail(Result.not_found(f"Warehouse with ID {stock_data.warehouse_id} not found"))

        if self._pair_exists(stock_data.product_id, stock_data.warehouse_id):
            return self._fail(Result.bad_request(
                f"Stock record for product {stock_data.product_id} "
                f"in warehouse {stock_data.warehouse_id} already exists"
            ))

        if not rules.reserved_within_current(stock_data.reserved_quantity, stock_data.current_quantity):
            return self._fail(Result.invalid("reserved_quantity", RESERVED_EXCEEDS_CURRENT))

        total = stored_quantity(self.db, warehouse.id)
        if rules.exceeds_capacity(total, stock_data.current_quantity, warehouse.capacity):
            return self._fail(self._capacity_error(warehouse, total, stock_data.current_quantity))

        stock = Stock(**stock_data.model_dump())
        self.db.add(stock)

        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"Integrity error creating stock record: {e}")
            return Result.bad_request(
                f"Stock record for product {stock_data.product_id} "
                f"in warehouse {stock_data.warehouse_id} already exists"
            )
        self.db.refresh(stock)

        logger.info(
            f"Stock #{stock.id} created: product #{stock.product_id} x{stock.current_quantity} "
            f"in warehouse #{stock.warehouse_id} ({total + stock.current_quantity}/{warehouse.capacity})"
        )
        return Result.success(stock)

    def get_by_id(self, stock_id: int) -> Result[Stock]:
        stock = self.db.query(Stock).filter(Stock.id == stock_id).first()
        if not stock:
            return Result.not_found(f"Stock record with ID {stock_id} not found")
        return Result.success(stock)

    def get_all(
        self,
        page: int = 1,
        page_size: int = 10,
        warehouse_id: int = None,
        product_id: int = None
    ) -> Tuple[List[Stock], int, int]:
        """Get paginated list of stock records, optionally filtered by warehouse or product."""
        query = self.db.query(Stock)

        if warehouse_id:
            query = query.filter(Stock.warehouse_id == warehouse_id)
        if product_id:
            query = query.filter(Stock.product_id == product_id)

        total = query.count()
        total_pages = math.ceil(total / page_size) if total > 0 else 1

        offset = (page - 1) * page_size
        stocks = query.order_by(Stock.id.desc()).offset(offset).limit(page_size).all()

        return stocks, total, total_pages

    def get_by_product(self, product_id: int) -> Result[List[Stock]]:
        """All stock records of a product, across warehouses."""
        if not self.db.query(Product.id).filter(Product.id == product_id).first():
            return Result.not_found(f"Product with ID {product_id} not found")

        stocks = (
            self.db.query(Stock)
            .filter(Stock.product_id == product_id)
            .order_by(Stock.warehouse_id)
            .all()
        )
        return Result.success(stocks)

    def update(self, stock_id: int, stock_data: StockUpdate) -> Result[Tuple[Stock, int]]:
        """
        Update a stock record with the fields present in the request.

        The capacity check depends on whether the record stays put:
        - same warehouse: only the difference between the new and old
          current quantity is added to the warehouse total
        - moved to another warehouse: the whole new quantity is checked
          against the target warehouse

        Args:
            stock_id: ID of the stock record
            stock_data: Fields to change

        Returns:
            Result with (updated record, product ID held before the update),
            or not found / bad request / validation failures
        """
        # Locked and reloaded: the old quantity is the committed one
        stock = (
            self.db.query(Stock)
            .filter(Stock.id == stock_id)
            .with_for_update()
            .populate_existing()
            .first()
        )
        if not stock:
            return self._fail(Result.not_found(f"Stock record with ID {stock_id} not found"))

        previous_product_id = stock.product_id

        changes = stock_data.model_dump(exclude_unset=True, exclude_none=True)
        product_id = changes.get("product_id", stock.product_id)
        warehouse_id = changes.get("warehouse_id", stock.warehouse_id)
        current = changes.get("current_quantity", stock.current_quantity)
        reserved = changes.get("reserved_quantity", stock.reserved_quantity)

        if product_id != stock.product_id:
            if not self.db.query(Product.id).filter(Product.id == product_id).first():
                return self._fail(Result.not_found(f"Product with ID {product_id} not found"))

        warehouse = self._lock_warehouse(warehouse_id)
        if not warehouse:
            return self._fail(Result.not_found(f"Warehouse with ID {warehouse_id} not found"))

        moved = warehouse_id != stock.warehouse_id
        if (moved or product_id != stock.product_id) and self._pair_exists(product_id, warehouse_id):
            return self._fail(Result.bad_request(
                f"Stock record for product {product_id} in warehouse {warehouse_id} already exists"
            ))

        if not rules.reserved_within_current(reserved, current):
            return self._fail(Result.invalid("reserved_quantity", RESERVED_EXCEEDS_CURRENT))

        total = stored_quantity(self.db, warehouse_id)
        delta = current if moved else current - stock.current_quantity
        if rules.exceeds_capacity(total, delta, warehouse.capacity):
            return self._fail(self._capacity_error(warehouse, total, delta))

        for field, value in changes.items():
            setattr(stock, field, value)

        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"Integrity error updating stock record #{stock_id}: {e}")
            return Result.bad_request(
                f"Stock record for product {product_id} in warehouse {warehouse_id} already exists"
            )
        self.db.refresh(stock)

        logger.info(f"Stock #{stock_id} updated")
        return Result.success((stock, previous_product_id))

    def delete(self, stock_id: int) -> Result[int]:
        """Delete a stock record. Returns the ID of the product it held."""
        stock = self.db.query(Stock).filter(Stock.id == stock_id).first()
        if not stock:
            return Result.not_found(f"Stock record with ID {stock_id} not found")

        product_id = stock.product_id
        self.db.delete(stock)
        self.db.commit()

        logger.info(f"Stock #{stock_id} deleted")
        return Result.success(product_id)

    def _lock_warehouse(self, warehouse_id: int) -> Optional[Warehouse]:
        # Pessimistic lock held until commit/rollback
        return (
            self.db.query(Warehouse)
            .filter(Warehouse.id == warehouse_id)
            .with_for_update()
            .first()
        )

    def _pair_exists(self, product_id: int, warehouse_id: int) -> bool:
        return (
            self.db.query(Stock.id)
            .filter(Stock.product_id == product_id, Stock.warehouse_id == warehouse_id)
            .first()
            is not None
        )

    def _fail(self, result: Result) -> Result:
        """Release the warehouse lock before reporting a failure."""
        self.db.rollback()
        return result

    @staticmethod
    def _capacity_error(warehouse: Warehouse, total: int, delta: int) -> Result:
        return Result.bad_request(
            f"Not enough space in warehouse '{warehouse.name}': "
            f"{total} of {warehouse.capacity} units used, {delta} more requested"
        )
