"""
Stock consistency and warehouse state rules.

Pure functions over values already fetched from the database. Services
call them before writing; they never touch a session themselves.
"""
from inventory_api.models.warehouse import WarehouseStatus

LEVEL_LOW = "low"
LEVEL_HIGH = "high"
LEVEL_OK = "ok"


def stock_levels_valid(min_level: int, max_level: int) -> bool:
    """A product's maximum stock level must be strictly above its minimum."""
    return max_level > min_level


def reserved_within_current(reserved: int, current: int) -> bool:
    return reserved <= current


def exceeds_capacity(current_total: int, delta: int, capacity: int) -> bool:
    """
    Return True when applying `delta` units would overfill the warehouse.

    True means the write is blocked. A resulting total equal to the
    capacity is allowed.

    Args:
        current_total: Units currently stored in the warehouse
        delta: Units being added (negative when a quantity shrinks)
        capacity: Warehouse capacity

    Returns:
        True if the new total would be above capacity
    """
    return current_total + delta > capacity


def status_change_blocked(
    old_status: WarehouseStatus,
    new_status: WarehouseStatus,
    has_stock: bool,
) -> bool:
    """ACTIVE -> INACTIVE is the only guarded transition, blocked while stock exists."""
    return (
        has_stock
        and old_status == WarehouseStatus.ACTIVE
        and new_status == WarehouseStatus.INACTIVE
    )


def classify_stock_level(total: int, min_level: int, max_level: int) -> str:
    """Compare a product's total stored quantity with its configured bounds."""
    if total < min_level:
        return LEVEL_LOW
    if total > max_level:
        return LEVEL_HIGH
    return LEVEL_OK
