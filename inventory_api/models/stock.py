from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    ForeignKey,
    CheckConstraint,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from inventory_api.database import Base


class Stock(Base):
    """
    Stock record: quantity of one product held in one warehouse.

    Related products and warehouses are referenced by id only and are
    loaded with explicit queries where needed.
    """
    __tablename__ = "warehouse_stocks"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    warehouse_id = Column(Integer, ForeignKey("warehouses.id"), nullable=False, index=True)
    current_quantity = Column(Integer, nullable=False, default=0)
    reserved_quantity = Column(Integer, nullable=False, default=0)
    location = Column(String(50), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint('product_id', 'warehouse_id', name='uq_stock_product_warehouse'),
        CheckConstraint('current_quantity >= 0', name='check_current_quantity_non_negative'),
        CheckConstraint('reserved_quantity >= 0', name='check_reserved_quantity_non_negative'),
        CheckConstraint('reserved_quantity <= current_quantity', name='check_reserved_within_current'),
    )

    def __repr__(self):
        return (
            f"<Stock(id={self.id}, product_id={self.product_id}, "
            f"warehouse_id={self.warehouse_id}, current_quantity={self.current_quantity})>"
        )
