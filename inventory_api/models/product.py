from sqlalchemy import Column, Integer, String, Numeric, DateTime, CheckConstraint
from sqlalchemy.sql import func

from inventory_api.database import Base


class Product(Base):
    """
    Product model representing a catalogue item that can be stocked in warehouses.

    Attributes:
        id: Unique identifier for the product
        article_number: Unique 8-character article number
        name: Product name
        description: Free-text description
        category: Product category
        manufacturer: Manufacturer name
        purchase_price: Price paid to the supplier
        selling_price: Price charged to customers
        min_stock_level: Lower bound for the total quantity across warehouses
        max_stock_level: Upper bound for the total quantity across warehouses
        created_at: Timestamp when product was created
        updated_at: Timestamp when product was last updated
    """
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    article_number = Column(String(8), unique=True, nullable=False, index=True)
    name = Column(String(100), nullable=False, index=True)
    description = Column(String(1000), nullable=False)
    category = Column(String(50), nullable=False)
    manufacturer = Column(String(50), nullable=False)
    purchase_price = Column(Numeric(12, 2), nullable=False)
    selling_price = Column(Numeric(12, 2), nullable=False)
    min_stock_level = Column(Integer, nullable=False)
    max_stock_level = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint('purchase_price >= 0', name='check_purchase_price_non_negative'),
        CheckConstraint('selling_price >= 0', name='check_selling_price_non_negative'),
        CheckConstraint('min_stock_level >= 0', name='check_min_stock_level_non_negative'),
        CheckConstraint('max_stock_level > min_stock_level', name='check_stock_levels_ordered'),
    )

    def __repr__(self):
        return f"<Product(id={self.id}, article_number='{self.article_number}', name='{self.name}')>"
