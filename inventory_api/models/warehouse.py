from sqlalchemy import Column, Integer, String, DateTime, Enum, CheckConstraint
from sqlalchemy.sql import func
import enum

from inventory_api.database import Base


class WarehouseStatus(str, enum.Enum):
    """Enum for warehouse status."""
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class Warehouse(Base):
    """
    Warehouse model representing a storage site with a fixed capacity.

    Attributes:
        id: Unique identifier for the warehouse
        name: Unique warehouse name
        address: Postal address
        contact_person: Person responsible for the site
        phone: Contact phone number
        email: Contact email address
        capacity: Maximum total units the warehouse may hold
        status: ACTIVE or INACTIVE
    """
    __tablename__ = "warehouses"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False, index=True)
    address = Column(String(255), nullable=False)
    contact_person = Column(String(100), nullable=False)
    phone = Column(String(15), nullable=False)
    email = Column(String(100), nullable=False)
    capacity = Column(Integer, nullable=False)
    status = Column(Enum(WarehouseStatus), default=WarehouseStatus.ACTIVE, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint('capacity > 0', name='check_capacity_positive'),
    )

    def __repr__(self):
        return f"<Warehouse(id={self.id}, name='{self.name}', status='{self.status}')>"
