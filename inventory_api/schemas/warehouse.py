from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator
from datetime import datetime
from typing import Optional

from inventory_api.models.warehouse import WarehouseStatus

PHONE_PATTERN = r"^\+?[0-9]{10,14}$"
EMAIL_MAX_LENGTH = 100


class WarehouseBase(BaseModel):
    """Base schema for Warehouse with common attributes."""
    name: str = Field(..., min_length=2, max_length=100, description="Unique warehouse name")
    address: str = Field(..., min_length=10, max_length=255, description="Postal address")
    contact_person: str = Field(..., min_length=2, max_length=100, description="Contact person")
    phone: str = Field(..., pattern=PHONE_PATTERN, description="Phone number, 10-14 digits with optional leading +")
    email: EmailStr = Field(..., description="Contact email")
    capacity: int = Field(..., ge=1, le=100000, description="Maximum total units stored")

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("email")
    @classmethod
    def check_email_length(cls, value: str) -> str:
        if len(value) > EMAIL_MAX_LENGTH:
            raise ValueError(f"email must be at most {EMAIL_MAX_LENGTH} characters")
        return value


class WarehouseCreate(WarehouseBase):
    """Schema for creating a warehouse. Status defaults to ACTIVE."""
    status: Optional[WarehouseStatus] = Field(None, description="Warehouse status")


class WarehouseUpdate(WarehouseBase):
    """Schema for updating a warehouse. Omitting status keeps the current one."""
    status: Optional[WarehouseStatus] = Field(None, description="Warehouse status")


class WarehouseResponse(WarehouseBase):
    """Schema for warehouse response including all fields."""
    id: int
    status: WarehouseStatus
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class WarehouseListResponse(BaseModel):
    """Schema for paginated warehouse list response."""
    items: list[WarehouseResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
