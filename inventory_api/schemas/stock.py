from pydantic import BaseModel, Field, ConfigDict, ValidationInfo, field_validator
from datetime import datetime
from typing import Optional

MAX_QUANTITY = 100000

RESERVED_EXCEEDS_CURRENT = "reserved_quantity cannot exceed current_quantity"


class StockBase(BaseModel):
    """Base schema for a warehouse stock record."""
    product_id: int = Field(..., gt=0, description="ID of the stocked product")
    warehouse_id: int = Field(..., gt=0, description="ID of the warehouse holding the stock")
    current_quantity: int = Field(..., ge=0, le=MAX_QUANTITY, description="Units currently stored")
    reserved_quantity: int = Field(..., ge=0, le=MAX_QUANTITY, description="Units earmarked for pending operations")
    location: str = Field(..., min_length=2, max_length=50, description="Location inside the warehouse")

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("reserved_quantity")
    @classmethod
    def check_reserved(cls, value: int, info: ValidationInfo) -> int:
        current = info.data.get("current_quantity")
        if current is not None and value > current:
            raise ValueError(RESERVED_EXCEEDS_CURRENT)
        return value


class StockCreate(StockBase):
    """Schema for creating a stock record."""
    pass


class StockUpdate(BaseModel):
    """Schema for updating a stock record. Omitted fields keep their current value."""
    product_id: Optional[int] = Field(None, gt=0)
    warehouse_id: Optional[int] = Field(None, gt=0)
    current_quantity: Optional[int] = Field(None, ge=0, le=MAX_QUANTITY)
    reserved_quantity: Optional[int] = Field(None, ge=0, le=MAX_QUANTITY)
    location: Optional[str] = Field(None, min_length=2, max_length=50)

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("reserved_quantity")
    @classmethod
    def check_reserved(cls, value: Optional[int], info: ValidationInfo) -> Optional[int]:
        current = info.data.get("current_quantity")
        if value is not None and current is not None and value > current:
            raise ValueError(RESERVED_EXCEEDS_CURRENT)
        return value


class StockResponse(StockBase):
    """Schema for stock record response."""
    id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class StockListResponse(BaseModel):
    """Schema for paginated stock list response."""
    items: list[StockResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
