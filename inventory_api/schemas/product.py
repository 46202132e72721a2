from pydantic import BaseModel, Field, ConfigDict, ValidationInfo, field_validator
from datetime import datetime


class ProductBase(BaseModel):
    """Base schema for Product with common attributes."""
    article_number: str = Field(..., min_length=8, max_length=8, description="Unique 8-character article number")
    name: str = Field(..., min_length=2, max_length=100, description="Product name")
    description: str = Field(..., min_length=2, max_length=1000, description="Product description")
    category: str = Field(..., min_length=2, max_length=50, description="Product category")
    manufacturer: str = Field(..., min_length=2, max_length=50, description="Manufacturer name")
    purchase_price: float = Field(..., ge=0, description="Purchase price (must be non-negative)")
    selling_price: float = Field(..., ge=0, description="Selling price (must be non-negative)")
    min_stock_level: int = Field(..., ge=0, description="Minimum total stock level")
    max_stock_level: int = Field(..., ge=1, description="Maximum total stock level")

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("max_stock_level")
    @classmethod
    def check_stock_levels(cls, value: int, info: ValidationInfo) -> int:
        min_level = info.data.get("min_stock_level")
        if min_level is not None and value <= min_level:
            raise ValueError("max_stock_level must be greater than min_stock_level")
        return value


class ProductCreate(ProductBase):
    """Schema for creating a new product."""
    pass


class ProductUpdate(ProductBase):
    """Schema for updating a product. Replaces every mutable field."""
    pass


class ProductResponse(ProductBase):
    """Schema for product response including all fields."""
    id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductListResponse(BaseModel):
    """Schema for paginated product list response."""
    items: list[ProductResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
