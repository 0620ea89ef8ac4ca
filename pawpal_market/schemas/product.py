"""
Pydantic schemas for product request/response validation
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import List, Literal, Optional
from datetime import datetime

Tier = Literal['automated', 'intelligent', 'luxury']


class ProductBase(BaseModel):
    """Base Product schema with common fields"""
    name: str = Field(..., min_length=1, max_length=255, description="Product name")
    description: Optional[str] = Field(None, description="Product description")
    price: float = Field(..., ge=0, description="Unit price")
    original_price: Optional[float] = Field(None, ge=0, description="Price before markdown")
    tier: Tier = Field(..., description="Product tier")
    category: Optional[str] = Field(None, max_length=100, description="Product category")
    images: List[str] = Field(default_factory=list, description="Image URLs")
    features: List[str] = Field(default_factory=list, description="Feature bullet points")
    points_required: int = Field(0, ge=0, description="Points balance needed for the discount")
    discount_percentage: float = Field(0, ge=0, le=100, description="Discount applied with points")
    is_featured: bool = False


class ProductCreate(ProductBase):
    """Schema for creating a new product"""
    stock_quantity: int = Field(..., ge=0, description="Initial stock quantity")


class ProductUpdate(BaseModel):
    """Schema for updating a product (all fields optional, stock excluded)"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    original_price: Optional[float] = Field(None, ge=0)
    tier: Optional[Tier] = None
    category: Optional[str] = Field(None, max_length=100)
    images: Optional[List[str]] = None
    features: Optional[List[str]] = None
    points_required: Optional[int] = Field(None, ge=0)
    discount_percentage: Optional[float] = Field(None, ge=0, le=100)
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None
    
    model_config = ConfigDict(extra="forbid")


class RestockRequest(BaseModel):
    """Schema for adding stock to a product"""
    quantity: int = Field(..., gt=0, description="Units to add")


class ProductResponse(ProductBase):
    """Schema for product response"""
    id: int
    stock_quantity: int
    is_active: bool
    stock_status: str
    tier_label: str
    tier_color: str
    tier_icon: str
    created_at: datetime
    updated_at: datetime
    
    model_config = ConfigDict(from_attributes=True)


class ProductSummary(BaseModel):
    """Product fields joined into cart and order lines"""
    id: int
    name: str
    price: float
    original_price: Optional[float] = None
    tier: str
    category: Optional[str] = None
    images: List[str] = []
    points_required: int
    discount_percentage: float
    stock_quantity: int
    
    model_config = ConfigDict(from_attributes=True)


class TierResponse(BaseModel):
    """Tier display metadata"""
    key: str
    label: str
    color: str
    icon: str
    description: str


class StockStatusResponse(BaseModel):
    """Schema for stock availability"""
    product_id: int
    in_stock: bool
    stock_quantity: int
    stock_status: Literal['out_of_stock', 'low_stock', 'in_stock']
