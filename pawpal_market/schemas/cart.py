"""
Pydantic schemas for cart request/response validation
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from datetime import datetime

from pawpal_market.schemas.product import ProductSummary


class CartItemCreate(BaseModel):
    """Schema for adding a product to the cart"""
    product_id: int = Field(..., gt=0, description="Product ID")
    quantity: int = Field(..., ge=1, description="Quantity")
    use_points: bool = Field(False, description="Apply the product's points discount")


class CartItemUpdate(BaseModel):
    """Schema for updating a cart item"""
    quantity: Optional[int] = Field(None, ge=1)
    use_points: Optional[bool] = None


class CartItemResponse(BaseModel):
    """Schema for a cart row with live product data"""
    id: int
    user_id: int
    product_id: int
    quantity: int
    use_points: bool
    product: ProductSummary
    created_at: datetime
    updated_at: datetime
    
    model_config = ConfigDict(from_attributes=True)


class CartLine(CartItemResponse):
    """Cart row with its computed price"""
    unit_price: float
    item_total: float
    discount_applied: bool


class CartResponse(BaseModel):
    """Schema for the whole cart"""
    items: List[CartLine]
    subtotal: float
    total_items: int
    discount_amount: float
    shipping_amount: float
    tax_amount: float
    total_amount: float
    user_points: int
    free_shipping: bool
