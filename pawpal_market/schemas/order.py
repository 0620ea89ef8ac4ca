"""
Pydantic schemas for order request/response validation
"""
import uuid

from pydantic import BaseModel, Field, ConfigDict
from typing import Any, Dict, List, Literal
from datetime import datetime, timezone

from pawpal_market.schemas.product import ProductSummary

OrderStatus = Literal['pending', 'confirmed', 'processing', 'shipped', 'delivered', 'cancelled']


class OrderLineRequest(BaseModel):
    """One requested line of an order"""
    product_id: int = Field(..., gt=0, description="Product ID")
    quantity: int = Field(..., ge=1, description="Quantity to order")


class OrderCreate(BaseModel):
    """Schema for placing an order"""
    items: List[OrderLineRequest] = Field(..., min_length=1, description="Products to buy")
    shipping_address: Dict[str, Any] = Field(..., min_length=1, description="Shipping address snapshot")


class OrderStatusUpdate(BaseModel):
    """Schema for updating order status"""
    status: OrderStatus = Field(..., description="Order status")


class OrderItemResponse(BaseModel):
    """Schema for an order line"""
    id: int
    product_id: int
    product_name: str
    quantity: int
    unit_price: float
    total_price: float
    product: ProductSummary
    
    model_config = ConfigDict(from_attributes=True)


class OrderResponse(BaseModel):
    """Schema for order response"""
    id: int
    user_id: int
    order_number: str
    status: OrderStatus
    subtotal: float
    total_items: int
    total_amount: float
    discount_amount: float
    shipping_amount: float
    tax_amount: float
    points_used: int
    points_earned: int
    shipping_address: Dict[str, Any]
    items: List[OrderItemResponse]
    created_at: datetime
    updated_at: datetime
    
    model_config = ConfigDict(from_attributes=True)


class OrderEvent(BaseModel):
    """Envelope of an order event published to RabbitMQ"""
    event_type: Literal['OrderCreated', 'OrderStatusChanged']
    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    event_version: str = "1.0"
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    source: str
    data: dict
