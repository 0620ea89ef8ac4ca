"""
SQLAlchemy Order and OrderItem models
"""
import uuid

from sqlalchemy import (
    Column, Integer, String, Numeric, DateTime, JSON, ForeignKey, CheckConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from pawpal_market.database import Base


ORDER_STATUSES = ('pending', 'confirmed', 'processing', 'shipped', 'delivered', 'cancelled')


def generate_order_number() -> str:
    """Human readable order number, e.g. PW3F9A0C12B7"""
    return "PW" + uuid.uuid4().hex[:10].upper()


class Order(Base):
    """Order database model"""
    
    __tablename__ = "orders"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)
    order_number = Column(String(20), nullable=False, unique=True, default=generate_order_number)
    status = Column(String(20), nullable=False, default='pending', index=True)
    total_amount = Column(Numeric(10, 2), nullable=False, default=0)
    discount_amount = Column(Numeric(10, 2), nullable=False, default=0)
    shipping_amount = Column(Numeric(10, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(10, 2), nullable=False, default=0)
    points_used = Column(Integer, nullable=False, default=0)
    points_earned = Column(Integer, nullable=False, default=0)
    shipping_address = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    
    items = relationship("OrderItem", back_populates="order", order_by="OrderItem.id")
    
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'processing', 'shipped', 'delivered', 'cancelled')",
            name='check_order_status_valid'
        ),
    )
    
    @property
    def subtotal(self):
        return sum((item.total_price for item in self.items), 0)
    
    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)
    
    def __repr__(self):
        return f"<Order(id={self.id}, order_number='{self.order_number}', status='{self.status}')>"


class OrderItem(Base):
    """Order line item; unit price is a snapshot taken at purchase time"""
    
    __tablename__ = "order_items"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    product_name = Column(String(255), nullable=False)  # Denormalized for history
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    total_price = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    
    order = relationship("Order", back_populates="items")
    product = relationship("Product", lazy="joined")
    
    __table_args__ = (
        CheckConstraint('quantity > 0', name='check_order_item_quantity_positive'),
    )
    
    def __repr__(self):
        return f"<OrderItem(order_id={self.order_id}, product_id={self.product_id}, quantity={self.quantity})>"
