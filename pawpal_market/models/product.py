"""
SQLAlchemy Product model
"""
from decimal import Decimal

from sqlalchemy import (
    Column, Integer, String, Numeric, DateTime, Text, Boolean, JSON, CheckConstraint
)
from sqlalchemy.sql import func

from pawpal_market.config import settings
from pawpal_market.database import Base


TIERS = {
    "automated": {
        "label": "Automated PawPal",
        "color": "#4ECDC4",
        "icon": "schedule",
        "description": "Basic feeding & hydration",
    },
    "intelligent": {
        "label": "Intelligent PawPal",
        "color": "#45B7D1",
        "icon": "psychology",
        "description": "AI-powered with interactive features",
    },
    "luxury": {
        "label": "Luxury PawPal",
        "color": "#C066E3",
        "icon": "diamond",
        "description": "Premium customizable experience",
    },
}


class Product(Base):
    """Product database model"""
    
    __tablename__ = "products"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    original_price = Column(Numeric(10, 2), nullable=True)
    stock_quantity = Column(Integer, nullable=False, default=0)
    tier = Column(String(20), nullable=False, index=True)
    category = Column(String(100), nullable=True, index=True)
    images = Column(JSON, nullable=False, default=list)
    features = Column(JSON, nullable=False, default=list)
    points_required = Column(Integer, nullable=False, default=0)
    discount_percentage = Column(Numeric(5, 2), nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    is_featured = Column(Boolean, nullable=False, default=False)
    created_by = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)
    
    # Constraints
    __table_args__ = (
        CheckConstraint('price >= 0', name='check_price_non_negative'),
        CheckConstraint('stock_quantity >= 0', name='check_stock_non_negative'),
        CheckConstraint('points_required >= 0', name='check_points_required_non_negative'),
        CheckConstraint(
            'discount_percentage >= 0 AND discount_percentage <= 100',
            name='check_discount_range'
        ),
        CheckConstraint("tier IN ('automated', 'intelligent', 'luxury')", name='check_tier_valid'),
    )
    
    def can_use_points_discount(self, user_points: int) -> bool:
        return self.points_required > 0 and user_points >= self.points_required
    
    def discounted_price(self, user_points: int) -> Decimal:
        """Unit price after the points discount, if the balance qualifies"""
        price = Decimal(str(self.price))
        if self.can_use_points_discount(user_points):
            return price * (1 - Decimal(str(self.discount_percentage)) / 100)
        return price
    
    def is_in_stock(self) -> bool:
        return self.stock_quantity > 0
    
    @property
    def stock_status(self) -> str:
        if self.stock_quantity <= 0:
            return "out_of_stock"
        elif self.stock_quantity <= settings.LOW_STOCK_THRESHOLD:
            return "low_stock"
        return "in_stock"
    
    @property
    def tier_color(self) -> str:
        return TIERS.get(self.tier, {}).get("color", "#257D8C")
    
    @property
    def tier_icon(self) -> str:
        return TIERS.get(self.tier, {}).get("icon", "pets")
    
    @property
    def tier_label(self) -> str:
        return TIERS.get(self.tier, {}).get("label", (self.tier or "").capitalize())
    
    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', price={self.price}, stock={self.stock_quantity})>"
