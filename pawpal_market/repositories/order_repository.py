"""
Order Repository - Data Access Layer
"""
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import desc

from pawpal_market.models.order import Order, OrderItem


class OrderRepository:
    """Repository for Order data access"""
    
    def __init__(self, db: Session):
        self.db = db
    
    def _with_items(self):
        return self.db.query(Order).options(selectinload(Order.items))
    
    def get_all(self, skip: int = 0, limit: int = 50, status: Optional[str] = None) -> Tuple[List[Order], int]:
        """All orders, newest first, optionally filtered by status"""
        query = self._with_items()
        if status:
            query = query.filter(Order.status == status)
        total = query.count()
        orders = query.order_by(desc(Order.created_at), desc(Order.id)).offset(skip).limit(limit).all()
        return orders, total
    
    def get_by_user(self, user_id: int, skip: int = 0, limit: int = 10) -> Tuple[List[Order], int]:
        """Orders of one user, newest first"""
        query = self._with_items().filter(Order.user_id == user_id)
        total = query.count()
        orders = query.order_by(desc(Order.created_at), desc(Order.id)).offset(skip).limit(limit).all()
        return orders, total
    
    def get_by_id(self, order_id: int) -> Optional[Order]:
        """Get order by ID"""
        return self._with_items().filter(Order.id == order_id).first()
    
    def get_user_order(self, user_id: int, order_id: int) -> Optional[Order]:
        """Get order by ID only if it belongs to the user"""
        return self._with_items().filter(
            Order.id == order_id,
            Order.user_id == user_id
        ).first()
    
    def create_shell(self, user_id: int, shipping_address: Dict[str, Any]) -> Order:
        """
        Insert a pending order with zero amounts
        
        Flushes to obtain the id and order number; does not commit.
        """
        order = Order(
            user_id=user_id,
            status='pending',
            total_amount=0,
            discount_amount=0,
            shipping_amount=0,
            tax_amount=0,
            points_used=0,
            points_earned=0,
            shipping_address=shipping_address
        )
        self.db.add(order)
        self.db.flush()
        return order
    
    def add_item(self, order: Order, item_data: dict) -> OrderItem:
        """Insert a line item; does not commit"""
        item = OrderItem(order_id=order.id, **item_data)
        self.db.add(item)
        self.db.flush()
        return item
    
    def update_status(self, order: Order, new_status: str) -> Order:
        """Update order status"""
        order.status = new_status
        self.db.commit()
        self.db.refresh(order)
        return order
