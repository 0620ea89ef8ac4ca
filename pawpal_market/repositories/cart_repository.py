"""
Cart Repository - Data Access Layer
"""
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from pawpal_market.models.cart import CartItem
from pawpal_market.models.product import Product


class CartRepository:
    """Repository for CartItem CRUD operations"""
    
    def __init__(self, db: Session):
        self.db = db
    
    def get_for_user(self, user_id: int) -> List[CartItem]:
        """All cart rows of a user, oldest first"""
        return self.db.query(CartItem).filter(
            CartItem.user_id == user_id
        ).order_by(CartItem.id).all()
    
    def get_user_item(self, user_id: int, item_id: int) -> Optional[CartItem]:
        """Cart row by ID, only if it belongs to the user"""
        return self.db.query(CartItem).filter(
            CartItem.id == item_id,
            CartItem.user_id == user_id
        ).first()
    
    def get_by_product(self, user_id: int, product_id: int) -> Optional[CartItem]:
        return self.db.query(CartItem).filter(
            CartItem.user_id == user_id,
            CartItem.product_id == product_id
        ).first()
    
    def upsert(self, user_id: int, product_id: int, quantity: int, use_points: bool) -> CartItem:
        """
        Insert or update the single row for (user, product)
        
        A concurrent insert of the same pair loses on the unique constraint
        and is retried as an update.
        """
        item = self.get_by_product(user_id, product_id)
        if item is None:
            item = CartItem(
                user_id=user_id,
                product_id=product_id,
                quantity=quantity,
                use_points=use_points
            )
            self.db.add(item)
            try:
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                item = self.get_by_product(user_id, product_id)
                item.quantity = quantity
                item.use_points = use_points
                self.db.commit()
        else:
            item.quantity = quantity
            item.use_points = use_points
            self.db.commit()
        
        self.db.refresh(item)
        return item
    
    def update(self, item: CartItem, fields: dict) -> CartItem:
        for field, value in fields.items():
            setattr(item, field, value)
        self.db.commit()
        self.db.refresh(item)
        return item
    
    def delete(self, item: CartItem) -> None:
        self.db.delete(item)
        self.db.commit()
    
    def clear(self, user_id: int) -> int:
        """Delete every row of the user, returning how many were removed"""
        removed = self.db.query(CartItem).filter(
            CartItem.user_id == user_id
        ).delete(synchronize_session=False)
        self.db.commit()
        return removed
    
    def purge_orphans(self, user_id: int) -> int:
        """
        Delete rows whose product is gone or soft-deleted
        
        Returns:
            Number of rows removed
        """
        live_products = select(Product.id).where(Product.deleted_at.is_(None))
        removed = self.db.query(CartItem).filter(
            CartItem.user_id == user_id,
            CartItem.product_id.not_in(live_products)
        ).delete(synchronize_session=False)
        self.db.commit()
        return removed
    
    def remove_products(self, user_id: int, product_ids: List[int]) -> int:
        """Delete the user's rows for the given products; does not commit"""
        return self.db.query(CartItem).filter(
            CartItem.user_id == user_id,
            CartItem.product_id.in_(product_ids)
        ).delete(synchronize_session=False)
