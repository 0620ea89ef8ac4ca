"""
Product Repository - Data Access Layer
"""
from datetime import datetime, timezone
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import asc, desc, or_

from pawpal_market.models.product import Product
from pawpal_market.schemas.product import ProductCreate, ProductUpdate


SORT_COLUMNS = {
    "created_at": Product.created_at,
    "price": Product.price,
    "points": Product.points_required,
}


class ProductRepository:
    """Repository for Product data access"""
    
    def __init__(self, db: Session):
        self.db = db
    
    def _live(self):
        return self.db.query(Product).filter(Product.deleted_at.is_(None))
    
    def search(
        self,
        tier: Optional[str] = None,
        category: Optional[str] = None,
        search: Optional[str] = None,
        featured: bool = False,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        skip: int = 0,
        limit: int = 12,
    ) -> Tuple[List[Product], int]:
        """Active products matching the filters, plus the total match count"""
        query = self._live().filter(Product.is_active.is_(True))
        
        if tier and tier != "all":
            query = query.filter(Product.tier == tier)
        if category:
            query = query.filter(Product.category == category)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Product.name.ilike(pattern), Product.description.ilike(pattern)))
        if featured:
            query = query.filter(Product.is_featured.is_(True))
        
        total = query.count()
        column = SORT_COLUMNS.get(sort_by, Product.created_at)
        direction = asc if sort_order == "asc" else desc
        products = query.order_by(direction(column), desc(Product.id)).offset(skip).limit(limit).all()
        return products, total
    
    def get_by_id(self, product_id: int) -> Optional[Product]:
        """Get product by ID, ignoring soft-deleted rows"""
        return self._live().filter(Product.id == product_id).first()
    
    def create(self, product_data: ProductCreate, created_by: Optional[int] = None) -> Product:
        """Create new product"""
        product = Product(**product_data.model_dump(), created_by=created_by)
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product
    
    def update(self, product_id: int, product_data: ProductUpdate) -> Optional[Product]:
        """Update descriptive fields; stock is never written here"""
        product = self.get_by_id(product_id)
        if not product:
            return None
        
        # Update only provided fields
        update_data = product_data.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            setattr(product, field, value)
        
        self.db.commit()
        self.db.refresh(product)
        return product
    
    def soft_delete(self, product_id: int) -> bool:
        """Mark product deleted; order history keeps referencing it"""
        product = self.get_by_id(product_id)
        if not product:
            return False
        
        product.deleted_at = datetime.now(timezone.utc)
        product.is_active = False
        self.db.commit()
        return True
    
    def decrement_stock(self, product_id: int, quantity: int) -> bool:
        """
        Atomically subtract quantity when stock covers it
        
        The sufficiency check and the subtraction are one conditional UPDATE,
        so concurrent callers can never drive stock below zero. Does not
        commit; the caller owns the transaction.
        
        Returns:
            True if exactly one row was decremented
        """
        updated = self.db.query(Product).filter(
            Product.id == product_id,
            Product.deleted_at.is_(None),
            Product.stock_quantity >= quantity
        ).update(
            {Product.stock_quantity: Product.stock_quantity - quantity},
            synchronize_session=False
        )
        return updated == 1
    
    def increment_stock(self, product_id: int, quantity: int) -> bool:
        """Atomically add quantity; does not commit"""
        updated = self.db.query(Product).filter(
            Product.id == product_id,
            Product.deleted_at.is_(None)
        ).update(
            {Product.stock_quantity: Product.stock_quantity + quantity},
            synchronize_session=False
        )
        return updated == 1
