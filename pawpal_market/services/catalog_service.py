"""
Catalog Service - Business Logic Layer
"""
from typing import List, Optional

import structlog
from sqlalchemy.orm import Session

from pawpal_market.models.product import Product, TIERS
from pawpal_market.repositories.product_repository import ProductRepository
from pawpal_market.schemas.common import Page
from pawpal_market.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    TierResponse,
    StockStatusResponse
)
from pawpal_market.services.exceptions import ProductNotFoundError
from pawpal_market.services.pricing import last_page

logger = structlog.get_logger(__name__)


class CatalogService:
    """Service layer for products and their stock"""
    
    def __init__(self, db: Session):
        self.db = db
        self.repository = ProductRepository(db)
    
    def list_products(
        self,
        page: int = 1,
        per_page: int = 12,
        tier: Optional[str] = None,
        category: Optional[str] = None,
        search: Optional[str] = None,
        featured: bool = False,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> Page[ProductResponse]:
        """Active products, filtered and paginated"""
        products, total = self.repository.search(
            tier=tier,
            category=category,
            search=search,
            featured=featured,
            sort_by=sort_by,
            sort_order=sort_order,
            skip=(page - 1) * per_page,
            limit=per_page,
        )
        return Page[ProductResponse](
            items=[ProductResponse.model_validate(p) for p in products],
            total=total,
            page=page,
            per_page=per_page,
            last_page=last_page(total, per_page),
        )
    
    def get_product(self, product_id: int) -> Product:
        """
        Get a live product
        
        Raises:
            ProductNotFoundError: If the product does not exist or was deleted
        """
        product = self.repository.get_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product
    
    def create_product(self, product_data: ProductCreate, created_by: Optional[int] = None) -> ProductResponse:
        product = self.repository.create(product_data, created_by=created_by)
        logger.info("product_created", product_id=product.id, stock=product.stock_quantity)
        return ProductResponse.model_validate(product)
    
    def update_product(self, product_id: int, product_data: ProductUpdate) -> ProductResponse:
        product = self.repository.update(product_id, product_data)
        if product is None:
            raise ProductNotFoundError(product_id)
        return ProductResponse.model_validate(product)
    
    def delete_product(self, product_id: int) -> None:
        """Soft delete; cart rows pointing at it are purged on the next cart read"""
        if not self.repository.soft_delete(product_id):
            raise ProductNotFoundError(product_id)
        logger.info("product_deleted", product_id=product_id)
    
    def restock(self, product_id: int, quantity: int) -> ProductResponse:
        """Add stock with an atomic increment"""
        if not self.repository.increment_stock(product_id, quantity):
            self.db.rollback()
            raise ProductNotFoundError(product_id)
        self.db.commit()
        product = self.get_product(product_id)
        logger.info("product_restocked", product_id=product_id, added=quantity, stock=product.stock_quantity)
        return ProductResponse.model_validate(product)
    
    def decrement_stock(self, product_id: int, quantity: int) -> bool:
        """
        Atomically take quantity out of stock
        
        Returns False, with no side effects, when stock cannot cover it.
        Runs inside the caller's transaction.
        """
        decremented = self.repository.decrement_stock(product_id, quantity)
        if not decremented:
            logger.info("stock_decrement_rejected", product_id=product_id, quantity=quantity)
        return decremented
    
    def is_in_stock(self, product_id: int) -> bool:
        return self.get_product(product_id).is_in_stock()
    
    def stock_status(self, product_id: int) -> StockStatusResponse:
        product = self.get_product(product_id)
        return StockStatusResponse(
            product_id=product.id,
            in_stock=product.is_in_stock(),
            stock_quantity=product.stock_quantity,
            stock_status=product.stock_status
        )
    
    @staticmethod
    def list_tiers() -> List[TierResponse]:
        return [TierResponse(key=key, **meta) for key, meta in TIERS.items()]
