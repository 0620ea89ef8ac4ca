"""
Cart Service - Business Logic Layer
"""
from decimal import Decimal
from typing import List

import structlog
from sqlalchemy.orm import Session

from pawpal_market.models.cart import CartItem
from pawpal_market.repositories.cart_repository import CartRepository
from pawpal_market.repositories.points_repository import PointsRepository
from pawpal_market.repositories.product_repository import ProductRepository
from pawpal_market.schemas.cart import (
    CartItemCreate,
    CartItemUpdate,
    CartItemResponse,
    CartLine,
    CartResponse
)
from pawpal_market.services.exceptions import (
    CartItemNotFoundError,
    OutOfStockError,
    ProductNotFoundError
)
from pawpal_market.services.pricing import to_money, shipping_for, tax_for

logger = structlog.get_logger(__name__)


class CartService:
    """Service layer for per-user carts"""
    
    def __init__(self, db: Session):
        self.repository = CartRepository(db)
        self.products = ProductRepository(db)
        self.points = PointsRepository(db)
    
    def get_cart(self, user_id: int) -> CartResponse:
        """
        List the cart with totals
        
        Rows whose product no longer exists are deleted first and never
        reach the totals.
        """
        removed = self.repository.purge_orphans(user_id)
        if removed:
            logger.info("cart_orphans_purged", user_id=user_id, removed=removed)
        return self.compute_totals(user_id)
    
    def compute_totals(self, user_id: int) -> CartResponse:
        """
        Price every line and sum the cart
        
        A line gets the product's points discount only when the row asks for
        it and the user's balance reaches the product's threshold.
        """
        user_points = self.points.balance(user_id)
        lines: List[CartLine] = []
        subtotal = Decimal("0")
        undiscounted = Decimal("0")
        total_items = 0
        
        for item in self.repository.get_for_user(user_id):
            product = item.product
            if product is None or product.deleted_at is not None:
                continue
            
            discount_applied = bool(item.use_points) and product.can_use_points_discount(user_points)
            exact_price = product.discounted_price(user_points) if discount_applied else Decimal(str(product.price))
            # Round the line, not the unit, so sub-cent discounts still add up
            unit_price = to_money(exact_price)
            item_total = to_money(exact_price * item.quantity)
            
            subtotal += item_total
            undiscounted += to_money(product.price) * item.quantity
            total_items += item.quantity
            lines.append(CartLine(
                **CartItemResponse.model_validate(item).model_dump(),
                unit_price=unit_price,
                item_total=item_total,
                discount_applied=discount_applied
            ))
        
        shipping = shipping_for(subtotal)
        tax = tax_for(subtotal)
        
        return CartResponse(
            items=lines,
            subtotal=to_money(subtotal),
            total_items=total_items,
            discount_amount=to_money(undiscounted - subtotal),
            shipping_amount=shipping,
            tax_amount=tax,
            total_amount=to_money(subtotal + shipping + tax),
            user_points=user_points,
            free_shipping=shipping == 0
        )
    
    def add_or_update(self, user_id: int, item_data: CartItemCreate) -> CartItemResponse:
        """
        Put a product in the cart, replacing the quantity if it is already there
        
        Raises:
            ProductNotFoundError: If the product does not exist
            OutOfStockError: If stock cannot cover the quantity
        """
        product = self.products.get_by_id(item_data.product_id)
        if product is None:
            raise ProductNotFoundError(item_data.product_id)
        if not product.is_in_stock():
            raise OutOfStockError("Product is out of stock")
        if product.stock_quantity < item_data.quantity:
            raise OutOfStockError("Not enough stock available")
        
        item = self.repository.upsert(
            user_id,
            item_data.product_id,
            item_data.quantity,
            item_data.use_points
        )
        return CartItemResponse.model_validate(item)
    
    def update_item(self, user_id: int, item_id: int, item_data: CartItemUpdate) -> CartItemResponse:
        item = self._get_item(user_id, item_id)
        
        product = self.products.get_by_id(item.product_id)
        if product is None:
            raise ProductNotFoundError(item.product_id)
        
        fields = item_data.model_dump(exclude_unset=True, exclude_none=True)
        if "quantity" in fields and product.stock_quantity < fields["quantity"]:
            raise OutOfStockError("Not enough stock available")
        
        item = self.repository.update(item, fields)
        return CartItemResponse.model_validate(item)
    
    def remove_item(self, user_id: int, item_id: int) -> None:
        self.repository.delete(self._get_item(user_id, item_id))
    
    def clear(self, user_id: int) -> int:
        return self.repository.clear(user_id)
    
    def _get_item(self, user_id: int, item_id: int) -> CartItem:
        item = self.repository.get_user_item(user_id, item_id)
        if item is None:
            raise CartItemNotFoundError(item_id)
        return item
