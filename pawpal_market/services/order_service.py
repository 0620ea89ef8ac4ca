"""
Order Service - settlement and order lifecycle
"""
from decimal import Decimal
from typing import Optional

import structlog
from sqlalchemy.orm import Session

from pawpal_market.models.order import Order
from pawpal_market.publishers.event_publisher import EventPublisher
from pawpal_market.repositories.cart_repository import CartRepository
from pawpal_market.repositories.order_repository import OrderRepository
from pawpal_market.schemas.common import Page
from pawpal_market.schemas.order import OrderCreate, OrderResponse
from pawpal_market.services.catalog_service import CatalogService
from pawpal_market.services.exceptions import (
    InsufficientStockError,
    InvalidStatusTransitionError,
    OrderNotFoundError,
    ProductUnavailableError
)
from pawpal_market.services.points_service import PointsService
from pawpal_market.services.pricing import (
    to_money,
    shipping_for,
    tax_for,
    reward_points_for,
    last_page
)

logger = structlog.get_logger(__name__)


# Allowed moves; the engine never advances status on its own
STATUS_TRANSITIONS = {
    'pending': ('confirmed', 'cancelled'),
    'confirmed': ('processing', 'cancelled'),
    'processing': ('shipped',),
    'shipped': ('delivered',),
    'delivered': (),
    'cancelled': (),
}


class OrderService:
    """Service layer for order settlement"""
    
    def __init__(self, db: Session, event_publisher: EventPublisher):
        self.db = db
        self.repository = OrderRepository(db)
        self.catalog = CatalogService(db)
        self.points = PointsService(db)
        self.cart = CartRepository(db)
        self.event_publisher = event_publisher
    
    def place_order(self, user_id: int, order_data: OrderCreate) -> OrderResponse:
        """
        Settle an order in a single transaction
        
        Steps:
        1. Create the pending order shell
        2. For each line: re-fetch the product, snapshot its price into an
           order item, atomically decrement stock
        3. Compute shipping, tax and total from the subtotal
        4. Credit reward points to the ledger when the total qualifies
        5. Write final amounts, drop the bought products from the cart, commit
        6. Publish OrderCreated
        
        Any failure in 1-5 rolls back everything: no order rows, no stock
        change, no ledger entry.
        
        Raises:
            ProductUnavailableError: If a product vanished
            InsufficientStockError: If stock cannot cover a line
        """
        log = logger.bind(user_id=user_id, lines=len(order_data.items))
        
        try:
            order = self.repository.create_shell(user_id, order_data.shipping_address)
            subtotal = Decimal("0")
            
            for line in order_data.items:
                product = self.catalog.repository.get_by_id(line.product_id)
                if product is None:
                    raise ProductUnavailableError("A product in your cart is no longer available.")
                if product.stock_quantity < line.quantity:
                    raise InsufficientStockError(product.name)
                
                unit_price = to_money(product.price)
                line_total = to_money(unit_price * line.quantity)
                
                self.repository.add_item(order, {
                    'product_id': product.id,
                    'product_name': product.name,
                    'quantity': line.quantity,
                    'unit_price': unit_price,
                    'total_price': line_total,
                })
                
                # Another checkout may have taken the stock since the read above
                if not self.catalog.decrement_stock(product.id, line.quantity):
                    raise InsufficientStockError(product.name)
                
                subtotal += line_total
            
            shipping = shipping_for(subtotal)
            tax = tax_for(subtotal)
            total = subtotal + shipping + tax
            points_earned = reward_points_for(total)
            
            if points_earned > 0:
                self.points.award(
                    user_id,
                    points_earned,
                    'purchase_reward',
                    f"Reward for order {order.order_number}",
                    order_id=order.id,
                    commit=False
                )
            
            order.total_amount = total
            order.shipping_amount = shipping
            order.tax_amount = tax
            order.discount_amount = to_money(0)
            order.points_earned = points_earned
            
            self.cart.remove_products(user_id, [line.product_id for line in order_data.items])
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            log.warning("order_settlement_failed", error=str(e))
            raise
        
        order = self.repository.get_by_id(order.id)
        log.info(
            "order_placed",
            order_id=order.id,
            order_number=order.order_number,
            total=str(order.total_amount),
            points_earned=order.points_earned
        )
        
        self.event_publisher.publish_order_created({
            'order_id': order.id,
            'order_number': order.order_number,
            'user_id': order.user_id,
            'items': [
                {
                    'product_id': item.product_id,
                    'product_name': item.product_name,
                    'quantity': item.quantity,
                    'unit_price': float(item.unit_price),
                    'total_price': float(item.total_price),
                }
                for item in order.items
            ],
            'total_amount': float(order.total_amount),
            'points_earned': order.points_earned,
            'status': order.status,
        })
        
        return OrderResponse.model_validate(order)
    
    def get_user_orders(self, user_id: int, page: int = 1, per_page: int = 10) -> Page[OrderResponse]:
        orders, total = self.repository.get_by_user(user_id, skip=(page - 1) * per_page, limit=per_page)
        return self._page(orders, total, page, per_page)
    
    def get_user_order(self, user_id: int, order_id: int) -> OrderResponse:
        order = self.repository.get_user_order(user_id, order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return OrderResponse.model_validate(order)
    
    def get_all_orders(self, page: int = 1, per_page: int = 50, status: Optional[str] = None) -> Page[OrderResponse]:
        orders, total = self.repository.get_all(skip=(page - 1) * per_page, limit=per_page, status=status)
        return self._page(orders, total, page, per_page)
    
    def get_order(self, order_id: int) -> OrderResponse:
        return OrderResponse.model_validate(self._get(order_id))
    
    def update_order_status(self, order_id: int, new_status: str) -> OrderResponse:
        """
        Move an order along its lifecycle
        
        Raises:
            OrderNotFoundError: If the order does not exist
            InvalidStatusTransitionError: If the move is not allowed
        """
        order = self._get(order_id)
        old_status = order.status
        if new_status not in STATUS_TRANSITIONS.get(old_status, ()):
            raise InvalidStatusTransitionError(old_status, new_status)
        
        order = self.repository.update_status(order, new_status)
        logger.info("order_status_changed", order_id=order.id, old_status=old_status, new_status=new_status)
        
        self.event_publisher.publish_order_status_changed({
            'order_id': order.id,
            'order_number': order.order_number,
            'user_id': order.user_id,
            'old_status': old_status,
            'new_status': order.status,
            'updated_at': order.updated_at.isoformat()
        })
        
        return OrderResponse.model_validate(order)
    
    def _get(self, order_id: int) -> Order:
        order = self.repository.get_by_id(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order
    
    @staticmethod
    def _page(orders, total: int, page: int, per_page: int) -> Page[OrderResponse]:
        return Page[OrderResponse](
            items=[OrderResponse.model_validate(o) for o in orders],
            total=total,
            page=page,
            per_page=per_page,
            last_page=last_page(total, per_page),
        )
