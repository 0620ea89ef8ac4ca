"""
Repositories package
"""
from pawpal_market.repositories.product_repository import ProductRepository
from pawpal_market.repositories.cart_repository import CartRepository
from pawpal_market.repositories.order_repository import OrderRepository
from pawpal_market.repositories.points_repository import PointsRepository, ProcessedEventRepository

__all__ = [
    "ProductRepository",
    "CartRepository",
    "OrderRepository",
    "PointsRepository",
    "ProcessedEventRepository",
]
