"""
Models package
"""
from pawpal_market.models.product import Product, TIERS
from pawpal_market.models.cart import CartItem
from pawpal_market.models.order import Order, OrderItem, ORDER_STATUSES
from pawpal_market.models.points import PointsLedgerEntry, ProcessedEvent, TRANSACTION_TYPES

__all__ = [
    "Product",
    "TIERS",
    "CartItem",
    "Order",
    "OrderItem",
    "ORDER_STATUSES",
    "PointsLedgerEntry",
    "ProcessedEvent",
    "TRANSACTION_TYPES",
]
