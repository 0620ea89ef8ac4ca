"""
Services package
"""
from pawpal_market.services.catalog_service import CatalogService
from pawpal_market.services.cart_service import CartService
from pawpal_market.services.order_service import OrderService
from pawpal_market.services.points_service import PointsService
from pawpal_market.services.auth_client import AuthServiceClient, CurrentUser

__all__ = [
    "CatalogService",
    "CartService",
    "OrderService",
    "PointsService",
    "AuthServiceClient",
    "CurrentUser",
]
