"""
Schemas package
"""
from pawpal_market.schemas.common import ApiResponse, ErrorResponse, Page
from pawpal_market.schemas.product import (
    ProductCreate,
    ProductUpdate,
    RestockRequest,
    ProductResponse,
    ProductSummary,
    TierResponse,
    StockStatusResponse
)
from pawpal_market.schemas.cart import (
    CartItemCreate,
    CartItemUpdate,
    CartItemResponse,
    CartLine,
    CartResponse
)
from pawpal_market.schemas.order import (
    OrderLineRequest,
    OrderCreate,
    OrderStatusUpdate,
    OrderItemResponse,
    OrderResponse,
    OrderEvent
)
from pawpal_market.schemas.points import (
    PointsBalanceResponse,
    PointsEntryResponse,
    PointsHistoryResponse,
    PointsSpendRequest,
    PointsAdjustRequest,
    PointsTransactionResponse,
    GamePointsEvent
)

__all__ = [
    "ApiResponse",
    "ErrorResponse",
    "Page",
    "ProductCreate",
    "ProductUpdate",
    "RestockRequest",
    "ProductResponse",
    "ProductSummary",
    "TierResponse",
    "StockStatusResponse",
    "CartItemCreate",
    "CartItemUpdate",
    "CartItemResponse",
    "CartLine",
    "CartResponse",
    "OrderLineRequest",
    "OrderCreate",
    "OrderStatusUpdate",
    "OrderItemResponse",
    "OrderResponse",
    "OrderEvent",
    "PointsBalanceResponse",
    "PointsEntryResponse",
    "PointsHistoryResponse",
    "PointsSpendRequest",
    "PointsAdjustRequest",
    "PointsTransactionResponse",
    "GamePointsEvent"
]
