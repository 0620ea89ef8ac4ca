"""
Admin API endpoints for orders and points
"""
from fastapi import APIRouter, Depends, Query
from typing import Optional

from pawpal_market.api.deps import require_admin
from pawpal_market.api.orders import get_order_service
from pawpal_market.api.points import get_points_service
from pawpal_market.config import settings
from pawpal_market.services.order_service import OrderService
from pawpal_market.services.points_service import PointsService
from pawpal_market.schemas.common import ApiResponse, Page
from pawpal_market.schemas.order import OrderResponse, OrderStatus, OrderStatusUpdate
from pawpal_market.schemas.points import PointsAdjustRequest, PointsTransactionResponse

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/orders", response_model=ApiResponse[Page[OrderResponse]], summary="List all orders")
def list_all_orders(
    page: int = Query(1, ge=1),
    status: Optional[OrderStatus] = Query(None, description="Filter by status"),
    service: OrderService = Depends(get_order_service)
):
    return ApiResponse(data=service.get_all_orders(
        page=page,
        per_page=settings.ADMIN_ORDER_PAGE_SIZE,
        status=status
    ))


@router.get("/orders/{order_id}", response_model=ApiResponse[OrderResponse], summary="Get any order")
def get_any_order(
    order_id: int,
    service: OrderService = Depends(get_order_service)
):
    return ApiResponse(data=service.get_order(order_id))


@router.post("/orders/{order_id}/status", response_model=ApiResponse[OrderResponse], summary="Update order status")
def update_order_status(
    order_id: int,
    status_data: OrderStatusUpdate,
    service: OrderService = Depends(get_order_service)
):
    """
    Update order status
    
    Allowed: pending -> confirmed -> processing -> shipped -> delivered,
    and pending or confirmed -> cancelled.
    """
    return ApiResponse(
        message="Order status updated successfully!",
        data=service.update_order_status(order_id, status_data.status)
    )


@router.post(
    "/points/{user_id}/adjust",
    response_model=ApiResponse[PointsTransactionResponse],
    summary="Adjust a user's points"
)
def adjust_points(
    user_id: int,
    request: PointsAdjustRequest,
    service: PointsService = Depends(get_points_service)
):
    return ApiResponse(
        message="Points adjusted successfully",
        data=service.adjust(user_id, request.points, request.reason)
    )
