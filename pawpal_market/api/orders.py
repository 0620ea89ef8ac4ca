"""
Order API endpoints
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pawpal_market.api.deps import get_current_user, get_event_publisher
from pawpal_market.config import settings
from pawpal_market.database import get_db
from pawpal_market.publishers.event_publisher import EventPublisher
from pawpal_market.services.auth_client import CurrentUser
from pawpal_market.services.order_service import OrderService
from pawpal_market.schemas.common import ApiResponse, Page
from pawpal_market.schemas.order import OrderCreate, OrderResponse

router = APIRouter(prefix="/orders", tags=["orders"])


def get_order_service(
    db: Session = Depends(get_db),
    event_publisher: EventPublisher = Depends(get_event_publisher)
) -> OrderService:
    """Dependency to get OrderService instance"""
    return OrderService(db, event_publisher)


@router.post("", response_model=ApiResponse[OrderResponse], summary="Place order")
def place_order(
    order_data: OrderCreate,
    user: CurrentUser = Depends(get_current_user),
    service: OrderService = Depends(get_order_service)
):
    """
    Place an order
    
    Process (one transaction):
    1. Re-check every product and its stock
    2. Snapshot prices into order items and decrement stock
    3. Compute shipping, tax and total
    4. Credit reward points when the total reaches the threshold
    5. Publish OrderCreated to RabbitMQ
    
    - **items**: list of {product_id, quantity} (at least one)
    - **shipping_address**: address object stored with the order
    """
    return ApiResponse(
        message="Order placed successfully!",
        data=service.place_order(user.id, order_data)
    )


@router.get("", response_model=ApiResponse[Page[OrderResponse]], summary="List my orders")
def list_my_orders(
    page: int = Query(1, ge=1),
    user: CurrentUser = Depends(get_current_user),
    service: OrderService = Depends(get_order_service)
):
    return ApiResponse(data=service.get_user_orders(user.id, page=page, per_page=settings.ORDER_PAGE_SIZE))


@router.get("/{order_id}", response_model=ApiResponse[OrderResponse], summary="Get my order")
def get_my_order(
    order_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: OrderService = Depends(get_order_service)
):
    return ApiResponse(data=service.get_user_order(user.id, order_id))
