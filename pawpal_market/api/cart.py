"""
Cart API endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pawpal_market.api.deps import get_current_user
from pawpal_market.database import get_db
from pawpal_market.services.auth_client import CurrentUser
from pawpal_market.services.cart_service import CartService
from pawpal_market.schemas.common import ApiResponse
from pawpal_market.schemas.cart import (
    CartItemCreate,
    CartItemUpdate,
    CartItemResponse,
    CartResponse
)

router = APIRouter(prefix="/cart", tags=["cart"])


def get_cart_service(db: Session = Depends(get_db)) -> CartService:
    """Dependency to get CartService instance"""
    return CartService(db)


@router.get("", response_model=ApiResponse[CartResponse], summary="Get cart")
def get_cart(
    user: CurrentUser = Depends(get_current_user),
    service: CartService = Depends(get_cart_service)
):
    """
    The user's cart with live product data and totals
    
    Items whose product was removed from the catalog are dropped.
    """
    return ApiResponse(data=service.get_cart(user.id))


@router.post("", response_model=ApiResponse[CartItemResponse], summary="Add to cart")
def add_to_cart(
    item_data: CartItemCreate,
    user: CurrentUser = Depends(get_current_user),
    service: CartService = Depends(get_cart_service)
):
    """
    Add a product, or replace its quantity if already in the cart
    
    - **product_id**: Product ID (required)
    - **quantity**: Quantity (required, at least 1, at most current stock)
    - **use_points**: Apply the product's points discount when eligible
    """
    return ApiResponse(
        message="Item added to cart successfully",
        data=service.add_or_update(user.id, item_data)
    )


@router.put("/{item_id}", response_model=ApiResponse[CartItemResponse], summary="Update cart item")
def update_cart_item(
    item_id: int,
    item_data: CartItemUpdate,
    user: CurrentUser = Depends(get_current_user),
    service: CartService = Depends(get_cart_service)
):
    return ApiResponse(
        message="Cart item updated successfully",
        data=service.update_item(user.id, item_id, item_data)
    )


@router.delete("/{item_id}", response_model=ApiResponse[None], summary="Remove cart item")
def remove_cart_item(
    item_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: CartService = Depends(get_cart_service)
):
    service.remove_item(user.id, item_id)
    return ApiResponse(message="Item removed from cart successfully", data=None)


@router.delete("", response_model=ApiResponse[None], summary="Clear cart")
def clear_cart(
    user: CurrentUser = Depends(get_current_user),
    service: CartService = Depends(get_cart_service)
):
    service.clear(user.id)
    return ApiResponse(message="Cart cleared successfully", data=None)
