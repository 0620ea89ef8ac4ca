"""
Product API endpoints
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Literal, Optional

from pawpal_market.api.deps import get_current_user, require_admin
from pawpal_market.config import settings
from pawpal_market.database import get_db
from pawpal_market.services.auth_client import CurrentUser
from pawpal_market.services.catalog_service import CatalogService
from pawpal_market.schemas.common import ApiResponse, Page
from pawpal_market.schemas.product import (
    ProductCreate,
    ProductUpdate,
    RestockRequest,
    ProductResponse,
    TierResponse,
    StockStatusResponse
)

router = APIRouter(prefix="/products", tags=["products"])


def get_catalog_service(db: Session = Depends(get_db)) -> CatalogService:
    """Dependency to get CatalogService instance"""
    return CatalogService(db)


@router.get("", response_model=ApiResponse[Page[ProductResponse]], summary="List products")
def list_products(
    page: int = Query(1, ge=1),
    tier: Optional[str] = Query(None, description="automated, intelligent, luxury or all"),
    category: Optional[str] = None,
    search: Optional[str] = Query(None, description="Matches name or description"),
    featured: bool = False,
    sort_by: Literal['created_at', 'price', 'points'] = 'created_at',
    sort_order: Literal['asc', 'desc'] = 'desc',
    user: CurrentUser = Depends(get_current_user),
    service: CatalogService = Depends(get_catalog_service)
):
    """
    Active products, filtered and paginated
    
    - **tier**: Restrict to one tier
    - **search**: Case-insensitive match on name or description
    - **sort_by**: created_at, price or points
    """
    return ApiResponse(data=service.list_products(
        page=page,
        per_page=settings.PRODUCT_PAGE_SIZE,
        tier=tier,
        category=category,
        search=search,
        featured=featured,
        sort_by=sort_by,
        sort_order=sort_order
    ))


@router.get("/tiers", response_model=ApiResponse[List[TierResponse]], summary="List product tiers")
def list_tiers(user: CurrentUser = Depends(get_current_user)):
    return ApiResponse(data=CatalogService.list_tiers())


@router.get("/{product_id}", response_model=ApiResponse[ProductResponse], summary="Get product by ID")
def get_product(
    product_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: CatalogService = Depends(get_catalog_service)
):
    return ApiResponse(data=ProductResponse.model_validate(service.get_product(product_id)))


@router.get("/{product_id}/stock", response_model=ApiResponse[StockStatusResponse], summary="Stock status")
def get_stock_status(
    product_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: CatalogService = Depends(get_catalog_service)
):
    return ApiResponse(data=service.stock_status(product_id))


@router.post(
    "",
    response_model=ApiResponse[ProductResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create product"
)
def create_product(
    product_data: ProductCreate,
    admin: CurrentUser = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service)
):
    """
    Create a new product (admin only)
    
    - **name**, **price**, **tier**, **stock_quantity** are required
    - **points_required** / **discount_percentage**: points discount rule
    """
    return ApiResponse(
        message="Product created successfully",
        data=service.create_product(product_data, created_by=admin.id)
    )


@router.put("/{product_id}", response_model=ApiResponse[ProductResponse], summary="Update product")
def update_product(
    product_id: int,
    product_data: ProductUpdate,
    admin: CurrentUser = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service)
):
    """
    Update descriptive fields of a product (admin only)
    
    Stock cannot be set here; use the restock endpoint.
    """
    return ApiResponse(
        message="Product updated successfully",
        data=service.update_product(product_id, product_data)
    )


@router.post("/{product_id}/restock", response_model=ApiResponse[ProductResponse], summary="Restock product")
def restock_product(
    product_id: int,
    restock: RestockRequest,
    admin: CurrentUser = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service)
):
    return ApiResponse(
        message="Product restocked successfully",
        data=service.restock(product_id, restock.quantity)
    )


@router.delete("/{product_id}", response_model=ApiResponse[None], summary="Delete product")
def delete_product(
    product_id: int,
    admin: CurrentUser = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service)
):
    """Soft delete a product (admin only); past orders keep referencing it"""
    service.delete_product(product_id)
    return ApiResponse(message="Product deleted successfully", data=None)
