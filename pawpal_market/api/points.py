"""
Points ledger API endpoints
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pawpal_market.api.deps import get_current_user
from pawpal_market.config import settings
from pawpal_market.database import get_db
from pawpal_market.services.auth_client import CurrentUser
from pawpal_market.services.points_service import PointsService
from pawpal_market.schemas.common import ApiResponse
from pawpal_market.schemas.points import (
    PointsBalanceResponse,
    PointsHistoryResponse,
    PointsSpendRequest,
    PointsTransactionResponse
)

router = APIRouter(prefix="/points", tags=["points"])


def get_points_service(db: Session = Depends(get_db)) -> PointsService:
    """Dependency to get PointsService instance"""
    return PointsService(db)


@router.get("", response_model=ApiResponse[PointsHistoryResponse], summary="Points history")
def get_points_history(
    page: int = Query(1, ge=1),
    user: CurrentUser = Depends(get_current_user),
    service: PointsService = Depends(get_points_service)
):
    """Current balance plus ledger entries, newest first"""
    return ApiResponse(data=service.history(user.id, page=page, per_page=settings.POINTS_PAGE_SIZE))


@router.get("/balance", response_model=ApiResponse[PointsBalanceResponse], summary="Points balance")
def get_points_balance(
    user: CurrentUser = Depends(get_current_user),
    service: PointsService = Depends(get_points_service)
):
    return ApiResponse(data=PointsBalanceResponse(points=service.balance(user.id)))


@router.post("/spend", response_model=ApiResponse[PointsTransactionResponse], summary="Spend points")
def spend_points(
    request: PointsSpendRequest,
    user: CurrentUser = Depends(get_current_user),
    service: PointsService = Depends(get_points_service)
):
    """
    Redeem points for a reward item
    
    Fails with "Insufficient points" when the balance is too low.
    """
    result = service.redeem(user.id, request.points, request.item, request.description)
    return ApiResponse(
        message=f"Successfully purchased {request.item} for {request.points} points",
        data=result
    )
