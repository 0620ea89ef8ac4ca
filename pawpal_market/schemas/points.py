"""
Pydantic schemas for points ledger request/response validation
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime

from pawpal_market.schemas.common import Page


class PointsBalanceResponse(BaseModel):
    points: int


class PointsEntryResponse(BaseModel):
    """Schema for a ledger entry"""
    id: int
    user_id: int
    points: int
    type: str
    description: Optional[str]
    order_id: Optional[int]
    expires_at: Optional[datetime]
    created_at: datetime
    
    model_config = ConfigDict(from_attributes=True)


class PointsHistoryResponse(BaseModel):
    current_balance: int
    history: Page[PointsEntryResponse]


class PointsSpendRequest(BaseModel):
    """Schema for redeeming points"""
    points: int = Field(..., ge=1, description="Points to spend")
    item: str = Field(..., min_length=1, max_length=100, description="What the points buy")
    description: Optional[str] = Field(None, max_length=255)


class PointsAdjustRequest(BaseModel):
    """Schema for a privileged manual adjustment"""
    points: int = Field(..., description="Signed point delta")
    reason: str = Field("Manual adjustment", max_length=255)


class PointsTransactionResponse(BaseModel):
    """Result of an award, spend or adjustment"""
    entry: PointsEntryResponse
    balance: int


class GamePointsEvent(BaseModel):
    """Payload of a game.points.earned event"""
    user_id: int = Field(..., gt=0)
    points: int = Field(..., gt=0)
    game_type: str = Field(..., min_length=1, max_length=50)
    session_id: Optional[int] = None
