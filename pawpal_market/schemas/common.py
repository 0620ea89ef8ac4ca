"""
Response envelopes shared by every endpoint
"""
from typing import Dict, Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Successful result"""
    success: Literal[True] = True
    message: Optional[str] = None
    data: T


class ErrorResponse(BaseModel):
    """Failed result"""
    success: Literal[False] = False
    message: str
    errors: Optional[Dict[str, List[str]]] = None


class Page(BaseModel, Generic[T]):
    """One page of a paginated listing"""
    items: List[T]
    total: int
    page: int = Field(..., ge=1)
    per_page: int
    last_page: int
