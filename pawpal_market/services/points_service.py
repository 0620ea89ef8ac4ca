"""
Points Service - append-only ledger

The balance is always derived by summing ledger entries; nothing stores a
running counter.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog
from sqlalchemy.orm import Session

from pawpal_market.config import settings
from pawpal_market.models.points import PointsLedgerEntry, TRANSACTION_TYPES
from pawpal_market.repositories.points_repository import PointsRepository, ProcessedEventRepository
from pawpal_market.schemas.common import Page
from pawpal_market.schemas.points import (
    PointsEntryResponse,
    PointsHistoryResponse,
    PointsTransactionResponse,
    GamePointsEvent
)
from pawpal_market.services.exceptions import MarketplaceError, InsufficientPointsError
from pawpal_market.services.pricing import last_page

logger = structlog.get_logger(__name__)


class PointsService:
    """Service layer for the points ledger"""
    
    def __init__(self, db: Session):
        self.db = db
        self.repository = PointsRepository(db)
        self.event_repository = ProcessedEventRepository(db)
    
    def balance(self, user_id: int) -> int:
        return self.repository.balance(user_id)
    
    @staticmethod
    def _validate(amount: int, transaction_type: str) -> None:
        if amount <= 0:
            raise MarketplaceError("Points amount must be positive")
        if transaction_type not in TRANSACTION_TYPES:
            raise MarketplaceError(f"Unknown points transaction type: {transaction_type}")
    
    def award(
        self,
        user_id: int,
        amount: int,
        transaction_type: str,
        description: str,
        order_id: Optional[int] = None,
        commit: bool = True,
    ) -> PointsLedgerEntry:
        """
        Append a positive entry
        
        Awarded points carry an expiry timestamp; pass commit=False to join
        an enclosing transaction.
        """
        self._validate(amount, transaction_type)
        entry = self.repository.append({
            'user_id': user_id,
            'points': amount,
            'type': transaction_type,
            'description': description,
            'order_id': order_id,
            'expires_at': datetime.now(timezone.utc) + timedelta(days=settings.POINTS_EXPIRY_DAYS),
        })
        if commit:
            self.db.commit()
            self.db.refresh(entry)
        logger.info("points_awarded", user_id=user_id, points=amount, type=transaction_type, order_id=order_id)
        return entry
    
    def spend(
        self,
        user_id: int,
        amount: int,
        transaction_type: str,
        description: str,
        order_id: Optional[int] = None,
        commit: bool = True,
    ) -> PointsLedgerEntry:
        """
        Append a negative entry if the balance covers it
        
        Raises:
            InsufficientPointsError: If the current balance is below amount
        """
        self._validate(amount, transaction_type)
        self.repository.lock_user_entries(user_id)
        balance = self.repository.balance(user_id)
        if balance < amount:
            if commit:
                self.db.rollback()
            logger.info("points_spend_rejected", user_id=user_id, balance=balance, requested=amount)
            raise InsufficientPointsError(balance, amount)
        
        entry = self.repository.append({
            'user_id': user_id,
            'points': -amount,
            'type': transaction_type,
            'description': description,
            'order_id': order_id,
        })
        if commit:
            self.db.commit()
            self.db.refresh(entry)
        logger.info("points_spent", user_id=user_id, points=amount, type=transaction_type)
        return entry
    
    def redeem(self, user_id: int, amount: int, item: str, description: Optional[str] = None) -> PointsTransactionResponse:
        """Spend points on a reward item"""
        text = f"Redeemed: {item}"
        if description:
            text = f"{text} ({description})"
        entry = self.spend(user_id, amount, 'redemption', text)
        return PointsTransactionResponse(
            entry=PointsEntryResponse.model_validate(entry),
            balance=self.balance(user_id)
        )
    
    def adjust(self, user_id: int, delta: int, reason: str) -> PointsTransactionResponse:
        """Privileged manual correction; debits still respect the balance"""
        if delta > 0:
            entry = self.award(user_id, delta, 'manual_adjustment', reason)
        elif delta < 0:
            entry = self.spend(user_id, -delta, 'manual_adjustment', reason)
        else:
            raise MarketplaceError("Points adjustment must not be zero")
        return PointsTransactionResponse(
            entry=PointsEntryResponse.model_validate(entry),
            balance=self.balance(user_id)
        )
    
    def history(self, user_id: int, page: int = 1, per_page: int = 20) -> PointsHistoryResponse:
        entries, total = self.repository.get_history(user_id, skip=(page - 1) * per_page, limit=per_page)
        return PointsHistoryResponse(
            current_balance=self.balance(user_id),
            history=Page[PointsEntryResponse](
                items=[PointsEntryResponse.model_validate(e) for e in entries],
                total=total,
                page=page,
                per_page=per_page,
                last_page=last_page(total, per_page),
            )
        )
    
    def process_game_points_event(self, event: dict) -> bool:
        """
        Credit a game reward from a game.points.earned event
        
        The ledger entry and the processed-event marker commit together, so a
        redelivered event is skipped.
        
        Returns:
            True if processed (or already processed), False if invalid
        """
        event_id = event.get("event_id")
        if not event_id:
            logger.warning("game_event_missing_id", keys=sorted(event))
            return False
        
        # Check idempotency
        if self.event_repository.is_processed(event_id):
            logger.info("game_event_already_processed", event_id=event_id)
            return True
        
        try:
            payload = GamePointsEvent.model_validate(event.get("data", {}))
        except ValueError as e:
            logger.warning("game_event_invalid", event_id=event_id, error=str(e))
            return False
        
        try:
            self.award(
                payload.user_id,
                payload.points,
                'game_reward',
                f"Game reward: {payload.game_type}",
                commit=False
            )
            self.event_repository.mark_processed(event_id, event.get("event_type", "GamePointsEarned"))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        
        return True
