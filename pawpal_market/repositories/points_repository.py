"""
Points Repository - Data Access Layer
"""
from typing import List, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import desc, func

from pawpal_market.models.points import PointsLedgerEntry, ProcessedEvent


class PointsRepository:
    """Repository for the append-only points ledger"""
    
    def __init__(self, db: Session):
        self.db = db
    
    def balance(self, user_id: int) -> int:
        """Sum of every ledger entry of the user"""
        total = self.db.query(
            func.coalesce(func.sum(PointsLedgerEntry.points), 0)
        ).filter(PointsLedgerEntry.user_id == user_id).scalar()
        return int(total)
    
    def lock_user_entries(self, user_id: int) -> None:
        """
        Row-lock the user's entries until the transaction ends
        
        Concurrent spends for the same user serialize here, so the balance
        read afterwards already includes the other spend.
        """
        self.db.query(PointsLedgerEntry.id).filter(
            PointsLedgerEntry.user_id == user_id
        ).with_for_update().all()
    
    def append(self, entry_data: dict) -> PointsLedgerEntry:
        """Insert a ledger entry; does not commit"""
        entry = PointsLedgerEntry(**entry_data)
        self.db.add(entry)
        self.db.flush()
        return entry
    
    def get_history(self, user_id: int, skip: int = 0, limit: int = 20) -> Tuple[List[PointsLedgerEntry], int]:
        """Entries of the user, newest first"""
        query = self.db.query(PointsLedgerEntry).filter(PointsLedgerEntry.user_id == user_id)
        total = query.count()
        entries = query.order_by(
            desc(PointsLedgerEntry.created_at), desc(PointsLedgerEntry.id)
        ).offset(skip).limit(limit).all()
        return entries, total


class ProcessedEventRepository:
    """Repository for tracking processed events (idempotency)"""
    
    def __init__(self, db: Session):
        self.db = db
    
    def is_processed(self, event_id: str) -> bool:
        """Check if event was already processed"""
        return self.db.query(ProcessedEvent).filter(
            ProcessedEvent.event_id == event_id
        ).first() is not None
    
    def mark_processed(self, event_id: str, event_type: str) -> ProcessedEvent:
        """Mark event as processed; does not commit"""
        processed_event = ProcessedEvent(
            event_id=event_id,
            event_type=event_type
        )
        self.db.add(processed_event)
        self.db.flush()
        return processed_event
