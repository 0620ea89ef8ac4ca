"""
SQLAlchemy points ledger and consumer bookkeeping models
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.sql import func

from pawpal_market.database import Base


TRANSACTION_TYPES = (
    'purchase_reward',
    'purchase_discount',
    'bonus',
    'referral',
    'redemption',
    'expired',
    'game_reward',
    'manual_adjustment',
)


class PointsLedgerEntry(Base):
    """
    Append-only points transaction.

    A user's balance is the sum of ``points`` over all of their rows. Rows are
    never updated or deleted.
    """
    
    __tablename__ = "user_points"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)
    points = Column(Integer, nullable=False)
    type = Column(String(30), nullable=False, index=True)
    description = Column(Text, nullable=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=True, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    
    __table_args__ = (
        CheckConstraint('points <> 0', name='check_points_non_zero'),
        CheckConstraint(
            "type IN ('purchase_reward', 'purchase_discount', 'bonus', 'referral', "
            "'redemption', 'expired', 'game_reward', 'manual_adjustment')",
            name='check_points_type_valid'
        ),
    )
    
    def __repr__(self):
        return f"<PointsLedgerEntry(user_id={self.user_id}, points={self.points}, type='{self.type}')>"


class ProcessedEvent(Base):
    """Table to track processed RabbitMQ events for idempotency"""
    
    __tablename__ = "processed_events"
    
    event_id = Column(String(100), primary_key=True, unique=True, nullable=False)
    event_type = Column(String(100), nullable=False)
    processed_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    
    def __repr__(self):
        return f"<ProcessedEvent(event_id='{self.event_id}', event_type='{self.event_type}')>"
