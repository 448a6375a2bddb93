"""Модель аукциона"""
from sqlalchemy import Column, BigInteger, String, Text, Numeric, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum
from database.connection import Base, BigIntegerPK


class AuctionStatus(str, enum.Enum):
    """Статус аукциона"""
    ACTIVE = "active"  # Принимает ставки
    ENDED = "ended"  # Завершен


class Auction(Base):
    """Модель аукциона"""
    __tablename__ = "auctions"

    id = Column(BigIntegerPK, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    start_bid = Column(Numeric(12, 2), nullable=False)  # Стартовая цена
    current_bid = Column(Numeric(12, 2), nullable=False)  # Текущая ставка, только растет
    end_time = Column(DateTime(timezone=True), nullable=False, index=True)
    status = Column(String(20), default=AuctionStatus.ACTIVE.value, nullable=False, index=True)
    created_by = Column(BigInteger, ForeignKey("users.id"), nullable=True, index=True)
    winner_id = Column(BigInteger, ForeignKey("users.id"), nullable=True, index=True)
    ended_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Связи
    creator = relationship("User", foreign_keys=[created_by])
    winner = relationship("User", foreign_keys=[winner_id])
    bids = relationship(
        "Bid",
        back_populates="auction",
        order_by="Bid.created_at.desc()",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
