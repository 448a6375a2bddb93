"""Модель ставки"""
from sqlalchemy import Column, BigInteger, Numeric, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from database.connection import Base, BigIntegerPK


class Bid(Base):
    """Ставка на аукционе. После создания не изменяется"""
    __tablename__ = "bids"

    id = Column(BigIntegerPK, primary_key=True, index=True)
    auction_id = Column(
        BigInteger,
        ForeignKey("auctions.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    user_id = Column(BigInteger, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)  # Сумма ставки
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    # Связи
    auction = relationship("Auction", back_populates="bids")
    user = relationship("User", backref="bids")
