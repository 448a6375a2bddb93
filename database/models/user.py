"""Модель пользователя"""
from sqlalchemy import Column, BigInteger, String, DateTime, Boolean
from sqlalchemy.sql import func
import enum
from database.connection import Base, BigIntegerPK


class UserRole(str, enum.Enum):
    """Роль пользователя"""
    USER = "user"
    ADMIN = "admin"


class User(Base):
    """Профиль участника торгов, привязанный к аккаунту Telegram"""
    __tablename__ = "users"

    id = Column(BigIntegerPK, primary_key=True, index=True)
    telegram_id = Column(BigInteger, unique=True, nullable=False, index=True)
    username = Column(String(255), nullable=True)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    email = Column(String(320), unique=True, nullable=True)
    role = Column(String(20), default=UserRole.USER.value, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)

    @property
    def display_name(self) -> str:
        """Имя для истории ставок: email, @username или ID"""
        if self.email:
            return self.email
        if self.username:
            return f"@{self.username}"
        return f"ID: {self.telegram_id}"
