"""Модель пользователя Telegram."""
from sqlalchemy import Column, BigInteger, String
from sqlalchemy.orm import relationship
from src.models.base import BaseModel


class User(BaseModel):
    """Пользователь бота. Владелец своих замеров."""

    __tablename__ = "users"

    telegram_id = Column(BigInteger, unique=True, nullable=False, index=True)
    # Чат, куда отправлять напоминания
    chat_id = Column(BigInteger)
    username = Column(String(50))
    first_name = Column(String(100))
    last_name = Column(String(100))

    # Relationships
    measurements = relationship("Measurement", back_populates="user", lazy="dynamic")
    settings = relationship("UserSetting", back_populates="user", lazy="dynamic")
