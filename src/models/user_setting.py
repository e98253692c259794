"""Модель настроек пользователя (ключ-значение)."""
from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from src.models.base import BaseModel


class UserSetting(BaseModel):
    """Строковая настройка пользователя.

    Ключи: notifications-enabled ("true"/"false"), reminder-time ("HH:MM").
    """

    __tablename__ = "user_settings"
    __table_args__ = (UniqueConstraint("user_id", "key", name="uq_user_settings_user_key"),)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    key = Column(String(50), nullable=False)
    value = Column(String(100), nullable=False)

    # Relationship
    user = relationship("User", back_populates="settings")
