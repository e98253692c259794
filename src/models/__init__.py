"""Модели базы данных."""
from src.models.base import BaseModel, TimestampMixin
from src.models.user import User
from src.models.measurement import Measurement
from src.models.user_setting import UserSetting

__all__ = [
    "BaseModel",
    "TimestampMixin",
    "User",
    "Measurement",
    "UserSetting",
]
