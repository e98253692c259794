"""Модель замера тела (одна строка = один параметр)."""
from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from src.models.base import BaseModel


class Measurement(BaseModel):
    """Плоская запись замера.

    Все параметры одной отправки формы сохраняются отдельными строками
    с одинаковым created_at — по нему они потом собираются в запись дня.
    """

    __tablename__ = "measurements"

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # chest, biceps, waist, ..., weight
    measurement_type = Column(String(50), nullable=False)
    value = Column(Float, nullable=False)

    # Время замера задаётся приложением, а не сервером БД
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)

    # Relationship
    user = relationship("User", back_populates="measurements")

    def __repr__(self):
        return f"<Measurement {self.measurement_type}={self.value} at {self.created_at}>"
