"""Сервис для работы с пользователями."""
from typing import Optional
from telegram import User as TelegramUser
from src.database import get_db
from src.models import User


def get_or_create_user(telegram_user: TelegramUser, chat_id: Optional[int] = None) -> User:
    """Получить или создать пользователя.

    Args:
        telegram_user: Объект пользователя из Telegram
        chat_id: ID чата для напоминаний (обновляется при каждом входе)

    Returns:
        Объект User из БД
    """
    with get_db() as db:
        user = db.query(User).filter(User.telegram_id == telegram_user.id).first()

        if not user:
            user = User(
                telegram_id=telegram_user.id,
                chat_id=chat_id,
                username=telegram_user.username,
                first_name=telegram_user.first_name,
                last_name=telegram_user.last_name,
            )
            db.add(user)
            db.commit()
            db.refresh(user)
        elif chat_id is not None and user.chat_id != chat_id:
            user.chat_id = chat_id
            db.commit()
            db.refresh(user)

        return user


def get_user_by_telegram_id(telegram_id: int) -> Optional[User]:
    """Получить пользователя по Telegram ID."""
    with get_db() as db:
        return db.query(User).filter(User.telegram_id == telegram_id).first()


def get_user_by_id(user_id: int) -> Optional[User]:
    with get_db() as db:
        return db.query(User).filter(User.id == user_id).first()
