"""Клавиатуры для замеров, графика и напоминаний."""
from datetime import datetime, timedelta, timezone
from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from src.services.kinds import title_for
from src.services.reminder_scheduler import REMINDER_ACTION_TYPE

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def encode_timestamp(value: datetime) -> str:
    """Время записи -> микросекунды от эпохи (точно, без float)."""
    return str((value - _EPOCH) // timedelta(microseconds=1))


def decode_timestamp(value: str) -> datetime:
    return _EPOCH + timedelta(microseconds=int(value))


def get_entry_keyboard(recorded_at: datetime) -> InlineKeyboardMarkup:
    """Кнопка удаления записи целиком.

    Args:
        recorded_at: время записи (ключ группы замеров)
    """
    keyboard = [
        [
            InlineKeyboardButton(
                "❌ Удалить", callback_data=f"entry_delete:{encode_timestamp(recorded_at)}"
            )
        ]
    ]
    return InlineKeyboardMarkup(keyboard)


def get_chart_filter_keyboard(available: list[str], selected: list[str]) -> InlineKeyboardMarkup:
    """Переключатели параметров на графике, по два в ряд.

    В callback_data — индекс в available (лимит Telegram 64 байта).
    """
    buttons = [
        InlineKeyboardButton(
            f"{'✅' if kind in selected else '▫️'} {title_for(kind)}",
            callback_data=f"chart_toggle:{index}",
        )
        for index, kind in enumerate(available)
    ]
    keyboard = [buttons[i : i + 2] for i in range(0, len(buttons), 2)]
    keyboard.append([InlineKeyboardButton("📈 Показать график", callback_data="chart_show")])
    return InlineKeyboardMarkup(keyboard)


def get_reminders_keyboard(enabled: bool) -> InlineKeyboardMarkup:
    if enabled:
        button = InlineKeyboardButton("🔕 Выключить", callback_data="reminders:off")
    else:
        button = InlineKeyboardButton("🔔 Включить", callback_data="reminders:on")
    return InlineKeyboardMarkup([[button]])


def get_reminder_notification_keyboard() -> InlineKeyboardMarkup:
    """Кнопка под напоминанием — сразу к форме замеров."""
    keyboard = [
        [InlineKeyboardButton("📏 Записать замеры", callback_data=f"action:{REMINDER_ACTION_TYPE}")]
    ]
    return InlineKeyboardMarkup(keyboard)
