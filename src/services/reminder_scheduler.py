"""Планировщик ежедневных напоминаний о замерах.

Напоминания занимают зарезервированный диапазон ID [1000, 1030):
по одному на каждый из ближайших 30 дней. Перед каждой установкой
весь диапазон очищается, поэтому повторный вызов schedule() безопасен.
"""
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, time as dt_time, timedelta, timezone, tzinfo
from typing import Optional, Protocol

logger = logging.getLogger(__name__)

REMINDER_ID_START = 1000
REMINDER_WINDOW_DAYS = 30
REMINDER_ID_END = REMINDER_ID_START + REMINDER_WINDOW_DAYS  # не включительно

REMINDER_TITLE = "Время замеров"
REMINDER_BODY = "Пора записать сегодняшние замеры! 📊"
REMINDER_ACTION_TYPE = "WEIGHT_REMINDER"
REMINDER_EXTRA_TYPE = "weight_reminder"

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


@dataclass(frozen=True)
class Notification:
    """Локальное уведомление-напоминание."""

    id: int
    title: str
    body: str
    fire_at: datetime
    sound: str = "default"
    action_type: str = REMINDER_ACTION_TYPE
    extra: dict = field(default_factory=lambda: {"type": REMINDER_EXTRA_TYPE})


class NotificationPort(Protocol):
    """Платформа уведомлений (очередь задач бота или заглушка)."""

    @property
    def is_available(self) -> bool: ...

    def request_permission(self) -> bool: ...

    def pending_ids(self) -> list[int]: ...

    def cancel(self, ids: list[int]) -> None: ...

    def schedule(self, notifications: list[Notification]) -> None: ...


def is_reserved_id(notification_id: int) -> bool:
    return REMINDER_ID_START <= notification_id < REMINDER_ID_END


def parse_reminder_time(value: str) -> dt_time:
    """'HH:MM' (24ч, с ведущим нулём) -> time.

    Raises:
        ValueError: если формат неверный
    """
    match = _TIME_RE.match(value.strip()) if value else None
    if not match:
        raise ValueError(f"Неверный формат времени: {value!r}, нужно ЧЧ:ММ")
    return dt_time(int(match.group(1)), int(match.group(2)))


class ReminderScheduler:
    """Управление окном из 30 ежедневных напоминаний."""

    def __init__(self, port: NotificationPort, tz: Optional[tzinfo] = None):
        self.port = port
        self.tz = tz or timezone.utc

    def request_permission(self) -> bool:
        if not self.port.is_available:
            logger.info("Notifications not available on this platform")
            return False
        return self.port.request_permission()

    def build_notifications(self, reminder_time: dt_time, now: datetime) -> list[Notification]:
        """Напоминания на сегодня + 29 дней вперёд.

        Если время на сегодня уже прошло, сегодняшнее пропускается
        (а не переносится) — в окне остаётся 29 напоминаний.
        """
        now = now.astimezone(self.tz) if now.tzinfo else now.replace(tzinfo=self.tz)
        today = now.date()

        notifications = []
        for i in range(REMINDER_WINDOW_DAYS):
            fire_at = datetime.combine(today + timedelta(days=i), reminder_time, tzinfo=self.tz)
            if i == 0 and fire_at <= now:
                continue

            notifications.append(
                Notification(
                    id=REMINDER_ID_START + i,
                    title=REMINDER_TITLE,
                    body=REMINDER_BODY,
                    fire_at=fire_at,
                )
            )
        return notifications

    def schedule(self, time_str: str, now: Optional[datetime] = None) -> bool:
        """Перепланировать напоминания на время time_str ('HH:MM')."""
        if not self.port.is_available:
            logger.info("Notifications not available, skipping schedule")
            return False

        try:
            reminder_time = parse_reminder_time(time_str)
        except ValueError as e:
            logger.warning(f"Reminder not scheduled: {e}")
            return False

        # Всегда, даже если ничего не запланировано
        self.cancel()

        notifications = self.build_notifications(reminder_time, now or datetime.now(self.tz))
        if not notifications:
            return False

        try:
            self.port.schedule(notifications)
        except Exception as e:
            logger.error(f"Error scheduling reminders: {e}")
            return False

        logger.info(f"Scheduled {len(notifications)} reminders at {time_str}")
        return True

    def cancel(self) -> None:
        """Снимает все ожидающие напоминания из зарезервированного диапазона.

        Ошибки платформы только логируются: состояние напоминаний best-effort.
        """
        try:
            reminder_ids = [nid for nid in self.port.pending_ids() if is_reserved_id(nid)]
            if reminder_ids:
                self.port.cancel(reminder_ids)
                logger.info(f"Cleared {len(reminder_ids)} reminders")
        except Exception as e:
            logger.error(f"Error clearing reminders: {e}")
