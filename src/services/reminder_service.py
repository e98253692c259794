"""Настройки напоминаний и их включение/выключение."""
import enum
import logging
from dataclasses import dataclass

from src.database import get_db
from src.models import UserSetting
from src.services.reminder_scheduler import ReminderScheduler, parse_reminder_time

logger = logging.getLogger(__name__)

ENABLED_KEY = "notifications-enabled"
TIME_KEY = "reminder-time"
DEFAULT_REMINDER_TIME = "08:00"


class ReminderOutcome(str, enum.Enum):
    """Результат действия с напоминаниями."""

    ENABLED = "enabled"
    DISABLED = "disabled"
    TIME_UPDATED = "time_updated"
    TIME_SAVED = "time_saved"  # напоминания выключены, время просто запомнили
    PERMISSION_DENIED = "permission_denied"
    SCHEDULING_FAILED = "scheduling_failed"
    INVALID_TIME = "invalid_time"


@dataclass
class ReminderSettings:
    """Две настройки: включены ли напоминания и во сколько."""

    enabled: bool = False
    time: str = DEFAULT_REMINDER_TIME


class ReminderSettingsStore:
    """Хранение настроек в таблице user_settings (строки "true"/"false", "HH:MM")."""

    def __init__(self, session_factory=get_db):
        self._session_factory = session_factory

    def load(self, owner_id: int) -> ReminderSettings:
        with self._session_factory() as db:
            rows = db.query(UserSetting).filter(
                UserSetting.user_id == owner_id,
                UserSetting.key.in_([ENABLED_KEY, TIME_KEY]),
            ).all()
            values = {row.key: row.value for row in rows}

        return ReminderSettings(
            enabled=values.get(ENABLED_KEY) == "true",
            time=values.get(TIME_KEY) or DEFAULT_REMINDER_TIME,
        )

    def save(self, owner_id: int, settings: ReminderSettings) -> None:
        values = {
            ENABLED_KEY: "true" if settings.enabled else "false",
            TIME_KEY: settings.time,
        }
        with self._session_factory() as db:
            for key, value in values.items():
                row = db.query(UserSetting).filter_by(user_id=owner_id, key=key).first()
                if row:
                    row.value = value
                else:
                    db.add(UserSetting(user_id=owner_id, key=key, value=value))
            db.commit()

    def enabled_owner_ids(self) -> list[int]:
        """Пользователи с включёнными напоминаниями (для восстановления после рестарта)."""
        with self._session_factory() as db:
            rows = db.query(UserSetting.user_id).filter(
                UserSetting.key == ENABLED_KEY,
                UserSetting.value == "true",
            ).all()
            return [row.user_id for row in rows]


def enable_reminders(
    owner_id: int, scheduler: ReminderScheduler, settings_store: ReminderSettingsStore
) -> ReminderOutcome:
    """Включение: разрешение -> планирование -> флаг. При отказе флаг не меняется."""
    settings = settings_store.load(owner_id)

    if not scheduler.request_permission():
        logger.info(f"Reminder permission denied for owner {owner_id}")
        return ReminderOutcome.PERMISSION_DENIED

    if not scheduler.schedule(settings.time):
        return ReminderOutcome.SCHEDULING_FAILED

    settings.enabled = True
    settings_store.save(owner_id, settings)
    return ReminderOutcome.ENABLED


def disable_reminders(
    owner_id: int, scheduler: ReminderScheduler, settings_store: ReminderSettingsStore
) -> ReminderOutcome:
    settings = settings_store.load(owner_id)
    scheduler.cancel()

    settings.enabled = False
    settings_store.save(owner_id, settings)
    return ReminderOutcome.DISABLED


def change_reminder_time(
    owner_id: int,
    new_time: str,
    scheduler: ReminderScheduler,
    settings_store: ReminderSettingsStore,
) -> ReminderOutcome:
    """Новое время сохраняется всегда; перепланирование — только если включено."""
    try:
        parse_reminder_time(new_time)
    except ValueError:
        return ReminderOutcome.INVALID_TIME

    settings = settings_store.load(owner_id)
    settings.time = new_time.strip()
    settings_store.save(owner_id, settings)

    if not settings.enabled:
        return ReminderOutcome.TIME_SAVED

    if not scheduler.schedule(settings.time):
        return ReminderOutcome.SCHEDULING_FAILED
    return ReminderOutcome.TIME_UPDATED
