"""Тесты включения/выключения напоминаний и хранения настроек."""
from src.services.reminder_scheduler import ReminderScheduler
from src.services.reminder_service import (
    ReminderOutcome,
    ReminderSettings,
    ReminderSettingsStore,
    change_reminder_time,
    disable_reminders,
    enable_reminders,
)
from src.database import get_db
from src.models import UserSetting


def test_default_settings(owner_id):
    settings = ReminderSettingsStore().load(owner_id)

    assert settings == ReminderSettings(enabled=False, time="08:00")


def test_settings_stored_as_strings(owner_id):
    ReminderSettingsStore().save(owner_id, ReminderSettings(enabled=True, time="07:15"))

    with get_db() as db:
        values = {row.key: row.value for row in db.query(UserSetting).filter_by(user_id=owner_id)}

    assert values == {"notifications-enabled": "true", "reminder-time": "07:15"}


def test_enable_schedules_and_sets_flag(owner_id, port):
    settings_store = ReminderSettingsStore()

    outcome = enable_reminders(owner_id, ReminderScheduler(port), settings_store)

    assert outcome == ReminderOutcome.ENABLED
    assert settings_store.load(owner_id).enabled is True
    assert port.pending
    assert settings_store.enabled_owner_ids() == [owner_id]


def test_enable_permission_denied_keeps_flag_false(owner_id, make_port):
    settings_store = ReminderSettingsStore()
    port = make_port(granted=False)

    outcome = enable_reminders(owner_id, ReminderScheduler(port), settings_store)

    assert outcome == ReminderOutcome.PERMISSION_DENIED
    assert settings_store.load(owner_id).enabled is False
    assert port.schedule_calls == 0


def test_enable_scheduling_failure(owner_id, make_port):
    settings_store = ReminderSettingsStore()

    outcome = enable_reminders(owner_id, ReminderScheduler(make_port(fail_schedule=True)), settings_store)

    assert outcome == ReminderOutcome.SCHEDULING_FAILED
    assert settings_store.load(owner_id).enabled is False


def test_disable_cancels_and_clears_flag(owner_id, port):
    settings_store = ReminderSettingsStore()
    scheduler = ReminderScheduler(port)
    enable_reminders(owner_id, scheduler, settings_store)

    outcome = disable_reminders(owner_id, scheduler, settings_store)

    assert outcome == ReminderOutcome.DISABLED
    assert port.pending == {}
    assert settings_store.load(owner_id).enabled is False
    assert settings_store.enabled_owner_ids() == []


def test_time_change_when_disabled_only_saves(owner_id, port):
    settings_store = ReminderSettingsStore()

    outcome = change_reminder_time(owner_id, "21:30", ReminderScheduler(port), settings_store)

    assert outcome == ReminderOutcome.TIME_SAVED
    assert settings_store.load(owner_id).time == "21:30"
    assert port.schedule_calls == 0


def test_time_change_when_enabled_reschedules(owner_id, port):
    settings_store = ReminderSettingsStore()
    scheduler = ReminderScheduler(port)
    enable_reminders(owner_id, scheduler, settings_store)

    outcome = change_reminder_time(owner_id, "21:30", scheduler, settings_store)

    assert outcome == ReminderOutcome.TIME_UPDATED
    assert port.schedule_calls == 2
    assert all(n.fire_at.strftime("%H:%M") == "21:30" for n in port.pending.values())


def test_invalid_time_is_not_saved(owner_id, port):
    settings_store = ReminderSettingsStore()

    outcome = change_reminder_time(owner_id, "7 утра", ReminderScheduler(port), settings_store)

    assert outcome == ReminderOutcome.INVALID_TIME
    assert settings_store.load(owner_id).time == "08:00"
