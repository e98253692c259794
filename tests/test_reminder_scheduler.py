"""Тесты планировщика напоминаний."""
from datetime import datetime, time, timedelta, timezone

import pytest

from src.services.reminder_scheduler import (
    Notification,
    ReminderScheduler,
    is_reserved_id,
    parse_reminder_time,
)

MORNING = datetime(2026, 10, 17, 7, 30, tzinfo=timezone.utc)
EVENING = datetime(2026, 10, 17, 20, 0, tzinfo=timezone.utc)


def unrelated(notification_id):
    return Notification(id=notification_id, title="other", body="", fire_at=MORNING)


def test_before_time_schedules_full_window(port):
    scheduler = ReminderScheduler(port)

    assert scheduler.schedule("08:00", now=MORNING) is True
    assert set(port.pending) == set(range(1000, 1030))
    assert port.pending[1000].fire_at == datetime(2026, 10, 17, 8, 0, tzinfo=timezone.utc)
    assert port.pending[1029].fire_at == datetime(2026, 11, 15, 8, 0, tzinfo=timezone.utc)


def test_after_time_skips_today(port):
    scheduler = ReminderScheduler(port)

    assert scheduler.schedule("08:00", now=EVENING) is True
    assert set(port.pending) == set(range(1001, 1030))
    assert port.pending[1001].fire_at == datetime(2026, 10, 18, 8, 0, tzinfo=timezone.utc)


def test_exactly_at_time_skips_today(port):
    now = datetime(2026, 10, 17, 8, 0, tzinfo=timezone.utc)
    ReminderScheduler(port).schedule("08:00", now=now)

    assert 1000 not in port.pending
    assert len(port.pending) == 29


def test_submitted_as_one_batch(port):
    ReminderScheduler(port).schedule("08:00", now=MORNING)

    assert port.schedule_calls == 1


def test_second_schedule_replaces_first(port):
    scheduler = ReminderScheduler(port)
    scheduler.schedule("08:00", now=MORNING)
    scheduler.schedule("21:00", now=EVENING)

    assert set(port.pending) == set(range(1000, 1030))
    assert all(n.fire_at.hour == 21 for n in port.pending.values())


def test_reschedule_after_passing_time_leaves_no_stale_today(port):
    scheduler = ReminderScheduler(port)
    scheduler.schedule("21:00", now=MORNING)
    scheduler.schedule("08:00", now=EVENING)

    assert set(port.pending) == set(range(1001, 1030))


def test_cancel_keeps_unrelated_notifications(port):
    port.pending[42] = unrelated(42)
    port.pending[1030] = unrelated(1030)
    scheduler = ReminderScheduler(port)
    scheduler.schedule("08:00", now=MORNING)

    scheduler.cancel()

    assert set(port.pending) == {42, 1030}


def test_cancel_swallows_platform_errors(make_port):
    port = make_port(fail_pending=True)

    ReminderScheduler(port).cancel()


def test_schedule_reports_rejection(make_port):
    port = make_port(fail_schedule=True)

    assert ReminderScheduler(port).schedule("08:00", now=MORNING) is False


def test_unavailable_platform(make_port):
    port = make_port(available=False)
    scheduler = ReminderScheduler(port)

    assert scheduler.schedule("08:00", now=MORNING) is False
    assert scheduler.request_permission() is False
    assert port.schedule_calls == 0


def test_request_permission_delegates(make_port):
    assert ReminderScheduler(make_port(granted=True)).request_permission() is True
    assert ReminderScheduler(make_port(granted=False)).request_permission() is False


def test_invalid_time_not_scheduled(port):
    assert ReminderScheduler(port).schedule("8:00", now=MORNING) is False
    assert ReminderScheduler(port).schedule("25:00", now=MORNING) is False
    assert port.pending == {}


def test_payload_fields(port):
    ReminderScheduler(port).schedule("08:00", now=MORNING)
    notification = port.pending[1005]

    assert notification.sound == "default"
    assert notification.action_type == "WEIGHT_REMINDER"
    assert notification.extra == {"type": "weight_reminder"}
    assert notification.title and notification.body


def test_timezone_is_respected(port):
    tz = timezone(timedelta(hours=3))
    # 06:00 UTC = 09:00 по UTC+3, 08:00 уже прошло
    now = datetime(2026, 10, 17, 6, 0, tzinfo=timezone.utc)
    ReminderScheduler(port, tz=tz).schedule("08:00", now=now)

    assert 1000 not in port.pending
    assert port.pending[1001].fire_at == datetime(2026, 10, 18, 8, 0, tzinfo=tz)


def test_parse_reminder_time():
    assert parse_reminder_time("08:05") == time(8, 5)
    assert parse_reminder_time("23:59") == time(23, 59)
    with pytest.raises(ValueError):
        parse_reminder_time("24:00")
    with pytest.raises(ValueError):
        parse_reminder_time("")


def test_reserved_range():
    assert is_reserved_id(1000)
    assert is_reserved_id(1029)
    assert not is_reserved_id(1030)
    assert not is_reserved_id(999)
    assert not is_reserved_id(42)
