"""Общие фикстуры тестов."""
import os
import tempfile

# До импорта src.*: движок БД создаётся при импорте src.database
_TMP_DIR = tempfile.mkdtemp(prefix="body_tracker_tests_")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["BOT_TOKEN"] = "test_token"

import pytest

from src.database import Base, engine, init_db, get_db
from src.models import User
from src.services.reminder_scheduler import Notification


@pytest.fixture
def db():
    """Чистая БД на каждый тест."""
    init_db()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def owner_id(db):
    with get_db() as session:
        user = User(telegram_id=123456, chat_id=123456, first_name="Тест")
        session.add(user)
        session.commit()
        return user.id


class FakeNotificationPort:
    """Платформа уведомлений в памяти."""

    def __init__(self, available=True, granted=True, fail_schedule=False, fail_pending=False):
        self.available = available
        self.granted = granted
        self.fail_schedule = fail_schedule
        self.fail_pending = fail_pending
        self.pending: dict[int, Notification | None] = {}
        self.schedule_calls = 0

    @property
    def is_available(self) -> bool:
        return self.available

    def request_permission(self) -> bool:
        return self.granted

    def pending_ids(self) -> list[int]:
        if self.fail_pending:
            raise RuntimeError("platform error")
        return list(self.pending)

    def cancel(self, ids: list[int]) -> None:
        for notification_id in ids:
            self.pending.pop(notification_id, None)

    def schedule(self, notifications: list[Notification]) -> None:
        self.schedule_calls += 1
        if self.fail_schedule:
            raise RuntimeError("rejected")
        for notification in notifications:
            self.pending[notification.id] = notification


@pytest.fixture
def make_port():
    return FakeNotificationPort


@pytest.fixture
def port(make_port):
    return make_port()
