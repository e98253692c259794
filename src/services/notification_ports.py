"""Реализации платформы уведомлений для планировщика напоминаний."""
import logging
from dataclasses import asdict
from typing import Awaitable, Callable, Optional

from src.services.reminder_scheduler import Notification

logger = logging.getLogger(__name__)

JOB_PREFIX = "reminder"


def job_name(chat_id: int, notification_id: int) -> str:
    return f"{JOB_PREFIX}:{chat_id}:{notification_id}"


class UnavailableNotificationPort:
    """Заглушка: бот запущен без JobQueue (нет extra python-telegram-bot[job-queue])."""

    @property
    def is_available(self) -> bool:
        return False

    def request_permission(self) -> bool:
        return False

    def pending_ids(self) -> list[int]:
        return []

    def cancel(self, ids: list[int]) -> None:
        pass

    def schedule(self, notifications: list[Notification]) -> None:
        pass


class JobQueueNotificationPort:
    """Напоминания как отложенные задачи JobQueue для одного чата.

    ID уведомления входит в имя задачи: reminder:<chat_id>:<id>.
    """

    def __init__(self, job_queue, chat_id: int, callback: Callable[..., Awaitable[None]]):
        self.job_queue = job_queue
        self.chat_id = chat_id
        self.callback = callback

    @property
    def is_available(self) -> bool:
        return True

    def request_permission(self) -> bool:
        # Пользователь сам написал боту — писать в этот чат можно
        return True

    def _own_jobs(self):
        prefix = f"{JOB_PREFIX}:{self.chat_id}:"
        for job in self.job_queue.jobs():
            if job.name and job.name.startswith(prefix) and not job.removed:
                yield job

    @staticmethod
    def _notification_id(name: str) -> Optional[int]:
        try:
            return int(name.rsplit(":", 1)[1])
        except (IndexError, ValueError):
            return None

    def pending_ids(self) -> list[int]:
        ids = []
        for job in self._own_jobs():
            notification_id = self._notification_id(job.name)
            if notification_id is not None:
                ids.append(notification_id)
        return ids

    def cancel(self, ids: list[int]) -> None:
        wanted = set(ids)
        for job in list(self._own_jobs()):
            if self._notification_id(job.name) in wanted:
                job.schedule_removal()

    def schedule(self, notifications: list[Notification]) -> None:
        """Ставит всю пачку; при ошибке снимает уже поставленные задачи."""
        added = []
        try:
            for notification in notifications:
                job = self.job_queue.run_once(
                    self.callback,
                    when=notification.fire_at,
                    data=asdict(notification),
                    name=job_name(self.chat_id, notification.id),
                    chat_id=self.chat_id,
                )
                added.append(job)
        except Exception:
            for job in added:
                job.schedule_removal()
            raise


def build_notification_port(job_queue, chat_id: int, callback) -> object:
    """Выбор реализации при старте: JobQueue есть — настоящие напоминания."""
    if job_queue is None:
        return UnavailableNotificationPort()
    return JobQueueNotificationPort(job_queue, chat_id, callback)
