"""Хранилища замеров: основная БД, локальный JSON-кеш и fallback между ними."""
import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from src.database import get_db
from src.models import Measurement
from src.services.entry_aggregator import (
    MeasurementEntry,
    MeasurementRecord,
    aggregate,
    as_utc,
    entries_to_records,
)

logger = logging.getLogger(__name__)

# Ключ локального кеша (как в localStorage веб-версии) + владелец
LOCAL_CACHE_KEY = "fitness-measurements"
# Соответствие Telegram ID -> владелец, на случай недоступной БД
OWNER_KEY = "owner"


class StoreError(Exception):
    """Хранилище недоступно или отказало в операции."""

    def __init__(self, operation: str, reason: Any):
        super().__init__(f"{operation}: {reason}")
        self.operation = operation
        self.reason = reason


@dataclass
class Result:
    """Результат операции хранилища.

    degraded=True — данные получены/сохранены в локальном кеше,
    потому что основное хранилище недоступно.
    """

    ok: bool
    value: Any = None
    error: Optional[StoreError] = None
    degraded: bool = False

    @classmethod
    def success(cls, value: Any = None, degraded: bool = False) -> "Result":
        return cls(ok=True, value=value, degraded=degraded)

    @classmethod
    def failure(cls, error: StoreError) -> "Result":
        return cls(ok=False, error=error)


class SqlMeasurementStore:
    """Основное хранилище: таблица measurements через SQLAlchemy."""

    def __init__(self, session_factory=get_db):
        self._session_factory = session_factory

    def list_records(self, owner_id: int) -> Result:
        try:
            with self._session_factory() as db:
                rows = (
                    db.query(Measurement)
                    .filter(Measurement.user_id == owner_id)
                    .order_by(Measurement.created_at, Measurement.id)
                    .all()
                )
                records = [
                    MeasurementRecord(
                        id=row.id,
                        owner_id=row.user_id,
                        kind=row.measurement_type,
                        value=row.value,
                        recorded_at=as_utc(row.created_at),
                    )
                    for row in rows
                ]
            return Result.success(records)
        except SQLAlchemyError as e:
            logger.error(f"list_records failed for owner {owner_id}: {e}")
            return Result.failure(StoreError("list_records", e))

    def insert_records(self, records: Sequence[MeasurementRecord]) -> Result:
        """Вставка пачки одной транзакцией: либо все строки, либо ни одной."""
        try:
            with self._session_factory() as db:
                try:
                    db.add_all(
                        [
                            Measurement(
                                user_id=record.owner_id,
                                measurement_type=record.kind,
                                value=record.value,
                                created_at=as_utc(record.recorded_at),
                            )
                            for record in records
                        ]
                    )
                    db.commit()
                except SQLAlchemyError:
                    db.rollback()
                    raise
            return Result.success(len(records))
        except SQLAlchemyError as e:
            logger.error(f"insert_records failed ({len(records)} rows): {e}")
            return Result.failure(StoreError("insert_records", e))

    def delete_group(self, owner_id: int, recorded_at: datetime) -> Result:
        """Удаляет все параметры, записанные в момент recorded_at."""
        try:
            with self._session_factory() as db:
                deleted = (
                    db.query(Measurement)
                    .filter(
                        Measurement.user_id == owner_id,
                        Measurement.created_at == as_utc(recorded_at),
                    )
                    .delete(synchronize_session=False)
                )
                db.commit()
            return Result.success(deleted)
        except SQLAlchemyError as e:
            logger.error(f"delete_group failed for owner {owner_id}: {e}")
            return Result.failure(StoreError("delete_group", e))


class JsonKeyValueStore:
    """Простое строковое key-value хранилище в JSON-файле."""

    def __init__(self, path: str):
        self.path = Path(path)

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            return json.load(f)

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False)
        os.replace(tmp_path, self.path)


class LocalMeasurementStore:
    """Локальный кеш: JSON-список записей {id, date, measurements} на владельца."""

    def __init__(self, kv: JsonKeyValueStore):
        self.kv = kv

    @staticmethod
    def _key(owner_id: int) -> str:
        return f"{LOCAL_CACHE_KEY}:{owner_id}"

    def _load_entries(self, owner_id: int) -> list[MeasurementEntry]:
        raw = self.kv.get(self._key(owner_id))
        if not raw:
            return []
        return [MeasurementEntry.from_dict(item) for item in json.loads(raw)]

    def _save_entries(self, owner_id: int, entries: list[MeasurementEntry]) -> None:
        self.kv.set(self._key(owner_id), json.dumps([entry.to_dict() for entry in entries]))

    def list_records(self, owner_id: int) -> Result:
        try:
            return Result.success(entries_to_records(owner_id, self._load_entries(owner_id)))
        except (OSError, ValueError, KeyError) as e:
            logger.error(f"Local cache read failed for owner {owner_id}: {e}")
            return Result.failure(StoreError("list_records", e))

    def insert_records(self, records: Sequence[MeasurementRecord]) -> Result:
        if not records:
            return Result.success(0)
        owner_id = records[0].owner_id
        try:
            existing = entries_to_records(owner_id, self._load_entries(owner_id))
            self._save_entries(owner_id, aggregate(existing + list(records)))
            return Result.success(len(records))
        except (OSError, ValueError, KeyError) as e:
            logger.error(f"Local cache write failed for owner {owner_id}: {e}")
            return Result.failure(StoreError("insert_records", e))

    def delete_group(self, owner_id: int, recorded_at: datetime) -> Result:
        target = as_utc(recorded_at)
        try:
            entries = self._load_entries(owner_id)
            kept = [entry for entry in entries if entry.recorded_at != target]
            removed = sum(len(entry.values) for entry in entries if entry.recorded_at == target)
            self._save_entries(owner_id, kept)
            return Result.success(removed)
        except (OSError, ValueError, KeyError) as e:
            logger.error(f"Local cache delete failed for owner {owner_id}: {e}")
            return Result.failure(StoreError("delete_group", e))

    def remember_owner(self, telegram_id: int, owner_id: int) -> None:
        """Запоминает владельца, чтобы найти его кеш, когда БД недоступна."""
        try:
            self.kv.set(f"{OWNER_KEY}:{telegram_id}", str(owner_id))
        except OSError as e:
            logger.warning(f"Could not cache owner for telegram user {telegram_id}: {e}")

    def cached_owner_id(self, telegram_id: int) -> Optional[int]:
        try:
            value = self.kv.get(f"{OWNER_KEY}:{telegram_id}")
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read cached owner for telegram user {telegram_id}: {e}")
            return None
        return int(value) if value else None

    def replace_all(self, owner_id: int, records: Sequence[MeasurementRecord]) -> Result:
        """Полная замена кеша владельца свежими данными из основного хранилища."""
        try:
            self._save_entries(owner_id, aggregate(records))
            return Result.success(len(records))
        except (OSError, ValueError) as e:
            logger.warning(f"Local cache refresh failed for owner {owner_id}: {e}")
            return Result.failure(StoreError("replace_all", e))


class FallbackMeasurementStore:
    """Основное хранилище + локальный кеш.

    Чтение: основное, при ошибке — кеш (degraded). При успешном чтении записи,
    сохранённые только в кеше, досылаются в основное хранилище, затем кеш обновляется.
    Запись: основное, при ошибке — кеш (degraded). Успешная запись дублируется в кеш.
    Удаление: в обоих.
    """

    def __init__(self, primary, secondary: LocalMeasurementStore):
        self.primary = primary
        self.secondary = secondary

    def _sync_pending(self, owner_id: int, primary_records) -> tuple[list[MeasurementRecord], bool]:
        """Отправляет в основное хранилище группы, сохранённые только локально.

        Returns:
            (группы из кеша, которых нет в основном хранилище; удалось ли их отправить)
        """
        cached = self.secondary.list_records(owner_id)
        if not cached.ok:
            return [], True

        known = {as_utc(record.recorded_at) for record in primary_records}
        pending = [record for record in cached.value if as_utc(record.recorded_at) not in known]
        if not pending:
            return [], True

        pushed = self.primary.insert_records(pending)
        if pushed.ok:
            logger.info(f"Synced {len(pending)} locally saved rows for owner {owner_id}")
        else:
            logger.warning(f"Could not sync {len(pending)} locally saved rows for owner {owner_id}")
        return pending, pushed.ok

    def list_records(self, owner_id: int) -> Result:
        result = self.primary.list_records(owner_id)
        if result.ok:
            pending, synced = self._sync_pending(owner_id, result.value)
            records = sorted(
                list(result.value) + pending, key=lambda record: as_utc(record.recorded_at)
            )
            # Кеш заменяется объединением, локальные записи не теряются
            self.secondary.replace_all(owner_id, records)
            return Result.success(records, degraded=not synced)

        logger.warning(f"Primary store unavailable, reading local cache for owner {owner_id}")
        cached = self.secondary.list_records(owner_id)
        if cached.ok:
            return Result.success(cached.value, degraded=True)
        return cached

    def insert_records(self, records: Sequence[MeasurementRecord]) -> Result:
        result = self.primary.insert_records(records)
        if result.ok:
            self.secondary.insert_records(records)
            return result

        logger.warning(f"Primary store unavailable, saving {len(records)} rows locally")
        cached = self.secondary.insert_records(records)
        if cached.ok:
            return Result.success(cached.value, degraded=True)
        return cached

    def delete_group(self, owner_id: int, recorded_at: datetime) -> Result:
        result = self.primary.delete_group(owner_id, recorded_at)
        cached = self.secondary.delete_group(owner_id, recorded_at)
        if result.ok:
            return result

        logger.warning(f"Primary store unavailable, deleted from local cache for owner {owner_id}")
        if cached.ok:
            return Result.success(cached.value, degraded=True)
        return cached
