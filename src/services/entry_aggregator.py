"""Сборка плоских записей замеров в записи по датам."""
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Optional

from src.services.kinds import MEASUREMENT_KINDS


@dataclass(frozen=True)
class MeasurementRecord:
    """Один параметр одного замера (строка таблицы measurements)."""

    owner_id: int
    kind: str
    value: float
    recorded_at: datetime
    id: Optional[int | str] = None


@dataclass
class MeasurementEntry:
    """Все параметры, записанные в один момент времени."""

    id: str
    recorded_at: datetime
    values: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Формат локального кеша: {id, date, measurements}."""
        return {
            "id": self.id,
            "date": self.recorded_at.isoformat(),
            "measurements": dict(self.values),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MeasurementEntry":
        return cls(
            id=data.get("id") or str(uuid.uuid4()),
            recorded_at=as_utc(datetime.fromisoformat(data["date"])),
            values={k: float(v) for k, v in data.get("measurements", {}).items()},
        )


def as_utc(value: datetime) -> datetime:
    """SQLite отдаёт naive datetime — считаем его UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def aggregate(records: Iterable[MeasurementRecord]) -> list[MeasurementEntry]:
    """Группирует записи по точному совпадению recorded_at.

    Если в одной группе параметр встречается дважды (две отправки
    попали в один и тот же момент), побеждает более поздняя запись
    во входной последовательности.
    """
    groups: dict[datetime, dict[str, float]] = {}
    for record in records:
        key = as_utc(record.recorded_at)
        groups.setdefault(key, {})[record.kind] = record.value

    return [
        MeasurementEntry(id=str(uuid.uuid4()), recorded_at=recorded_at, values=values)
        for recorded_at, values in sorted(groups.items(), key=lambda item: item[0])
    ]


def distinct_kinds(entries: Iterable[MeasurementEntry]) -> set[str]:
    """Все параметры, встречавшиеся хотя бы в одной записи."""
    kinds = set()
    for entry in entries:
        kinds.update(entry.values.keys())
    return kinds


def sort_kinds(kinds: Iterable[str]) -> list[str]:
    """Известные параметры в порядке формы, неизвестные — по алфавиту в конце."""
    known = [kind for kind in MEASUREMENT_KINDS if kind in kinds]
    unknown = sorted(kind for kind in kinds if kind not in MEASUREMENT_KINDS)
    return known + unknown


def entries_to_records(owner_id: int, entries: Iterable[MeasurementEntry]) -> list[MeasurementRecord]:
    """Обратное преобразование: записи по датам -> плоские записи."""
    return [
        MeasurementRecord(owner_id=owner_id, kind=kind, value=value, recorded_at=entry.recorded_at)
        for entry in entries
        for kind, value in entry.values.items()
    ]
