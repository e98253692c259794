"""Сервис замеров: разбор ввода, валидация, сохранение и чтение."""
import logging
import math
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from src.config import config
from src.services.entry_aggregator import MeasurementEntry, MeasurementRecord, aggregate
from src.services.kinds import normalize_kind
from src.services.measurement_store import (
    FallbackMeasurementStore,
    JsonKeyValueStore,
    LocalMeasurementStore,
    Result,
    SqlMeasurementStore,
)

logger = logging.getLogger(__name__)

# "грудь 102.5", "waist=85,0", "вес: 72"
_PAIR_RE = re.compile(r"([^\W\d_]+)\s*[:=]?\s*(-?[^\s;]+)")

# Длиннее — не сохраняем (measurements.measurement_type — String(50))
MAX_KIND_LENGTH = 32


class MeasurementValidationError(ValueError):
    """Ни одно значение не прошло проверку — сохранять нечего."""


@dataclass
class SubmitResult:
    """Итог сохранения формы."""

    recorded_at: datetime
    values: dict[str, float]
    degraded: bool = False


def build_store() -> FallbackMeasurementStore:
    """Хранилище по конфигурации: Supabase или SQL + локальный кеш."""
    if config.SUPABASE_URL:
        from src.services.supabase_store import SupabaseMeasurementStore

        primary = SupabaseMeasurementStore(config.SUPABASE_URL, config.SUPABASE_KEY)
    else:
        primary = SqlMeasurementStore()

    local = LocalMeasurementStore(JsonKeyValueStore(config.LOCAL_CACHE_PATH))
    return FallbackMeasurementStore(primary, local)


def parse_measurement_text(text: str) -> dict[str, str]:
    """Разбирает текст формы в {параметр: сырое значение}.

    Пары разделяются переводом строки, ';' или ', ' перед буквой.
    Десятичная запятая допустима: "талия 85,5".
    """
    raw: dict[str, str] = {}
    for line in re.split(r"[\n;]|,\s+(?=[^\W\d_])", text):
        match = _PAIR_RE.search(line.strip())
        if not match:
            continue
        kind = normalize_kind(match.group(1))
        if len(kind) > MAX_KIND_LENGTH:
            logger.info(f"Skipping measurement kind longer than {MAX_KIND_LENGTH} chars")
            continue
        raw[kind] = match.group(2).strip().rstrip(",")
    return raw


def parse_value(raw: str) -> Optional[float]:
    """Положительное конечное число или None."""
    try:
        value = float(str(raw).strip().replace(",", "."))
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return value


def validate_measurements(raw: dict[str, str]) -> dict[str, float]:
    """Отбрасывает пустые, нечисловые и неположительные значения."""
    values = {}
    for kind, value in raw.items():
        if value is None or str(value).strip() == "":
            continue
        parsed = parse_value(value)
        if parsed is not None:
            values[kind] = parsed
    return values


def submit_measurements(
    store, owner_id: int, raw: dict[str, str], now: Optional[datetime] = None
) -> SubmitResult:
    """Сохраняет форму одной пачкой с общим временем замера.

    Raises:
        MeasurementValidationError: если не осталось ни одного значения
    """
    values = validate_measurements(raw)
    if not values:
        raise MeasurementValidationError("Нужно указать хотя бы один замер")

    recorded_at = now or datetime.now(timezone.utc)
    records = [
        MeasurementRecord(owner_id=owner_id, kind=kind, value=value, recorded_at=recorded_at)
        for kind, value in values.items()
    ]

    result = store.insert_records(records)
    if not result.ok:
        # Не записалось ни в БД, ни в кеш
        raise result.error

    logger.info(f"Saved {len(records)} measurements for owner {owner_id} (degraded={result.degraded})")
    return SubmitResult(recorded_at=recorded_at, values=values, degraded=result.degraded)


def load_entries(store, owner_id: int) -> tuple[list[MeasurementEntry], bool]:
    """Записи пользователя по датам и признак работы из кеша."""
    result = store.list_records(owner_id)
    if not result.ok:
        logger.error(f"Could not load measurements for owner {owner_id}: {result.error}")
        return [], True
    return aggregate(result.value), result.degraded


def delete_entry(store, owner_id: int, recorded_at: datetime) -> Result:
    """Удаляет запись целиком (все параметры одного момента)."""
    result = store.delete_group(owner_id, recorded_at)
    if result.ok:
        logger.info(f"Deleted entry {recorded_at.isoformat()} for owner {owner_id}")
    return result
