"""Расчёт изменений между двумя последними замерами."""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from src.services.entry_aggregator import MeasurementEntry, sort_kinds
from src.services.kinds import title_for, unit_for


@dataclass(frozen=True)
class MeasurementCard:
    """Данные для карточки «текущее значение + изменение»."""

    kind: str
    title: str
    value: float
    unit: str
    change: Optional[float]
    recorded_at: datetime


def delta(current: float, previous: Optional[float]) -> Optional[float]:
    """Изменение относительно прошлого замера. None — сравнивать не с чем."""
    if previous is None:
        return None
    return current - previous


def latest_changes(entries: Sequence[MeasurementEntry]) -> dict[str, Optional[float]]:
    """Изменения по каждому параметру последней записи.

    Сравниваются только две последние записи (не среднее и не первая с последней).
    """
    if not entries:
        return {}

    latest = entries[-1].values
    previous = entries[-2].values if len(entries) >= 2 else {}

    return {kind: delta(value, previous.get(kind)) for kind, value in latest.items()}


def build_cards(entries: Sequence[MeasurementEntry]) -> list[MeasurementCard]:
    """Карточки для последней записи в порядке формы."""
    if not entries:
        return []

    latest = entries[-1]
    changes = latest_changes(entries)

    return [
        MeasurementCard(
            kind=kind,
            title=title_for(kind),
            value=latest.values[kind],
            unit=unit_for(kind),
            change=changes[kind],
            recorded_at=latest.recorded_at,
        )
        for kind in sort_kinds(latest.values)
    ]


def trend_direction(change: Optional[float]) -> str:
    """up / down / flat. Отсутствие изменения и ноль — flat."""
    if not change:
        return "flat"
    return "up" if change > 0 else "down"


def format_change(change: float) -> str:
    """+1.0 / -2.0 / 0.0"""
    sign = "+" if change > 0 else ""
    return f"{sign}{change:.1f}"
