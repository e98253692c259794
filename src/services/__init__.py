"""Сервисы бизнес-логики."""
from src.services.user_service import get_or_create_user, get_user_by_telegram_id, get_user_by_id
from src.services.entry_aggregator import aggregate, distinct_kinds
from src.services.trend import delta, latest_changes, build_cards
from src.services.measurement_service import (
    build_store,
    submit_measurements,
    load_entries,
    delete_entry,
)

__all__ = [
    "get_or_create_user",
    "get_user_by_telegram_id",
    "get_user_by_id",
    "aggregate",
    "distinct_kinds",
    "delta",
    "latest_changes",
    "build_cards",
    "build_store",
    "submit_measurements",
    "load_entries",
    "delete_entry",
]
