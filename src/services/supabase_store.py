"""Хранилище замеров в Supabase (PostgREST) через REST API."""
import logging
from datetime import datetime
from typing import Sequence

import requests

from src.services.entry_aggregator import MeasurementRecord, as_utc
from src.services.measurement_store import Result, StoreError

logger = logging.getLogger(__name__)


class SupabaseMeasurementStore:
    """Клиент для таблицы measurements в Supabase.

    Схема та же, что у SQL-хранилища:
    {id, user_id, measurement_type, value, created_at}.
    """

    TABLE = "measurements"

    def __init__(self, url: str, api_key: str, timeout: int = 10):
        if not url or not api_key:
            raise ValueError("Supabase credentials not configured")

        self.base_url = f"{url.rstrip('/')}/rest/v1/{self.TABLE}"
        self.api_key = api_key
        self.timeout = timeout

    def _headers(self, **extra) -> dict:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        headers.update(extra)
        return headers

    def list_records(self, owner_id: int) -> Result:
        params = {
            "select": "id,user_id,measurement_type,value,created_at",
            "user_id": f"eq.{owner_id}",
            "order": "created_at.asc",
        }
        try:
            response = requests.get(
                self.base_url, params=params, headers=self._headers(), timeout=self.timeout
            )
            response.raise_for_status()
            rows = response.json()

            records = [
                MeasurementRecord(
                    id=row.get("id"),
                    owner_id=row["user_id"],
                    kind=row["measurement_type"],
                    value=float(row["value"]),
                    recorded_at=as_utc(datetime.fromisoformat(row["created_at"])),
                )
                for row in rows
            ]
            return Result.success(records)
        except (requests.RequestException, ValueError, KeyError) as e:
            logger.error(f"Supabase list_records failed for owner {owner_id}: {e}")
            return Result.failure(StoreError("list_records", e))

    def insert_records(self, records: Sequence[MeasurementRecord]) -> Result:
        """Один POST с массивом строк — PostgREST вставляет его одной транзакцией."""
        payload = [
            {
                "user_id": record.owner_id,
                "measurement_type": record.kind,
                "value": record.value,
                "created_at": as_utc(record.recorded_at).isoformat(),
            }
            for record in records
        ]
        try:
            response = requests.post(
                self.base_url,
                json=payload,
                headers=self._headers(Prefer="return=minimal"),
                timeout=self.timeout,
            )
            response.raise_for_status()
            return Result.success(len(records))
        except requests.RequestException as e:
            logger.error(f"Supabase insert_records failed ({len(records)} rows): {e}")
            return Result.failure(StoreError("insert_records", e))

    def delete_group(self, owner_id: int, recorded_at: datetime) -> Result:
        params = {
            "user_id": f"eq.{owner_id}",
            "created_at": f"eq.{as_utc(recorded_at).isoformat()}",
        }
        try:
            response = requests.delete(
                self.base_url,
                params=params,
                headers=self._headers(Prefer="return=representation"),
                timeout=self.timeout,
            )
            response.raise_for_status()
            deleted = response.json() if response.content else []
            return Result.success(len(deleted))
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Supabase delete_group failed for owner {owner_id}: {e}")
            return Result.failure(StoreError("delete_group", e))
