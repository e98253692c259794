"""Тесты разбора ввода, валидации и сохранения замеров."""
from datetime import datetime, timedelta, timezone

import pytest

from src.services.measurement_service import (
    MAX_KIND_LENGTH,
    MeasurementValidationError,
    delete_entry,
    load_entries,
    parse_measurement_text,
    parse_value,
    submit_measurements,
    validate_measurements,
)
from src.services.measurement_store import SqlMeasurementStore

T0 = datetime(2026, 10, 1, 8, 0, tzinfo=timezone.utc)


def test_parse_measurement_text_lines():
    raw = parse_measurement_text("грудь 102.5\nталия: 85,5\nвес=72")

    assert raw == {"chest": "102.5", "waist": "85,5", "weight": "72"}


def test_parse_measurement_text_commas():
    raw = parse_measurement_text("chest 102.5, waist 85, Biceps 38")

    assert raw == {"chest": "102.5", "waist": "85", "biceps": "38"}


def test_parse_measurement_text_ignores_noise():
    assert parse_measurement_text("") == {}
    assert parse_measurement_text("102.5") == {}


def test_parse_measurement_text_skips_overlong_kinds():
    long_kind = "окружностьзапястьялевойрукиипредплечья"
    raw = parse_measurement_text(f"{long_kind} 17\nокружностьзапястья 16\nталия 85")

    assert len(long_kind) > MAX_KIND_LENGTH
    assert raw == {"окружностьзапястья": "16", "waist": "85"}


def test_parse_value():
    assert parse_value("85,5") == 85.5
    assert parse_value(" 40 ") == 40.0
    assert parse_value("-5") is None
    assert parse_value("0") is None
    assert parse_value("abc") is None
    assert parse_value("nan") is None
    assert parse_value("inf") is None


def test_validate_drops_bad_fields_only():
    values = validate_measurements({"chest": "100", "waist": "-1", "neck": "", "hips": "x"})

    assert values == {"chest": 100.0}


@pytest.mark.parametrize("raw", [{"chest": "-5"}, {"chest": "abc"}, {}, {"chest": ""}])
def test_rejected_submission_does_not_touch_store(owner_id, raw):
    store = SqlMeasurementStore()

    with pytest.raises(MeasurementValidationError):
        submit_measurements(store, owner_id, raw)

    entries, _ = load_entries(store, owner_id)
    assert entries == []


def test_submit_shares_one_timestamp(owner_id):
    store = SqlMeasurementStore()

    result = submit_measurements(store, owner_id, {"chest": "100", "waist": "85", "neck": "0"}, now=T0)

    assert result.values == {"chest": 100.0, "waist": 85.0}
    assert result.recorded_at == T0
    assert result.degraded is False

    entries, degraded = load_entries(store, owner_id)
    assert degraded is False
    assert len(entries) == 1
    assert entries[0].values == {"chest": 100.0, "waist": 85.0}


def test_delete_entry_removes_whole_group(owner_id):
    store = SqlMeasurementStore()
    submit_measurements(store, owner_id, {"chest": "100", "waist": "85"}, now=T0)
    submit_measurements(store, owner_id, {"chest": "101"}, now=T0 + timedelta(days=1))

    result = delete_entry(store, owner_id, T0)

    assert result.ok
    entries, _ = load_entries(store, owner_id)
    assert [e.values for e in entries] == [{"chest": 101.0}]
