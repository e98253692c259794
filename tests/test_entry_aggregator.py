"""Тесты сборки записей по датам."""
from datetime import datetime, timedelta, timezone

from src.services.entry_aggregator import (
    MeasurementEntry,
    MeasurementRecord,
    aggregate,
    distinct_kinds,
    entries_to_records,
    sort_kinds,
)

T0 = datetime(2026, 10, 1, 8, 0, tzinfo=timezone.utc)


def record(kind, value, recorded_at, owner_id=1):
    return MeasurementRecord(owner_id=owner_id, kind=kind, value=value, recorded_at=recorded_at)


def test_groups_by_exact_timestamp():
    records = [
        record("chest", 100.0, T0),
        record("waist", 85.0, T0),
        record("chest", 101.0, T0 + timedelta(microseconds=1)),
    ]
    entries = aggregate(records)

    assert len(entries) == 2
    assert entries[0].values == {"chest": 100.0, "waist": 85.0}
    assert entries[1].values == {"chest": 101.0}


def test_sorted_ascending_without_duplicates():
    records = [
        record("chest", 103.0, T0 + timedelta(days=2)),
        record("chest", 100.0, T0),
        record("waist", 80.0, T0 + timedelta(days=1)),
        record("waist", 84.0, T0),
    ]
    entries = aggregate(records)
    stamps = [entry.recorded_at for entry in entries]

    assert stamps == sorted(stamps)
    assert len(stamps) == len(set(stamps))


def test_later_duplicate_kind_wins():
    entries = aggregate([record("chest", 100.0, T0), record("chest", 99.0, T0)])

    assert entries[0].values == {"chest": 99.0}


def test_naive_and_aware_utc_are_the_same_group():
    naive = T0.replace(tzinfo=None)
    entries = aggregate([record("chest", 100.0, naive), record("waist", 85.0, T0)])

    assert len(entries) == 1
    assert entries[0].recorded_at == T0


def test_aggregate_is_idempotent_on_values():
    records = [record("chest", 100.0, T0), record("neck", 40.0, T0 + timedelta(hours=1))]
    first = aggregate(records)
    second = aggregate(records)

    assert [e.values for e in first] == [e.values for e in second]
    assert [e.recorded_at for e in first] == [e.recorded_at for e in second]


def test_empty_input():
    assert aggregate([]) == []
    assert distinct_kinds([]) == set()


def test_distinct_kinds_union():
    entries = [
        MeasurementEntry(id="a", recorded_at=T0, values={"chest": 1.0}),
        MeasurementEntry(id="b", recorded_at=T0 + timedelta(days=1), values={"waist": 2.0, "chest": 3.0}),
    ]
    assert distinct_kinds(entries) == {"chest", "waist"}


def test_sort_kinds_form_order_then_alphabetical():
    assert sort_kinds({"weight", "calves", "chest", "ankle"}) == ["chest", "weight", "ankle", "calves"]


def test_entry_dict_roundtrip_shape():
    entry = MeasurementEntry(id="x", recorded_at=T0, values={"chest": 100.5})
    data = entry.to_dict()

    assert set(data) == {"id", "date", "measurements"}
    restored = MeasurementEntry.from_dict(data)
    assert restored.recorded_at == T0
    assert restored.values == {"chest": 100.5}


def test_entries_to_records_flattens():
    entries = [MeasurementEntry(id="x", recorded_at=T0, values={"chest": 100.0, "waist": 85.0})]
    records = entries_to_records(7, entries)

    assert {(r.kind, r.value) for r in records} == {("chest", 100.0), ("waist", 85.0)}
    assert all(r.owner_id == 7 and r.recorded_at == T0 for r in records)
