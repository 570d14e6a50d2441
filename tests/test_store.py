from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest

from fleet_board.server.store import DocumentStore, StoreError, format_stamp, parse_stamp

FROZEN = datetime(2026, 3, 1, 12, 0, 0, 123456, tzinfo=timezone.utc)


def _truck(unit_id: str = "Med-1", **overrides):
    truck = {"id": unit_id, "name": unit_id, "location": "Iva", "status": "available", "timerEndTime": None}
    truck.update(overrides)
    return truck


def test_format_stamp_is_millisecond_utc() -> None:
    assert format_stamp(FROZEN) == "2026-03-01T12:00:00.123Z"
    assert parse_stamp("2026-03-01T12:00:00.123Z") == FROZEN.replace(microsecond=123000)
    assert parse_stamp("yesterday") is None
    assert parse_stamp(None) is None


def test_read_materializes_default_fleet(tmp_path) -> None:
    path = tmp_path / "truck_data.json"
    store = DocumentStore(path, clock=lambda: FROZEN)
    document = store.read()

    assert path.exists()
    assert len(document["trucks"]) == 17
    assert document["timerDefaults"] == {"atDestination": 20, "logistics": 10}
    assert document["lastUpdated"] == "2026-03-01T12:00:00.123Z"
    assert json.loads(path.read_text(encoding="utf-8")) == document


def test_repeated_reads_return_same_stamp(tmp_path) -> None:
    store = DocumentStore(tmp_path / "truck_data.json", clock=lambda: FROZEN)
    first = store.read()
    second = store.read()
    assert first["lastUpdated"] == second["lastUpdated"]


def test_writes_with_frozen_clock_still_advance_stamp(tmp_path) -> None:
    store = DocumentStore(tmp_path / "truck_data.json", clock=lambda: FROZEN)
    stamps = [store.write([_truck()], None) for _ in range(3)]
    parsed = [parse_stamp(stamp) for stamp in stamps]
    assert parsed[0] < parsed[1] < parsed[2]
    assert parsed[1] - parsed[0] == timedelta(milliseconds=1)


def test_new_store_continues_after_existing_stamp(tmp_path) -> None:
    path = tmp_path / "truck_data.json"
    later = FROZEN + timedelta(hours=1)
    first = DocumentStore(path, clock=lambda: later).write([_truck()], None)

    # A restarted process whose clock is behind must not go backwards.
    second = DocumentStore(path, clock=lambda: FROZEN).write([_truck()], None)
    assert parse_stamp(second) > parse_stamp(first)


def test_write_fills_in_default_timer_defaults(tmp_path) -> None:
    store = DocumentStore(tmp_path / "truck_data.json", clock=lambda: FROZEN)
    store.write([_truck()], None)
    document = store.read()
    assert document["timerDefaults"] == {"atDestination": 20, "logistics": 10}
    assert document["trucks"] == [_truck()]


def test_write_keeps_only_wire_fields(tmp_path) -> None:
    store = DocumentStore(tmp_path / "truck_data.json", clock=lambda: FROZEN)
    store.write([_truck(colour="red")], {"atDestination": 5, "logistics": 6})
    document = store.read()
    assert "colour" not in document["trucks"][0]
    assert document["timerDefaults"] == {"atDestination": 5, "logistics": 6}


def test_restore_replaces_whole_document(tmp_path) -> None:
    store = DocumentStore(tmp_path / "truck_data.json", clock=lambda: FROZEN)
    store.read()
    stamp = store.restore({"trucks": [_truck("Med-40")], "timerDefaults": {"atDestination": 9, "logistics": 3}})
    document = store.read()
    assert [truck["id"] for truck in document["trucks"]] == ["Med-40"]
    assert document["lastUpdated"] == stamp


def test_unreadable_document_raises_store_error(tmp_path) -> None:
    path = tmp_path / "truck_data.json"
    path.write_text("{broken", encoding="utf-8")
    store = DocumentStore(path, clock=lambda: FROZEN)
    with pytest.raises(StoreError):
        store.read()


def test_no_temp_files_left_behind(tmp_path) -> None:
    store = DocumentStore(tmp_path / "truck_data.json", clock=lambda: FROZEN)
    store.write([_truck()], None)
    store.write([_truck("Med-2")], None)
    assert sorted(p.name for p in tmp_path.iterdir()) == ["truck_data.json"]
