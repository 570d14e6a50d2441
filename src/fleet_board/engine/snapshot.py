"""Fleet snapshot codec: wire dicts, export files and the packaged default fleet."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Iterable

from fleet_board.engine.types import TimerDefaults, Unit, UnitStatus, parse_status

DEFAULT_FLEET_PATH = Path(__file__).resolve().parents[1] / "data" / "default_fleet.json"
EXPORT_FILENAME = "truck_dispatch_data.json"

# Older exports stored the at-destination duration under these keys.
LEGACY_AT_DESTINATION_KEYS = ("destination", "enRouteToDestination")


class SnapshotError(ValueError):
    pass


@dataclass(frozen=True)
class FleetSnapshot:
    units: tuple[Unit, ...]
    timer_defaults: TimerDefaults
    last_updated: str | None = None

    def to_wire(self) -> dict:
        return snapshot_to_wire(self.units, self.timer_defaults)


def snapshot_to_wire(units: Iterable[Unit], timer_defaults: TimerDefaults) -> dict:
    return {
        "trucks": [unit.to_wire() for unit in units],
        "timerDefaults": timer_defaults.to_dict(),
    }


def export_snapshot(units: Iterable[Unit], timer_defaults: TimerDefaults) -> str:
    return json.dumps(snapshot_to_wire(units, timer_defaults), indent=2)


def read_export(text: str, *, now_ms: int, base_defaults: TimerDefaults | None = None) -> FleetSnapshot:
    """Parse an exported file. Both ``trucks`` and ``timerDefaults`` are required."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SnapshotError("Failed to read or parse JSON file.") from exc
    if (
        not isinstance(data, dict)
        or not isinstance(data.get("trucks"), list)
        or not isinstance(data.get("timerDefaults"), dict)
    ):
        raise SnapshotError("Invalid JSON file format.")
    return parse_snapshot(data, now_ms=now_ms, base_defaults=base_defaults)


def load_default_snapshot(path: Path = DEFAULT_FLEET_PATH) -> FleetSnapshot:
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except FileNotFoundError as exc:
        raise SnapshotError(f"Default fleet not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise SnapshotError(f"Invalid JSON in default fleet: {exc}") from exc
    # Packaged defaults carry no running timers, so the clock is irrelevant.
    return parse_snapshot(data, now_ms=0)


def parse_snapshot(data: object, *, now_ms: int, base_defaults: TimerDefaults | None = None) -> FleetSnapshot:
    """Validate a ``{trucks, timerDefaults, lastUpdated}`` document.

    Units are normalized so that ``timer_end_time`` is set exactly when the
    status is timed: stray end times are dropped and a timed unit with no end
    time is armed from ``now_ms``. Timer defaults are merged over
    ``base_defaults`` after legacy key migration.
    """
    if not isinstance(data, dict):
        raise SnapshotError("Snapshot root must be an object")
    trucks = data.get("trucks")
    if not isinstance(trucks, list):
        raise SnapshotError("trucks must be a list")

    raw_defaults = data.get("timerDefaults")
    if raw_defaults is None:
        raw_defaults = {}
    timer_defaults = parse_timer_defaults(raw_defaults, base_defaults or TimerDefaults())

    units = tuple(_parse_unit(raw, index, timer_defaults, now_ms) for index, raw in enumerate(trucks))

    last_updated = data.get("lastUpdated")
    if last_updated is not None and not isinstance(last_updated, str):
        raise SnapshotError("lastUpdated must be a string")
    return FleetSnapshot(units=units, timer_defaults=timer_defaults, last_updated=last_updated)


def migrate_timer_defaults(raw: dict) -> dict:
    migrated = dict(raw)
    if UnitStatus.AT_DESTINATION.value not in migrated or not migrated[UnitStatus.AT_DESTINATION.value]:
        for key in LEGACY_AT_DESTINATION_KEYS:
            if migrated.get(key):
                migrated[UnitStatus.AT_DESTINATION.value] = migrated.pop(key)
                break
    return migrated


def parse_timer_defaults(raw: object, base: TimerDefaults) -> TimerDefaults:
    if not isinstance(raw, dict):
        raise SnapshotError("timerDefaults must be an object")
    migrated = migrate_timer_defaults(raw)
    result = replace(base)
    if UnitStatus.AT_DESTINATION.value in migrated:
        result.at_destination = _require_minutes(migrated, UnitStatus.AT_DESTINATION.value)
    if UnitStatus.LOGISTICS.value in migrated:
        result.logistics = _require_minutes(migrated, UnitStatus.LOGISTICS.value)
    return result


def _parse_unit(raw: object, index: int, timer_defaults: TimerDefaults, now_ms: int) -> Unit:
    if not isinstance(raw, dict):
        raise SnapshotError(f"trucks[{index}] must be an object")
    unit_id = _require_str(raw, "id", index)
    name = _require_str(raw, "name", index)
    location = _require_str(raw, "location", index)
    try:
        status = parse_status(raw.get("status"))
    except ValueError as exc:
        raise SnapshotError(f"trucks[{index}]: {exc}") from exc

    end_time = raw.get("timerEndTime")
    if end_time is not None:
        if not _is_number(end_time):
            raise SnapshotError(f"trucks[{index}].timerEndTime must be a number or null")
        end_time = int(end_time)

    unit = Unit(id=unit_id, name=name, location=location, status=status, timer_end_time=end_time)
    if not unit.is_timed:
        unit.timer_end_time = None
    elif unit.timer_end_time is None:
        unit.arm_or_clear_timer(timer_defaults, now_ms)
    return unit


def _require_str(data: dict, key: str, index: int) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise SnapshotError(f"trucks[{index}].{key} must be a string")
    return value


def _require_minutes(data: dict, key: str) -> int:
    value = data.get(key)
    if not _is_number(value) or int(value) != value or value <= 0:
        raise SnapshotError(f"timerDefaults.{key} must be a positive whole number")
    return int(value)


def _is_number(value: object) -> bool:
    # json.loads accepts NaN and Infinity; neither converts to an int.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)
