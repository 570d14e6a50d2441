from __future__ import annotations

from dataclasses import dataclass

from fleet_board.engine.actions import (
    Action,
    AddUnit,
    BeginEdit,
    CancelEdit,
    CycleStatus,
    EditUnit,
    RemoveUnit,
    ReplaceFleet,
    SetStatus,
    SetTimerDefaults,
)
from fleet_board.engine.state import FleetState
from fleet_board.engine.types import STATUS_CYCLE, TimerDefaults, Unit, UnitStatus, parse_status

MISSING_FIELDS_MESSAGE = "Please fill in all unit details."
DUPLICATE_ID_MESSAGE = "A unit with this ID already exists. Please use a unique ID."
BAD_TIMER_DEFAULTS_MESSAGE = "Please enter valid positive numbers for timer defaults."


@dataclass()
class ActionResult:
    ok: bool
    message: str | None
    message_kind: str | None
    state: FleetState
    changed: bool  # fleet or timer defaults mutated; callers persist on True


def next_cycle_status(status: UnitStatus) -> UnitStatus | None:
    """Left-click successor, or None when cycling leaves the status alone."""
    if status in STATUS_CYCLE:
        index = STATUS_CYCLE.index(status)
        return STATUS_CYCLE[(index + 1) % len(STATUS_CYCLE)]
    if status == UnitStatus.UNAVAILABLE:
        return UnitStatus.AVAILABLE
    return None


def apply_transition(unit: Unit, status: UnitStatus, defaults: TimerDefaults, now_ms: int) -> None:
    """Set a status and arm or clear its countdown."""
    unit.status = status
    unit.arm_or_clear_timer(defaults, now_ms)


def apply_action(state: FleetState, action: Action, *, now_ms: int) -> ActionResult:
    def ok(message: str | None = None, kind: str = "info", *, changed: bool = True) -> ActionResult:
        return ActionResult(ok=True, message=message, message_kind=kind, state=state, changed=changed)

    def fail(message: str) -> ActionResult:
        return ActionResult(ok=False, message=message, message_kind="error", state=state, changed=False)

    if isinstance(action, SetStatus):
        unit = state.find(action.unit_id)
        if unit is None:
            return fail(f"Unknown unit: {action.unit_id}")
        try:
            status = parse_status(action.status)
        except ValueError as exc:
            return fail(str(exc))
        apply_transition(unit, status, state.timer_defaults, now_ms)
        return ok()

    if isinstance(action, CycleStatus):
        unit = state.find(action.unit_id)
        if unit is None:
            return fail(f"Unknown unit: {action.unit_id}")
        status = next_cycle_status(unit.status)
        if status is None:
            return ok(changed=False)
        apply_transition(unit, status, state.timer_defaults, now_ms)
        return ok()

    if isinstance(action, AddUnit):
        fields = _clean_fields(action.unit_id, action.name, action.location)
        if fields is None:
            return fail(MISSING_FIELDS_MESSAGE)
        unit_id, name, location = fields
        if state.has_unit(unit_id):
            return fail(DUPLICATE_ID_MESSAGE)
        try:
            status = parse_status(action.status)
        except ValueError as exc:
            return fail(str(exc))
        unit = Unit(id=unit_id, name=name, location=location)
        state.units.append(unit)
        apply_transition(unit, status, state.timer_defaults, now_ms)
        return ok(f"Added {unit_id}", "accent")

    if isinstance(action, BeginEdit):
        if not state.has_unit(action.unit_id):
            return fail(f"Unknown unit: {action.unit_id}")
        state.editing_unit_id = action.unit_id
        return ok(changed=False)

    if isinstance(action, CancelEdit):
        state.editing_unit_id = None
        return ok(changed=False)

    if isinstance(action, EditUnit):
        return _edit_unit(state, action, now_ms, ok, fail)

    if isinstance(action, RemoveUnit):
        unit = state.find(action.unit_id)
        if unit is None:
            return fail(f"Unknown unit: {action.unit_id}")
        state.units = [other for other in state.units if other.id != action.unit_id]
        if state.editing_unit_id == action.unit_id:
            state.editing_unit_id = None
        return ok(f"Took down {action.unit_id}", "accent")

    if isinstance(action, SetTimerDefaults):
        at_destination = _positive_minutes(action.at_destination)
        logistics = _positive_minutes(action.logistics)
        if at_destination is None or logistics is None:
            return fail(BAD_TIMER_DEFAULTS_MESSAGE)
        state.timer_defaults = TimerDefaults(at_destination=at_destination, logistics=logistics)
        return ok("Timer defaults saved!")

    if isinstance(action, ReplaceFleet):
        state.adopt(action.snapshot)
        return ok("Fleet data imported successfully!")

    return fail(f"Unsupported action: {type(action).__name__}")


def _edit_unit(state: FleetState, action: EditUnit, now_ms: int, ok, fail) -> ActionResult:
    unit = state.find(action.unit_id)
    if unit is None:
        state.editing_unit_id = None
        return fail(f"Unknown unit: {action.unit_id}")
    fields = _clean_fields(action.new_id, action.name, action.location)
    if fields is None:
        return fail(MISSING_FIELDS_MESSAGE)
    new_id, name, location = fields
    if new_id != unit.id and state.has_unit(new_id):
        return fail(DUPLICATE_ID_MESSAGE)
    try:
        status = parse_status(action.status)
    except ValueError as exc:
        return fail(str(exc))

    unit.id = new_id
    unit.name = name
    unit.location = location
    # An unchanged status keeps its running countdown.
    if unit.status != status:
        apply_transition(unit, status, state.timer_defaults, now_ms)
    state.editing_unit_id = None
    return ok(f"Updated {new_id}", "accent")


def _clean_fields(*values: str) -> tuple[str, ...] | None:
    cleaned = tuple((value or "").strip() for value in values)
    if not all(cleaned):
        return None
    return cleaned


def _positive_minutes(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value.isdigit():
            return None
        value = int(value)
    if not isinstance(value, int) or value <= 0:
        return None
    return value
