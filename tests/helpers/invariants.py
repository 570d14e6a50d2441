from __future__ import annotations

from fleet_board.engine.state import FleetState
from fleet_board.engine.types import TIMED_STATUSES, UnitStatus


def assert_timer_invariant(state: FleetState) -> None:
    for unit in state.units:
        if unit.status in TIMED_STATUSES:
            assert unit.timer_end_time is not None, unit
        else:
            assert unit.timer_end_time is None, unit


def assert_unique_ids(state: FleetState) -> None:
    ids = [unit.id for unit in state.units]
    assert len(ids) == len(set(ids)), ids


def assert_available_count(state: FleetState) -> None:
    expected = len([unit for unit in state.units if unit.status == UnitStatus.AVAILABLE])
    assert state.available_count() == expected


def assert_positive_timer_defaults(state: FleetState) -> None:
    assert state.timer_defaults.at_destination > 0
    assert state.timer_defaults.logistics > 0
