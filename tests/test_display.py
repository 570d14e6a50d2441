from __future__ import annotations

from fleet_board.engine.actions import SetStatus
from fleet_board.engine.display import (
    build_board_view,
    build_unit_view,
    format_timer,
    is_expiring,
    status_label,
)
from fleet_board.engine.reducer import apply_action
from fleet_board.engine.types import ALL_STATUSES, MS_PER_MINUTE, UnitStatus
from tests.helpers.factories import NOW_MS, make_state, make_unit


def test_format_timer_counts_down_then_up() -> None:
    assert format_timer(20 * MS_PER_MINUTE) == "20:00"
    assert format_timer(61_999) == "01:01"
    assert format_timer(999) == "00:00"
    assert format_timer(0) == "+00:00"
    assert format_timer(-60_000) == "+01:00"


def test_expiring_window_excludes_overrun() -> None:
    assert is_expiring(59_999)
    assert is_expiring(1)
    assert not is_expiring(60_000)
    assert not is_expiring(0)
    assert not is_expiring(-5_000)
    assert not is_expiring(None)


def test_at_destination_timeline() -> None:
    state = make_state([make_unit("Med-1")])
    apply_action(state, SetStatus("Med-1", "atDestination"), now_ms=NOW_MS)
    unit = state.units[0]

    start = build_unit_view(unit, NOW_MS)
    assert start.timer_text == "20:00"
    assert start.expiring is False

    last_minute = build_unit_view(unit, NOW_MS + 19 * MS_PER_MINUTE + 30_000)
    assert last_minute.timer_text == "00:30"
    assert last_minute.expiring is True

    overrun = build_unit_view(unit, NOW_MS + 1_260_000)
    assert overrun.timer_text == "+01:00"
    assert overrun.expiring is False


def test_untimed_unit_has_no_timer_text() -> None:
    view = build_unit_view(make_unit("Med-1", status=UnitStatus.DISPATCHED), NOW_MS)
    assert view.timer_text == ""
    assert view.status_label == "En Route"
    assert view.expiring is False


def test_every_status_has_a_label() -> None:
    labels = {status: status_label(status) for status in ALL_STATUSES}
    assert labels[UnitStatus.ON_SCENE] == "On Scene"
    assert labels[UnitStatus.EN_ROUTE_TO_DESTINATION] == "En Route to Destination"
    assert all(labels.values())


def test_board_view_counts_available_units() -> None:
    state = make_state(
        [
            make_unit("Med-1"),
            make_unit("Med-2", status=UnitStatus.UNAVAILABLE),
            make_unit("Med-3"),
        ]
    )
    view = build_board_view(state, NOW_MS)
    assert view.available_count == 2
    assert [unit.unit_id for unit in view.units] == ["Med-1", "Med-2", "Med-3"]
