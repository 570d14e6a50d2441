from __future__ import annotations

from typing import Callable, Iterable

from fleet_board.engine.state import FleetState
from fleet_board.engine.types import TimerDefaults, Unit, UnitStatus

NOW_MS = 1_700_000_000_000


def make_unit(
    unit_id: str = "Med-1",
    *,
    name: str | None = None,
    location: str = "City // HQ",
    status: UnitStatus = UnitStatus.AVAILABLE,
    timer_end_time: int | None = None,
) -> Unit:
    return Unit(
        id=unit_id,
        name=name or unit_id,
        location=location,
        status=status,
        timer_end_time=timer_end_time,
    )


def make_state(
    units: Iterable[Unit] | None = None,
    *,
    timer_defaults: TimerDefaults | None = None,
    apply: Callable[[FleetState], None] | None = None,
) -> FleetState:
    """Create a FleetState for tests; the packaged default fleet when no units are given."""
    if units is None:
        state = FleetState.new()
    else:
        state = FleetState(units=list(units))
    if timer_defaults is not None:
        state.timer_defaults = timer_defaults
    if apply is not None:
        apply(state)
    return state


class FakeClock:
    """Millisecond clock the test advances by hand."""

    def __init__(self, now_ms: int = NOW_MS) -> None:
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> int:
        self.now_ms += ms
        return self.now_ms
