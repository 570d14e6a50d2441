from __future__ import annotations

from dataclasses import dataclass

from fleet_board.engine.state import FleetState
from fleet_board.engine.types import STATUS_LABELS, Unit, UnitStatus

EXPIRY_WARNING_MS = 60_000


@dataclass(frozen=True)
class UnitView:
    unit_id: str
    name: str
    location: str
    status: UnitStatus
    status_label: str
    timer_text: str
    expiring: bool


@dataclass(frozen=True)
class BoardView:
    units: tuple[UnitView, ...]
    available_count: int


def status_label(status: UnitStatus) -> str:
    return STATUS_LABELS.get(status, status.value)


def format_timer(remaining_ms: int) -> str:
    """MM:SS while counting down, +MM:SS once the countdown has run out."""
    prefix = "" if remaining_ms > 0 else "+"
    total_seconds = abs(remaining_ms) // 1000
    minutes, seconds = divmod(total_seconds, 60)
    return f"{prefix}{minutes:02d}:{seconds:02d}"


def remaining_ms(unit: Unit, now_ms: int) -> int | None:
    if not unit.is_timed or unit.timer_end_time is None:
        return None
    return unit.timer_end_time - now_ms


def is_expiring(remaining: int | None) -> bool:
    # Overrun is deliberately not flagged; only the final minute is.
    return remaining is not None and 0 < remaining < EXPIRY_WARNING_MS


def build_unit_view(unit: Unit, now_ms: int) -> UnitView:
    remaining = remaining_ms(unit, now_ms)
    return UnitView(
        unit_id=unit.id,
        name=unit.name,
        location=unit.location,
        status=unit.status,
        status_label=status_label(unit.status),
        timer_text="" if remaining is None else format_timer(remaining),
        expiring=is_expiring(remaining),
    )


def build_board_view(state: FleetState, now_ms: int) -> BoardView:
    return BoardView(
        units=tuple(build_unit_view(unit, now_ms) for unit in state.units),
        available_count=state.available_count(),
    )
