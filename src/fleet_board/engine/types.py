"""Common types and enums."""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum

MS_PER_MINUTE = 60_000


def epoch_ms() -> int:
    return int(time.time() * 1000)


class UnitStatus(str, Enum):
    """Operational status of a unit, in board menu order."""

    AVAILABLE = "available"
    DISPATCHED = "dispatched"
    ON_SCENE = "onScene"
    EN_ROUTE_TO_DESTINATION = "enRouteToDestination"
    AT_DESTINATION = "atDestination"
    LOGISTICS = "logistics"
    UNAVAILABLE = "unavailable"


ALL_STATUSES: tuple[UnitStatus, ...] = tuple(UnitStatus)

# Left-click cycle. LOGISTICS and UNAVAILABLE are only reachable by explicit selection.
STATUS_CYCLE: tuple[UnitStatus, ...] = (
    UnitStatus.AVAILABLE,
    UnitStatus.DISPATCHED,
    UnitStatus.ON_SCENE,
    UnitStatus.EN_ROUTE_TO_DESTINATION,
    UnitStatus.AT_DESTINATION,
)

TIMED_STATUSES: frozenset[UnitStatus] = frozenset({UnitStatus.AT_DESTINATION, UnitStatus.LOGISTICS})

STATUS_LABELS: dict[UnitStatus, str] = {
    UnitStatus.AVAILABLE: "Available",
    UnitStatus.DISPATCHED: "En Route",
    UnitStatus.ON_SCENE: "On Scene",
    UnitStatus.EN_ROUTE_TO_DESTINATION: "En Route to Destination",
    UnitStatus.AT_DESTINATION: "At Destination",
    UnitStatus.LOGISTICS: "Logistics",
    UnitStatus.UNAVAILABLE: "Unavailable",
}


def parse_status(value: object) -> UnitStatus:
    if isinstance(value, UnitStatus):
        return value
    try:
        return UnitStatus(value)
    except ValueError as exc:
        raise ValueError(f"Unknown status: {value}") from exc


@dataclass()
class TimerDefaults:
    """Countdown durations in minutes, keyed by timed status."""

    at_destination: int = 20
    logistics: int = 10

    def minutes_for(self, status: UnitStatus) -> int:
        if status == UnitStatus.AT_DESTINATION:
            return self.at_destination
        if status == UnitStatus.LOGISTICS:
            return self.logistics
        raise ValueError(f"Status has no timer: {status.value}")

    def to_dict(self) -> dict[str, int]:
        return {
            UnitStatus.AT_DESTINATION.value: self.at_destination,
            UnitStatus.LOGISTICS.value: self.logistics,
        }


@dataclass()
class Unit:
    id: str
    name: str
    location: str
    status: UnitStatus = UnitStatus.AVAILABLE
    timer_end_time: int | None = None  # ms since epoch, only while status is timed

    @property
    def is_timed(self) -> bool:
        return self.status in TIMED_STATUSES

    def arm_or_clear_timer(self, defaults: TimerDefaults, now_ms: int) -> None:
        if self.is_timed:
            self.timer_end_time = now_ms + defaults.minutes_for(self.status) * MS_PER_MINUTE
        else:
            self.timer_end_time = None

    def to_wire(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "location": self.location,
            "status": self.status.value,
            "timerEndTime": self.timer_end_time,
        }
