from __future__ import annotations

from dataclasses import dataclass, field, replace

from fleet_board.engine.snapshot import FleetSnapshot, load_default_snapshot
from fleet_board.engine.types import TimerDefaults, Unit, UnitStatus


@dataclass()
class FleetState:
    """The single owned container for the fleet. Mutate it through the reducer."""

    units: list[Unit] = field(default_factory=list)
    timer_defaults: TimerDefaults = field(default_factory=TimerDefaults)
    editing_unit_id: str | None = None

    @classmethod
    def new(cls) -> "FleetState":
        """Fresh state holding the packaged default fleet."""
        state = cls()
        state.adopt(load_default_snapshot())
        return state

    def find(self, unit_id: str) -> Unit | None:
        for unit in self.units:
            if unit.id == unit_id:
                return unit
        return None

    def has_unit(self, unit_id: str) -> bool:
        return self.find(unit_id) is not None

    def available_count(self) -> int:
        return sum(1 for unit in self.units if unit.status == UnitStatus.AVAILABLE)

    def adopt(self, snapshot: FleetSnapshot) -> None:
        """Replace the whole fleet with a snapshot's units and timer defaults."""
        self.units = [replace(unit) for unit in snapshot.units]
        self.timer_defaults = replace(snapshot.timer_defaults)
        if self.editing_unit_id is not None and not self.has_unit(self.editing_unit_id):
            self.editing_unit_id = None

    def to_snapshot(self, last_updated: str | None = None) -> FleetSnapshot:
        return FleetSnapshot(
            units=tuple(replace(unit) for unit in self.units),
            timer_defaults=replace(self.timer_defaults),
            last_updated=last_updated,
        )
