from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Coroutine

from fleet_board.engine.actions import Action
from fleet_board.engine.display import BoardView, build_board_view
from fleet_board.engine.reducer import ActionResult, apply_action
from fleet_board.engine.snapshot import EXPORT_FILENAME, FleetSnapshot, export_snapshot, read_export
from fleet_board.engine.state import FleetState
from fleet_board.engine.types import epoch_ms
from fleet_board.sync.controller import SyncController

Schedule = Callable[[Coroutine[Any, Any, Any]], object]


@dataclass
class BoardSession:
    """One client's view of the fleet: the state, its controller and a clock.

    Every successful mutation schedules an asynchronous full-snapshot push.
    ``schedule`` decides where that coroutine runs (a Textual worker in the
    app, a plain list in tests).
    """

    state: FleetState
    controller: SyncController
    schedule: Schedule
    clock: Callable[[], int] = field(default=epoch_ms)

    def dispatch(self, action: Action) -> ActionResult:
        result = apply_action(self.state, action, now_ms=self.clock())
        if result.changed:
            self.schedule(self.controller.push())
        return result

    def view(self) -> BoardView:
        return build_board_view(self.state, self.clock())

    def export_text(self) -> str:
        return export_snapshot(self.state.units, self.state.timer_defaults)

    def export_to(self, path: Path) -> Path:
        if path.is_dir():
            path = path / EXPORT_FILENAME
        path.write_text(self.export_text(), encoding="utf-8")
        return path

    def read_import(self, path: Path) -> FleetSnapshot:
        """Validate an exported file; raises SnapshotError. Nothing is applied yet."""
        return read_export(
            path.read_text(encoding="utf-8"),
            now_ms=self.clock(),
            base_defaults=self.state.timer_defaults,
        )
