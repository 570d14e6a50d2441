from __future__ import annotations

from textual import events
from textual.markup import escape
from textual.message import Message
from textual.widgets import Static

from fleet_board.engine.display import BoardView, UnitView
from fleet_board.engine.types import ALL_STATUSES, UnitStatus
from fleet_board.sync.controller import DataSource, SyncController, SyncState

RIGHT_BUTTON = 3


def status_class(status: UnitStatus) -> str:
    return f"status-{status.value}"


STATUS_CLASSES: tuple[str, ...] = tuple(status_class(status) for status in ALL_STATUSES)

_SYNC_COLORS = {
    SyncState.INITIALIZING: "#a7adb5",
    SyncState.SYNCED: "#3bd16f",
    SyncState.DIVERGED: "#f0b429",
}

_SOURCE_LABELS = {
    DataSource.SERVER: "SERVER",
    DataSource.LOCAL_BACKUP: "LOCAL BACKUP",
    DataSource.DEFAULTS: "DEFAULTS",
}


def tile_markup(view: UnitView) -> str:
    lines = [f"[bold]{escape(view.unit_id)}[/]", f"{escape(view.name)} - {view.status_label}"]
    if view.location:
        lines.append(f"[dim]{escape(view.location)}[/]")
    lines.append(f"Time: {view.timer_text}" if view.timer_text else "")
    return "\n".join(lines)


class UnitTile(Static):
    """One color-coded unit. Left click cycles the status, right click opens the status menu."""

    can_focus = True

    BINDINGS = [
        ("enter", "cycle", "Cycle"),
        ("m", "menu", "Status menu"),
    ]

    class Pressed(Message):
        def __init__(self, unit_id: str, *, menu: bool) -> None:
            super().__init__()
            self.unit_id = unit_id
            self.menu = menu

    def __init__(self, unit_view: UnitView, **kwargs) -> None:
        super().__init__(markup=True, classes="unit-tile", **kwargs)
        self.unit_view = unit_view

    def on_mount(self) -> None:
        self.show(self.unit_view)

    def show(self, unit_view: UnitView) -> None:
        self.unit_view = unit_view
        self.remove_class(*STATUS_CLASSES)
        self.add_class(status_class(unit_view.status))
        self.set_class(unit_view.expiring, "-expiring")
        self.update(tile_markup(unit_view))

    def on_click(self, event: events.Click) -> None:
        event.stop()
        self.post_message(self.Pressed(self.unit_view.unit_id, menu=event.button == RIGHT_BUTTON))

    def action_cycle(self) -> None:
        self.post_message(self.Pressed(self.unit_view.unit_id, menu=False))

    def action_menu(self) -> None:
        self.post_message(self.Pressed(self.unit_view.unit_id, menu=True))


class HeaderBar(Static):
    """Single-line status header. Uses rich markup for styling."""

    def __init__(self, controller: SyncController, **kwargs) -> None:
        super().__init__(markup=True, **kwargs)
        self.controller = controller
        self.available_count = 0

    def update_view(self, view: BoardView) -> None:
        self.available_count = view.available_count
        self.refresh()

    def render(self) -> str:
        controller = self.controller
        color = _SYNC_COLORS[controller.sync_state]
        parts = [
            f"[bold]AVAILABLE UNITS:[/] {self.available_count:>3}",
            f"[bold]SYNC:[/] [{color}]{controller.sync_state.value.upper()}[/]",
            f"[bold]SOURCE:[/] {_SOURCE_LABELS[controller.data_source]}",
            f"[bold]LAST SYNC:[/] {escape(controller.last_sync_label or '-')}",
        ]
        if controller.polling_paused:
            parts.append("[#ff3b3b]POLLING PAUSED[/]")
        if controller.loading:
            parts.append("[#a7adb5]WORKING...[/]")
        return "  |  ".join(parts)
