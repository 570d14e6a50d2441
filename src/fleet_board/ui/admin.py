from __future__ import annotations

from pathlib import Path

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.markup import escape
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Select, Static

from fleet_board.engine.actions import (
    AddUnit,
    BeginEdit,
    CancelEdit,
    EditUnit,
    RemoveUnit,
    ReplaceFleet,
    SetTimerDefaults,
)
from fleet_board.engine.display import status_label
from fleet_board.engine.snapshot import EXPORT_FILENAME, SnapshotError
from fleet_board.engine.types import ALL_STATUSES, UnitStatus
from fleet_board.session import BoardSession
from fleet_board.ui.modals import AlertScreen, ConfirmScreen

STATUS_OPTIONS = [(status_label(status), status.value) for status in ALL_STATUSES]


class AdminScreen(ModalScreen[None]):
    """Add, edit and take down units; timer defaults; export and import."""

    BINDINGS = [("escape", "close", "Close")]

    def __init__(self, session: BoardSession) -> None:
        super().__init__()
        self.session = session

    def compose(self) -> ComposeResult:
        defaults = self.session.state.timer_defaults
        with VerticalScroll(classes="modal-box admin-panel"):
            yield Static("", id="unit-form-title", markup=True)
            yield Input(placeholder="Unit ID", id="unit-id")
            yield Input(placeholder="Name", id="unit-name")
            yield Input(placeholder="Home base", id="unit-location")
            yield Select(STATUS_OPTIONS, value=UnitStatus.AVAILABLE.value, allow_blank=False, id="unit-status")
            with Horizontal(classes="admin-buttons"):
                yield Button("Add Unit", variant="primary", id="save-unit")
                yield Button("Cancel Edit", id="cancel-edit")

            yield Static("[bold]Timer Defaults (minutes)[/]", markup=True)
            with Horizontal(classes="admin-row"):
                yield Input(str(defaults.at_destination), placeholder="At Destination", id="timer-destination")
                yield Input(str(defaults.logistics), placeholder="Logistics", id="timer-logistics")
                yield Button("Save Timers", id="save-timers")

            yield Static("[bold]Data[/]", markup=True)
            with Horizontal(classes="admin-row"):
                yield Input(EXPORT_FILENAME, placeholder="File path", id="data-path")
                yield Button("Export", id="export-data")
                yield Button("Import", id="import-data")

            yield Static("[bold]Manage Existing Units[/]", markup=True)
            yield Vertical(id="admin-unit-list")
            yield Button("Close", id="close-admin")

    async def on_mount(self) -> None:
        self._reset_form()
        await self._render_unit_list()

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id or ""
        if button_id == "save-unit":
            self._save_unit()
        elif button_id == "cancel-edit":
            self.session.dispatch(CancelEdit())
            self._reset_form()
        elif button_id == "save-timers":
            self._save_timers()
        elif button_id == "export-data":
            self._export()
        elif button_id == "import-data":
            self._import()
        elif button_id == "close-admin":
            self.dismiss(None)
            return
        elif button_id.startswith("edit-"):
            self._begin_edit(event.button.name or "")
        elif button_id.startswith("take-down-"):
            self._confirm_take_down(event.button.name or "")
        await self._render_unit_list()

    def action_close(self) -> None:
        self.dismiss(None)

    def _input(self, widget_id: str) -> Input:
        return self.query_one(f"#{widget_id}", Input)

    def _alert(self, message: str) -> None:
        self.app.push_screen(AlertScreen(message))

    def _save_unit(self) -> None:
        status = str(self.query_one("#unit-status", Select).value)
        fields = (self._input("unit-id").value, self._input("unit-name").value, self._input("unit-location").value)
        editing = self.session.state.editing_unit_id
        if editing is not None:
            result = self.session.dispatch(EditUnit(editing, *fields, status=status))
        else:
            result = self.session.dispatch(AddUnit(*fields, status=status))
        if not result.ok:
            self._alert(result.message or "Unable to save unit.")
            return
        self._reset_form()

    def _begin_edit(self, unit_id: str) -> None:
        result = self.session.dispatch(BeginEdit(unit_id))
        unit = self.session.state.find(unit_id)
        if not result.ok or unit is None:
            return
        self._input("unit-id").value = unit.id
        self._input("unit-name").value = unit.name
        self._input("unit-location").value = unit.location
        self.query_one("#unit-status", Select).value = unit.status.value
        self.query_one("#unit-form-title", Static).update(f"[bold]Edit Unit: {escape(unit.name)} (ID: {escape(unit.id)})[/]")
        self.query_one("#save-unit", Button).label = "Update Unit"
        self.query_one("#cancel-edit", Button).display = True

    def _reset_form(self) -> None:
        for widget_id in ("unit-id", "unit-name", "unit-location"):
            self._input(widget_id).value = ""
        self.query_one("#unit-status", Select).value = UnitStatus.AVAILABLE.value
        self.query_one("#unit-form-title", Static).update("[bold]Add New Unit[/]")
        self.query_one("#save-unit", Button).label = "Add Unit"
        self.query_one("#cancel-edit", Button).display = False

    def _confirm_take_down(self, unit_id: str) -> None:
        async def decided(confirmed: bool | None) -> None:
            if not confirmed:
                return
            editing = self.session.state.editing_unit_id == unit_id
            self.session.dispatch(RemoveUnit(unit_id))
            if editing:
                self._reset_form()
            await self._render_unit_list()

        self.app.push_screen(
            ConfirmScreen(f"Are you sure you want to take down {unit_id}? This cannot be undone."),
            decided,
        )

    def _save_timers(self) -> None:
        result = self.session.dispatch(
            SetTimerDefaults(
                at_destination=self._input("timer-destination").value,
                logistics=self._input("timer-logistics").value,
            )
        )
        self._alert(result.message or "")

    def _export(self) -> None:
        path = Path(self._input("data-path").value.strip() or EXPORT_FILENAME)
        try:
            written = self.session.export_to(path)
        except OSError as exc:
            self._alert(f"Export failed: {exc}")
            return
        self._alert(f"Fleet data exported to {written}")

    def _import(self) -> None:
        path = Path(self._input("data-path").value.strip() or EXPORT_FILENAME)
        try:
            snapshot = self.session.read_import(path)
        except SnapshotError as exc:
            self._alert(str(exc))
            return
        except OSError:
            self._alert("Failed to read or parse JSON file.")
            return

        async def decided(confirmed: bool | None) -> None:
            if not confirmed:
                return
            result = self.session.dispatch(ReplaceFleet(snapshot))
            defaults = self.session.state.timer_defaults
            self._input("timer-destination").value = str(defaults.at_destination)
            self._input("timer-logistics").value = str(defaults.logistics)
            self._reset_form()
            await self._render_unit_list()
            self._alert(result.message or "")

        self.app.push_screen(
            ConfirmScreen("Importing new data will overwrite current fleet data. Continue?"),
            decided,
        )

    async def _render_unit_list(self) -> None:
        container = self.query_one("#admin-unit-list", Vertical)
        await container.remove_children()
        units = self.session.state.units
        if not units:
            await container.mount(Static("No units currently in the system."))
            return
        rows = []
        for index, unit in enumerate(units):
            details = f"({escape(unit.location)} - Status: {status_label(unit.status)})"
            rows.append(
                Horizontal(
                    Static(f"[bold]{escape(unit.id)}[/] - {escape(unit.name)} [dim]{details}[/]", markup=True, classes="admin-unit"),
                    Button("Edit", id=f"edit-{index}", name=unit.id),
                    Button("Take Down", variant="error", id=f"take-down-{index}", name=unit.id),
                    classes="admin-unit-row",
                )
            )
        await container.mount_all(rows)
