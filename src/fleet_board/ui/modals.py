from __future__ import annotations

from typing import Optional

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.markup import escape
from textual.screen import ModalScreen
from textual.widgets import Button, OptionList, Static
from textual.widgets.option_list import Option

from fleet_board.engine.display import status_label
from fleet_board.engine.types import ALL_STATUSES


class ConfirmScreen(ModalScreen[bool]):
    """Blocking yes/no question; dismisses with the choice."""

    BINDINGS = [("escape", "cancel", "Cancel")]

    def __init__(self, message: str, *, title: str = "Confirmation") -> None:
        super().__init__()
        self.message = message
        self.title_text = title

    def compose(self) -> ComposeResult:
        with Vertical(classes="modal-box"):
            yield Static(f"[bold]{escape(self.title_text)}[/]", markup=True, classes="modal-title")
            yield Static(self.message, markup=False, classes="modal-message")
            with Horizontal(classes="modal-buttons"):
                yield Button("Confirm", variant="primary", id="modal-confirm")
                yield Button("Cancel", id="modal-cancel")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "modal-confirm")

    def action_cancel(self) -> None:
        self.dismiss(False)


class AlertScreen(ModalScreen[None]):
    """Blocking notice with a single OK button."""

    BINDINGS = [("escape", "close", "Close")]

    def __init__(self, message: str) -> None:
        super().__init__()
        self.message = message

    def compose(self) -> ComposeResult:
        with Vertical(classes="modal-box alert-type"):
            yield Static("[bold]Notification[/]", markup=True, classes="modal-title")
            yield Static(self.message, markup=False, classes="modal-message")
            with Horizontal(classes="modal-buttons"):
                yield Button("OK", variant="primary", id="modal-ok")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(None)

    def action_close(self) -> None:
        self.dismiss(None)


class StatusMenuScreen(ModalScreen[Optional[str]]):
    """Explicit status picker, the only way to reach logistics and unavailable."""

    BINDINGS = [("escape", "close", "Close")]

    def __init__(self, unit_id: str) -> None:
        super().__init__()
        self.unit_id = unit_id

    def compose(self) -> ComposeResult:
        with Vertical(classes="modal-box status-menu"):
            yield Static(f"[bold]{escape(self.unit_id)}[/]", markup=True, classes="modal-title")
            yield OptionList(*(Option(status_label(status), id=status.value) for status in ALL_STATUSES))

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        self.dismiss(event.option.id)

    def action_close(self) -> None:
        self.dismiss(None)
