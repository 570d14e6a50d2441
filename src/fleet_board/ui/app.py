from __future__ import annotations

import logging
from pathlib import Path

import httpx
from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.markup import escape

from fleet_board.config import BoardConfig
from fleet_board.engine.snapshot import EXPORT_FILENAME
from fleet_board.engine.state import FleetState
from fleet_board.session import BoardSession
from fleet_board.sync.controller import SyncController
from fleet_board.sync.local_store import LocalBackupStore
from fleet_board.ui.admin import AdminScreen
from fleet_board.ui.board import BoardScreen
from fleet_board.ui.modals import AlertScreen, ConfirmScreen

logger = logging.getLogger(__name__)


class FleetBoardApp(App[None]):
    CSS_PATH = "app.tcss"
    TITLE = "Fleet Status Board"

    BINDINGS = [
        Binding("s", "sync", "Sync"),
        Binding("a", "admin", "Admin"),
        Binding("e", "export", "Export"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(self, config: BoardConfig, client: httpx.AsyncClient) -> None:
        super().__init__()
        self.config = config
        self.client = client
        state = FleetState.new()
        controller = SyncController(
            state,
            client,
            LocalBackupStore(config.backup_dir),
            notify=self._notice,
        )
        self.session = BoardSession(
            state=state,
            controller=controller,
            schedule=lambda coro: self.run_worker(coro, group="push"),
        )

    def compose(self) -> ComposeResult:
        return []

    def on_mount(self) -> None:
        self.install_screen(
            BoardScreen(self.session, refresh_interval_s=self.config.refresh_interval_s),
            name="board",
        )
        self.push_screen("board")
        self.run_worker(self.session.controller.initial_load(), group="load", exclusive=True)
        self.set_interval(self.config.poll_interval_s, self._schedule_poll)

    async def on_unmount(self) -> None:
        await self.client.aclose()

    def _notice(self, message: str, blocking: bool) -> None:
        if blocking:
            self.push_screen(AlertScreen(message))
        else:
            self.notify(message, severity="warning")

    def _schedule_poll(self) -> None:
        controller = self.session.controller
        if controller.loading:
            return
        self.run_worker(controller.poll(), group="poll", exclusive=True)

    def action_sync(self) -> None:
        self._manual_sync()

    @work(group="sync", exclusive=True)
    async def _manual_sync(self) -> None:
        async def confirm(message: str) -> bool:
            return bool(await self.push_screen_wait(ConfirmScreen(message)))

        if await self.session.controller.manual_sync(confirm):
            self.notify("Synced with server.")

    def action_admin(self) -> None:
        self.push_screen(AdminScreen(self.session))

    def action_export(self) -> None:
        try:
            written = self.session.export_to(Path.cwd() / EXPORT_FILENAME)
        except OSError as exc:
            logger.error("Export failed: %s", exc)
            self.push_screen(AlertScreen(f"Export failed: {exc}"))
            return
        self.notify(f"Fleet data exported to {escape(str(written))}")
