from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Container
from textual.screen import Screen
from textual.widgets import Footer

from fleet_board.engine.actions import CycleStatus, SetStatus
from fleet_board.session import BoardSession
from fleet_board.ui.modals import AlertScreen, StatusMenuScreen
from fleet_board.ui.widgets import HeaderBar, UnitTile


class BoardScreen(Screen):
    """The status board: a header and one tile per unit, refreshed every tick."""

    def __init__(self, session: BoardSession, *, refresh_interval_s: float = 1.0) -> None:
        super().__init__()
        self.session = session
        self.refresh_interval_s = refresh_interval_s

    def compose(self) -> ComposeResult:
        yield HeaderBar(self.session.controller, classes="header-bar")
        yield Container(id="board-grid")
        yield Footer()

    async def on_mount(self) -> None:
        await self.refresh_board()
        self.set_interval(self.refresh_interval_s, self.refresh_board)

    async def refresh_board(self) -> None:
        """Recompute every tile from the current clock; rebuild tiles if the fleet changed."""
        view = self.session.view()
        self.query_one(HeaderBar).update_view(view)

        grid = self.query_one("#board-grid", Container)
        tiles = list(grid.query(UnitTile))
        if [tile.unit_view.unit_id for tile in tiles] != [unit.unit_id for unit in view.units]:
            await grid.remove_children()
            await grid.mount_all([UnitTile(unit) for unit in view.units])
            return
        for tile, unit in zip(tiles, view.units):
            tile.show(unit)

    async def on_unit_tile_pressed(self, event: UnitTile.Pressed) -> None:
        if event.menu:
            unit_id = event.unit_id

            def picked(status: str | None) -> None:
                if status is not None:
                    self._dispatch(SetStatus(unit_id, status))

            self.app.push_screen(StatusMenuScreen(unit_id), picked)
            return
        self._dispatch(CycleStatus(event.unit_id))

    def _dispatch(self, action) -> None:
        result = self.session.dispatch(action)
        if not result.ok and result.message:
            self.app.push_screen(AlertScreen(result.message))
        self.call_later(self.refresh_board)
