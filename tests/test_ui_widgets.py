import httpx
from textual.content import Content

from fleet_board.engine.display import build_unit_view
from fleet_board.engine.types import MS_PER_MINUTE, UnitStatus
from fleet_board.sync.controller import SyncController, SyncState
from fleet_board.sync.local_store import LocalBackupStore
from fleet_board.ui.admin import STATUS_OPTIONS, AdminScreen
from fleet_board.ui.board import BoardScreen
from fleet_board.ui.widgets import STATUS_CLASSES, HeaderBar, UnitTile, status_class, tile_markup
from tests.helpers.factories import NOW_MS, make_state, make_unit


def test_unit_tile_uses_textual_hook_names() -> None:
    assert hasattr(UnitTile, "on_mount")
    assert hasattr(UnitTile, "on_click")
    assert hasattr(BoardScreen, "on_unit_tile_pressed")
    assert hasattr(AdminScreen, "on_button_pressed")

    assert "_on_mount" not in UnitTile.__dict__
    assert "_on_click" not in UnitTile.__dict__


def test_status_classes_cover_every_status() -> None:
    assert status_class(UnitStatus.EN_ROUTE_TO_DESTINATION) == "status-enRouteToDestination"
    assert len(STATUS_CLASSES) == len(set(STATUS_CLASSES)) == 7
    assert [value for _, value in STATUS_OPTIONS][0] == "available"


def test_tile_markup_shows_timer_for_timed_units() -> None:
    unit = make_unit("Med-2", location="Iva", status=UnitStatus.AT_DESTINATION, timer_end_time=NOW_MS + MS_PER_MINUTE)
    markup = tile_markup(build_unit_view(unit, NOW_MS))
    assert "[bold]Med-2[/]" in markup
    assert "At Destination" in markup
    assert "Time: 01:00" in markup

    idle = tile_markup(build_unit_view(make_unit("Med-3"), NOW_MS))
    assert "Time:" not in idle


def test_header_reports_sync_state_and_pause() -> None:
    state = make_state([make_unit("Med-1"), make_unit("Med-2", status=UnitStatus.DISPATCHED)])
    controller = SyncController(state, httpx.AsyncClient(base_url="http://testserver"), LocalBackupStore("."))
    header = HeaderBar(controller)

    text = header.render()
    assert "INITIALIZING" in text
    assert "POLLING PAUSED" not in text

    controller.sync_state = SyncState.DIVERGED
    controller.polling_paused = True
    text = header.render()
    assert "DIVERGED" in text
    assert "POLLING PAUSED" in text


def test_tile_markup_keeps_bracketed_text_literal() -> None:
    unit = make_unit("Med-[x]", name="Bay [/] 2", location="[b]Iva")
    markup = tile_markup(build_unit_view(unit, NOW_MS))
    plain = Content.from_markup(markup).plain
    assert "Med-[x]" in plain
    assert "Bay [/] 2 - Available" in plain
    assert "[b]Iva" in plain


def test_header_keeps_unparsed_stamp_literal() -> None:
    state = make_state([make_unit("Med-1")])
    controller = SyncController(state, httpx.AsyncClient(base_url="http://testserver"), LocalBackupStore("."))
    controller.last_sync_label = "[/]not-a-stamp"
    plain = Content.from_markup(HeaderBar(controller).render()).plain
    assert "LAST SYNC: [/]not-a-stamp" in plain
