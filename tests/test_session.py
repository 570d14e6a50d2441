import asyncio
import json

import httpx
import pytest

from fleet_board.engine.actions import BeginEdit, CycleStatus, SetStatus, SetTimerDefaults
from fleet_board.engine.snapshot import EXPORT_FILENAME, SnapshotError
from fleet_board.engine.types import UnitStatus
from fleet_board.session import BoardSession
from fleet_board.sync.controller import SyncController
from fleet_board.sync.local_store import LocalBackupStore
from tests.helpers.factories import FakeClock, make_state, make_unit


def _recording_transport(posted: list) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        posted.append(json.loads(request.content))
        return httpx.Response(
            200,
            json={"success": True, "message": "ok", "lastUpdated": "2026-01-01T00:00:00.000Z"},
        )

    return httpx.MockTransport(handler)


def _drive(tmp_path, state, actions):
    """Dispatch actions, then run every push the session scheduled."""
    posted: list = []

    async def main():
        scheduled = []
        async with httpx.AsyncClient(transport=_recording_transport(posted), base_url="http://testserver") as client:
            controller = SyncController(state, client, LocalBackupStore(tmp_path / "device"))
            session = BoardSession(state=state, controller=controller, schedule=scheduled.append, clock=FakeClock())
            results = [session.dispatch(action) for action in actions]
            for coro in scheduled:
                await coro
        return results, len(scheduled)

    results, pushes = asyncio.run(main())
    return results, pushes, posted


def test_changes_schedule_a_push(tmp_path) -> None:
    state = make_state([make_unit("Med-1")])
    results, pushes, posted = _drive(tmp_path, state, [CycleStatus("Med-1"), SetStatus("Med-1", "onScene")])
    assert all(result.ok for result in results)
    assert pushes == 2
    assert posted[-1]["trucks"][0]["status"] == "onScene"


def test_no_push_without_a_change(tmp_path) -> None:
    state = make_state([make_unit("Med-1", status=UnitStatus.LOGISTICS, timer_end_time=1)])
    actions = [
        CycleStatus("Med-1"),
        BeginEdit("Med-1"),
        SetStatus("Med-9", "available"),
        SetTimerDefaults(at_destination=0, logistics=5),
    ]
    _, pushes, posted = _drive(tmp_path, state, actions)
    assert pushes == 0
    assert posted == []


def _session(state) -> BoardSession:
    # Export and import never touch the network; pushes are discarded unstarted.
    controller = SyncController(state, httpx.AsyncClient(base_url="http://testserver"), LocalBackupStore("."))
    return BoardSession(state=state, controller=controller, schedule=lambda coro: coro.close(), clock=FakeClock())


def test_export_into_directory_uses_default_filename(tmp_path) -> None:
    session = _session(make_state([make_unit("Med-1")]))
    written = session.export_to(tmp_path)
    assert written == tmp_path / EXPORT_FILENAME
    data = json.loads(written.read_text(encoding="utf-8"))
    assert data["trucks"][0]["id"] == "Med-1"
    assert data["timerDefaults"] == {"atDestination": 20, "logistics": 10}


def test_import_validates_without_applying(tmp_path) -> None:
    source = _session(make_state([make_unit("Med-4", status=UnitStatus.AT_DESTINATION, timer_end_time=5)]))
    path = source.export_to(tmp_path / "fleet.json")

    target_state = make_state([make_unit("Med-1")])
    snapshot = _session(target_state).read_import(path)
    assert [unit.id for unit in snapshot.units] == ["Med-4"]
    assert [unit.id for unit in target_state.units] == ["Med-1"]


def test_import_rejects_partial_file(tmp_path) -> None:
    path = tmp_path / "fleet.json"
    path.write_text(json.dumps({"trucks": []}), encoding="utf-8")
    with pytest.raises(SnapshotError):
        _session(make_state([])).read_import(path)
