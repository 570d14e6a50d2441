from __future__ import annotations

import os
import socket

import pytest
import uvicorn

from fleet_board.server import __main__ as run_server
from fleet_board.server.__main__ import find_available_port
from fleet_board.server.main import DATA_FILE_ENV


class _DummyServer:
    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


def test_find_available_port_falls_back_when_port_in_use(monkeypatch: pytest.MonkeyPatch):
    calls: list[tuple[str, int]] = []

    def fake_create_server(addr, reuse_port=False):
        host, port = addr
        calls.append((host, port))
        if len(calls) == 1:
            raise OSError("Address already in use")
        return _DummyServer()

    monkeypatch.setattr(socket, "create_server", fake_create_server)

    chosen_port, did_fallback = find_available_port("127.0.0.1", 3000, max_tries=10)

    assert did_fallback is True
    assert chosen_port == 3001
    assert calls == [("127.0.0.1", 3000), ("127.0.0.1", 3001)]


def test_find_available_port_gives_up_after_max_tries(monkeypatch: pytest.MonkeyPatch):
    def busy(addr, reuse_port=False):
        raise OSError("Address already in use")

    monkeypatch.setattr(socket, "create_server", busy)

    with pytest.raises(RuntimeError, match="No available port found starting at 3000 after 3 attempts"):
        find_available_port("127.0.0.1", 3000, max_tries=3)


def test_find_available_port_rejects_invalid_max_tries():
    with pytest.raises(ValueError):
        find_available_port("127.0.0.1", 3000, max_tries=0)


def test_main_points_uvicorn_at_the_data_file(monkeypatch: pytest.MonkeyPatch, tmp_path):
    captured: dict = {}
    monkeypatch.setenv(DATA_FILE_ENV, "unused.json")
    monkeypatch.setattr(socket, "create_server", lambda addr, reuse_port=False: _DummyServer())
    monkeypatch.setattr(uvicorn, "run", lambda target, **kwargs: captured.update(target=target, **kwargs))

    data_file = tmp_path / "fleet.json"
    code = run_server.main(["--host", "127.0.0.1", "--port", "3100", "--data-file", str(data_file)])

    assert code == 0
    assert captured["target"] == "fleet_board.server.main:create_default_app"
    assert captured["factory"] is True
    assert captured["port"] == 3100
    assert captured["reload"] is False
    assert os.environ[DATA_FILE_ENV] == str(data_file)
