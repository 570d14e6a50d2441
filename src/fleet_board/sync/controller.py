"""Keeps the local fleet aligned with the persistence service.

The controller owns no fleet data of its own. It reads and replaces the
injected :class:`FleetState` and tracks where that state came from:

    INITIALIZING --load ok--> SYNCED <--push/poll/sync ok-- DIVERGED
         |                      |                              ^
         +------load failed-----+--------push failed-----------+

Every failure degrades to the best state available in memory; nothing here
raises to the caller. Push and poll may race; whichever response is applied
last wins.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Iterator

import httpx

from fleet_board.engine.snapshot import FleetSnapshot, SnapshotError, parse_snapshot, snapshot_to_wire
from fleet_board.engine.state import FleetState
from fleet_board.engine.types import epoch_ms
from fleet_board.sync.local_store import LocalBackupStore, LocalStoreError

logger = logging.getLogger(__name__)

TRUCKS_ENDPOINT = "/api/trucks"

SYNC_PROMPT = "Sync with server? This will reload data from the server."
LOADED_BACKUP_NOTICE = "Server unavailable. Loaded backup data from this device."
USING_DEFAULTS_NOTICE = "Could not load data from server. Using defaults."
BACKUP_UNREADABLE_NOTICE = "Could not load data. Using default values."
SAVED_LOCALLY_NOTICE = "Server unavailable. Data saved locally as backup."
SAVE_FAILED_NOTICE = "Failed to save data to server and locally. Please try again."
POLLING_PAUSED_NOTICE = "Server unreachable. Polling paused; retrying on the next interval."

LABEL_JUST_NOW = "Just now"
LABEL_LOCAL_BACKUP = "Local backup"
LABEL_DEFAULTS = "Using defaults"

Notify = Callable[[str, bool], None]  # (message, blocking)
Confirm = Callable[[str], Awaitable[bool]]


class SyncState(str, Enum):
    INITIALIZING = "initializing"
    SYNCED = "synced"
    DIVERGED = "diverged"


class DataSource(str, Enum):
    SERVER = "server"
    LOCAL_BACKUP = "local_backup"
    DEFAULTS = "defaults"


class SyncError(Exception):
    """The backend could not be reached or answered with something unusable."""


def _ignore_notice(message: str, blocking: bool) -> None:
    pass


def stamp_label(stamp: str | None) -> str:
    if not stamp:
        return LABEL_JUST_NOW
    try:
        moment = datetime.fromisoformat(stamp.replace("Z", "+00:00"))
    except ValueError:
        return stamp
    return moment.astimezone().strftime("%Y-%m-%d %H:%M:%S")


class SyncController:
    def __init__(
        self,
        state: FleetState,
        client: httpx.AsyncClient,
        backup: LocalBackupStore,
        *,
        notify: Notify = _ignore_notice,
        clock: Callable[[], int] = epoch_ms,
        endpoint: str = TRUCKS_ENDPOINT,
    ) -> None:
        self.state = state
        self.client = client
        self.backup = backup
        self.notify = notify
        self.clock = clock
        self.endpoint = endpoint

        self.sync_state = SyncState.INITIALIZING
        self.data_source = DataSource.DEFAULTS
        self.last_stamp: str | None = None
        self.last_sync_label = ""
        self.polling_paused = False
        self._busy = 0

    @property
    def loading(self) -> bool:
        return self._busy > 0

    @contextmanager
    def _loading(self) -> Iterator[None]:
        self._busy += 1
        try:
            yield
        finally:
            self._busy -= 1

    async def initial_load(self) -> SyncState:
        await self.load()
        return self.sync_state

    async def load(self) -> bool:
        """Fetch the remote snapshot and adopt it, falling back to the local backup."""
        with self._loading():
            try:
                snapshot = await self._fetch()
            except SyncError as exc:
                logger.warning("Loading from server failed: %s", exc)
                self._adopt_local_backup()
                return False
        self._adopt_remote(snapshot)
        logger.info("Loaded %d units from server (stamp %s)", len(snapshot.units), snapshot.last_updated)
        return True

    async def push(self) -> bool:
        """Send the full fleet to the server; always leaves a local backup behind."""
        payload = self._payload()
        with self._loading():
            try:
                stamp = await self._post(payload)
            except SyncError as exc:
                logger.warning("Saving to server failed: %s", exc)
                self.sync_state = SyncState.DIVERGED
                self._save_backup_after_failure(payload)
                return False

        self.last_stamp = stamp
        self.sync_state = SyncState.SYNCED
        self.data_source = DataSource.SERVER
        self.last_sync_label = LABEL_JUST_NOW
        try:
            self.backup.save(payload)
        except LocalStoreError as exc:
            logger.warning("Could not save local backup: %s", exc)
        return True

    async def poll(self) -> bool:
        """Adopt the remote snapshot if its stamp changed. Returns True when adopted."""
        try:
            snapshot = await self._fetch()
        except SyncError as exc:
            if not self.polling_paused:
                logger.warning("Polling paused: %s", exc)
                self.notify(POLLING_PAUSED_NOTICE, False)
            self.polling_paused = True
            return False

        if self.polling_paused:
            logger.info("Polling resumed")
        self.polling_paused = False
        if snapshot.last_updated == self.last_stamp:
            return False
        logger.info("Remote stamp changed (%s -> %s); adopting", self.last_stamp, snapshot.last_updated)
        self._adopt_remote(snapshot)
        return True

    async def manual_sync(self, confirm: Confirm) -> bool:
        """Discard local state in favour of the server's after the user agrees."""
        if not await confirm(SYNC_PROMPT):
            return False
        return await self.load()

    def _payload(self) -> dict[str, Any]:
        payload = snapshot_to_wire(self.state.units, self.state.timer_defaults)
        payload["clientTimestamp"] = self.clock()
        return payload

    async def _fetch(self) -> FleetSnapshot:
        try:
            response = await self.client.get(self.endpoint)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise SyncError(str(exc) or type(exc).__name__) from exc
        try:
            return parse_snapshot(data, now_ms=self.clock(), base_defaults=self.state.timer_defaults)
        except SnapshotError as exc:
            raise SyncError(f"Malformed server response: {exc}") from exc

    async def _post(self, payload: dict[str, Any]) -> str:
        try:
            response = await self.client.post(self.endpoint, json=payload)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise SyncError(str(exc) or type(exc).__name__) from exc
        stamp = data.get("lastUpdated") if isinstance(data, dict) else None
        if not isinstance(stamp, str):
            raise SyncError("Malformed server response: missing lastUpdated")
        return stamp

    def _adopt_remote(self, snapshot: FleetSnapshot) -> None:
        self.state.adopt(snapshot)
        self.last_stamp = snapshot.last_updated
        self.sync_state = SyncState.SYNCED
        self.data_source = DataSource.SERVER
        self.last_sync_label = stamp_label(snapshot.last_updated)

    def _adopt_local_backup(self) -> None:
        self.sync_state = SyncState.DIVERGED
        try:
            payload = self.backup.load()
            snapshot = None
            if payload is not None:
                snapshot = parse_snapshot(payload, now_ms=self.clock(), base_defaults=self.state.timer_defaults)
        except (LocalStoreError, SnapshotError) as exc:
            logger.error("Could not load backup data: %s", exc)
            self.last_sync_label = LABEL_DEFAULTS
            self.notify(BACKUP_UNREADABLE_NOTICE, False)
            return

        if snapshot is None:
            self.last_sync_label = LABEL_DEFAULTS
            self.notify(USING_DEFAULTS_NOTICE, False)
            return

        self.state.adopt(snapshot)
        self.data_source = DataSource.LOCAL_BACKUP
        self.last_sync_label = LABEL_LOCAL_BACKUP
        self.notify(LOADED_BACKUP_NOTICE, False)

    def _save_backup_after_failure(self, payload: dict[str, Any]) -> None:
        try:
            self.backup.save(payload)
        except LocalStoreError as exc:
            logger.error("Local backup failed too; fleet is held in memory only: %s", exc)
            self.notify(SAVE_FAILED_NOTICE, True)
            return
        self.last_sync_label = LABEL_LOCAL_BACKUP
        self.notify(SAVED_LOCALLY_NOTICE, False)
