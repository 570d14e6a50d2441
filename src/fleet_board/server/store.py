"""Single-document JSON store backing the persistence API."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable

from fleet_board.engine.snapshot import load_default_snapshot
from fleet_board.engine.types import TimerDefaults

logger = logging.getLogger(__name__)

UNIT_FIELDS = ("id", "name", "location", "status", "timerEndTime")
STAMP_STEP = timedelta(milliseconds=1)


class StoreError(Exception):
    """Raised when the stored document cannot be read or written."""


def format_stamp(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_stamp(value: object) -> datetime | None:
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DocumentStore:
    """The whole fleet as one JSON file, replaced wholesale on every write.

    Writes are serialized by a lock and land through ``os.replace`` so a
    reader never sees a partial file. Every write gets a ``lastUpdated``
    stamp strictly later than the previous one.
    """

    def __init__(self, path: Path, *, clock: Callable[[], datetime] = _utc_now) -> None:
        self.path = Path(path)
        self._clock = clock
        self._lock = threading.Lock()
        self._last_stamp: datetime | None = None

    def read(self) -> dict[str, Any]:
        with self._lock:
            try:
                return self._load()
            except FileNotFoundError:
                logger.info("No fleet document at %s; creating default fleet", self.path)
                return self._write_locked(self._default_document())

    def write(self, trucks: list[dict[str, Any]], timer_defaults: dict[str, Any] | None) -> str:
        document = {
            "trucks": [_wire_unit(unit) for unit in trucks],
            "timerDefaults": timer_defaults if timer_defaults else TimerDefaults().to_dict(),
        }
        with self._lock:
            return self._write_locked(document)["lastUpdated"]

    def restore(self, document: dict[str, Any]) -> str:
        """Replace the store with a full backup document."""
        restored = dict(document)
        restored["trucks"] = [_wire_unit(unit) for unit in document["trucks"]]
        if not restored.get("timerDefaults"):
            restored["timerDefaults"] = TimerDefaults().to_dict()
        with self._lock:
            return self._write_locked(restored)["lastUpdated"]

    def _load(self) -> dict[str, Any]:
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                document = json.load(handle)
        except FileNotFoundError:
            raise
        except json.JSONDecodeError as exc:
            raise StoreError(f"Invalid JSON in fleet document: {exc}") from exc
        except OSError as exc:
            raise StoreError(f"Cannot read fleet document: {exc}") from exc
        if not isinstance(document, dict):
            raise StoreError("Fleet document root must be an object")
        stamp = parse_stamp(document.get("lastUpdated"))
        if stamp is not None and (self._last_stamp is None or stamp > self._last_stamp):
            self._last_stamp = stamp
        return document

    def _write_locked(self, document: dict[str, Any]) -> dict[str, Any]:
        if self._last_stamp is None and self.path.exists():
            try:
                self._load()
            except StoreError:
                logger.warning("Overwriting unreadable fleet document at %s", self.path)
        stamp = self._next_stamp()
        stored = dict(document)
        stored["lastUpdated"] = format_stamp(stamp)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(stored, handle, indent=2)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise StoreError(f"Cannot write fleet document: {exc}") from exc

        self._last_stamp = stamp
        return stored

    def _next_stamp(self) -> datetime:
        # Millisecond precision on the wire, so truncate before comparing.
        now = self._clock().astimezone(timezone.utc)
        now = now.replace(microsecond=now.microsecond // 1000 * 1000)
        if self._last_stamp is not None and now <= self._last_stamp:
            now = self._last_stamp + STAMP_STEP
        return now

    def _default_document(self) -> dict[str, Any]:
        return load_default_snapshot().to_wire()


def _wire_unit(unit: dict[str, Any]) -> dict[str, Any]:
    return {key: unit.get(key) for key in UNIT_FIELDS}
