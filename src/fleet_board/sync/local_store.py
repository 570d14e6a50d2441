from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

BACKUP_SLOT = "truckDispatchBackup"


class LocalStoreError(Exception):
    """Raised when the on-device backup slot cannot be read or written."""


class LocalBackupStore:
    """One named slot on this device holding the last known good snapshot."""

    def __init__(self, directory: Path, slot: str = BACKUP_SLOT) -> None:
        self.path = Path(directory) / f"{slot}.json"

    def load(self) -> dict[str, Any] | None:
        """Return the stored payload, or None if nothing was ever saved."""
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as exc:
            raise LocalStoreError(f"Could not read local backup: {exc}") from exc
        if not isinstance(payload, dict):
            raise LocalStoreError("Local backup root must be an object")
        return payload

    def save(self, payload: dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(payload, handle)
                os.replace(tmp_name, self.path)
            except OSError:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise LocalStoreError(f"Could not save local backup: {exc}") from exc
