"""Client configuration, loaded from environment variables with sensible defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_SERVER_URL = "http://localhost:3000"
DEFAULT_BACKUP_DIR = Path.home() / ".fleet_board"


@dataclass(frozen=True)
class BoardConfig:
    server_url: str = DEFAULT_SERVER_URL
    poll_interval_s: float = 30.0
    refresh_interval_s: float = 1.0
    request_timeout_s: float = 10.0
    backup_dir: Path = DEFAULT_BACKUP_DIR

    @classmethod
    def from_env(cls) -> "BoardConfig":
        """Load configuration from environment variables."""
        return cls(
            server_url=os.environ.get("FLEET_BOARD_SERVER_URL", DEFAULT_SERVER_URL),
            poll_interval_s=float(os.environ.get("FLEET_BOARD_POLL_INTERVAL", "30")),
            request_timeout_s=float(os.environ.get("FLEET_BOARD_TIMEOUT", "10")),
            backup_dir=Path(os.environ.get("FLEET_BOARD_BACKUP_DIR", str(DEFAULT_BACKUP_DIR))),
        )
