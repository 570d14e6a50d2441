from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path

import httpx

from fleet_board.config import BoardConfig
from fleet_board.ui.app import FleetBoardApp

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def build_config(argv: list[str] | None = None) -> tuple[BoardConfig, argparse.Namespace]:
    config = BoardConfig.from_env()
    parser = argparse.ArgumentParser(
        prog="python -m fleet_board",
        description="Terminal status board for an ambulance fleet.",
    )
    parser.add_argument("--server-url", default=config.server_url, help="Persistence service base URL.")
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=config.poll_interval_s,
        help="Seconds between background polls of the server.",
    )
    parser.add_argument(
        "--backup-dir",
        type=Path,
        default=config.backup_dir,
        help="Directory holding this device's local backup.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Write client logs to this file (the terminal is owned by the UI).",
    )
    args = parser.parse_args(argv)
    if args.poll_interval <= 0:
        parser.error("--poll-interval must be positive")
    config = replace(
        config,
        server_url=args.server_url,
        poll_interval_s=args.poll_interval,
        backup_dir=args.backup_dir,
    )
    return config, args


def main(argv: list[str] | None = None) -> int:
    config, args = build_config(argv)
    if args.log_file is not None:
        logging.basicConfig(filename=args.log_file, level=logging.INFO, format=LOG_FORMAT)

    client = httpx.AsyncClient(base_url=config.server_url, timeout=config.request_timeout_s)
    FleetBoardApp(config, client).run()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
