"""
Launch the fleet board persistence service:

    python -m fleet_board.server --port 3000 --data-file truck_data.json

The launcher auto-selects a free port if the requested one is taken and
points the app at the chosen JSON document before starting uvicorn.
"""
from __future__ import annotations

import argparse
import logging
import os
import socket
import sys
from pathlib import Path

from fleet_board.server.main import DATA_FILE_ENV, DEFAULT_DATA_FILE

logger = logging.getLogger("fleet_board.server")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def find_available_port(host: str, start_port: int, *, max_tries: int = 50) -> tuple[int, bool]:
    """
    Probe sequential ports starting from start_port.
    Returns (port, did_fallback).
    """
    if max_tries < 1:
        raise ValueError("max_tries must be >= 1")

    last_error: OSError | None = None
    for offset in range(max_tries):
        port = start_port + offset
        try:
            with socket.create_server((host, port), reuse_port=False):
                return port, offset != 0
        except OSError as exc:
            last_error = exc
            continue

    msg = f"No available port found starting at {start_port} after {max_tries} attempts"
    if last_error is not None:
        msg = f"{msg} (last error: {last_error})"
    raise RuntimeError(msg)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="python -m fleet_board.server",
        description="Run the fleet board persistence API.",
    )
    parser.add_argument("--host", default="0.0.0.0", help="Host to listen on (default: %(default)s).")
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.environ.get("PORT", "3000")),
        help="Starting port (default: %(default)s).",
    )
    parser.add_argument(
        "--data-file",
        type=Path,
        default=Path(os.environ.get(DATA_FILE_ENV, str(DEFAULT_DATA_FILE))),
        help="JSON document holding the fleet (default: %(default)s).",
    )
    parser.add_argument("--reload", action="store_true", help="Enable uvicorn --reload.")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: %(default)s).")
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format=LOG_FORMAT)

    try:
        chosen_port, did_fallback = find_available_port(args.host, args.port, max_tries=50)
    except RuntimeError as exc:
        print(f"[fleet-board] Failed to select a free port: {exc}", file=sys.stderr)
        return 2

    if did_fallback:
        logger.info("Port %d in use; serving on %d instead", args.port, chosen_port)
    logger.info("Fleet board API on http://%s:%d/api/trucks (data: %s)", args.host, chosen_port, args.data_file)

    # The factory reads the data file location from the environment, which survives --reload.
    os.environ[DATA_FILE_ENV] = str(args.data_file)

    import uvicorn

    try:
        uvicorn.run(
            "fleet_board.server.main:create_default_app",
            factory=True,
            host=args.host,
            port=chosen_port,
            reload=args.reload,
            log_level=args.log_level.lower(),
        )
    except KeyboardInterrupt:
        return 0
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
