from __future__ import annotations

import logging
import os
import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fleet_board import __version__
from fleet_board.server.api import router as api_router
from fleet_board.server.store import DocumentStore

DEFAULT_DATA_FILE = Path("truck_data.json")
DATA_FILE_ENV = "FLEET_BOARD_DATA_FILE"

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Serving fleet document %s", app.state.store.path)
    yield


def create_app(data_file: Path | str | None = None, *, store: DocumentStore | None = None) -> FastAPI:
    app = FastAPI(title="Fleet Status Board", version=__version__, lifespan=lifespan)

    # Boards are opened from other hosts on the LAN.
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["GET", "POST"], allow_headers=["*"])

    if store is None:
        path = Path(data_file or os.environ.get(DATA_FILE_ENV) or DEFAULT_DATA_FILE)
        store = DocumentStore(path)
    app.state.store = store
    app.state.started_at = time.monotonic()

    app.include_router(api_router)

    return app


def create_default_app() -> FastAPI:
    """Factory used by the launcher (``uvicorn --factory``)."""
    return create_app()
