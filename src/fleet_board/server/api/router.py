from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from fleet_board.server.api import schemas
from fleet_board.server.store import DocumentStore, StoreError, format_stamp

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

BACKUP_FILENAME = "truck-backup.json"


def _store(request: Request) -> DocumentStore:
    return request.app.state.store


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _read_body(request: Request) -> Any:
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None


def _has_truck_list(body: Any) -> bool:
    return isinstance(body, dict) and isinstance(body.get("trucks"), list)


@router.get(
    "/trucks",
    response_model=schemas.FleetDocument,
    responses={500: {"model": schemas.ErrorResponse}},
)
async def get_trucks(request: Request):
    try:
        document = await run_in_threadpool(_store(request).read)
        return schemas.FleetDocument.model_validate(document)
    except (StoreError, ValidationError):
        logger.exception("Error reading truck data")
        return _error(500, "Failed to read truck data")


@router.post(
    "/trucks",
    response_model=schemas.SaveResponse,
    responses={400: {"model": schemas.ErrorResponse}, 500: {"model": schemas.ErrorResponse}},
)
async def save_trucks(request: Request):
    body = await _read_body(request)
    if not _has_truck_list(body):
        return _error(400, "Invalid truck data")
    try:
        payload = schemas.SaveRequest.model_validate(body)
    except ValidationError as exc:
        logger.warning("Rejected truck data: %s", exc.errors()[:3])
        return _error(400, "Invalid truck data")

    trucks = [unit.model_dump(mode="json", by_alias=True) for unit in payload.trucks]
    timer_defaults = None
    if payload.timer_defaults is not None:
        timer_defaults = payload.timer_defaults.model_dump(mode="json", by_alias=True)
    try:
        stamp = await run_in_threadpool(_store(request).write, trucks, timer_defaults)
    except StoreError:
        logger.exception("Error saving truck data")
        return _error(500, "Failed to save truck data")

    logger.info("Saved %d units (stamp %s)", len(trucks), stamp)
    return schemas.SaveResponse(success=True, message="Truck data saved successfully", last_updated=stamp)


@router.get("/status", response_model=schemas.StatusResponse)
async def get_status(request: Request):
    return schemas.StatusResponse(
        status="online",
        timestamp=format_stamp(datetime.now(timezone.utc)),
        uptime=time.monotonic() - request.app.state.started_at,
    )


@router.get("/backup", responses={500: {"model": schemas.ErrorResponse}})
async def get_backup(request: Request):
    try:
        document = await run_in_threadpool(_store(request).read)
    except StoreError:
        logger.exception("Error creating backup")
        return _error(500, "Failed to create backup")
    return JSONResponse(
        content=document,
        headers={"Content-Disposition": f"attachment; filename={BACKUP_FILENAME}"},
    )


@router.post(
    "/restore",
    response_model=schemas.RestoreResponse,
    responses={400: {"model": schemas.ErrorResponse}, 500: {"model": schemas.ErrorResponse}},
)
async def restore_backup(request: Request):
    body = await _read_body(request)
    if not _has_truck_list(body):
        return _error(400, "Invalid backup data")
    try:
        payload = schemas.SaveRequest.model_validate(body)
    except ValidationError as exc:
        logger.warning("Rejected backup data: %s", exc.errors()[:3])
        return _error(400, "Invalid backup data")

    document = dict(body)
    document["trucks"] = [unit.model_dump(mode="json", by_alias=True) for unit in payload.trucks]
    if payload.timer_defaults is not None:
        document["timerDefaults"] = payload.timer_defaults.model_dump(mode="json", by_alias=True)
    try:
        await run_in_threadpool(_store(request).restore, document)
    except StoreError:
        logger.exception("Error restoring backup")
        return _error(500, "Failed to restore backup")

    logger.info("Restored %d units from backup", len(document["trucks"]))
    return schemas.RestoreResponse(success=True, message="Data restored from backup successfully")
