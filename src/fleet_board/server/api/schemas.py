from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from fleet_board.engine.types import UnitStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, validate_by_name=True)


class UnitPayload(CamelModel):
    id: str
    name: str
    location: str
    status: UnitStatus
    timer_end_time: Optional[int] = Field(None, alias="timerEndTime")


class TimerDefaultsPayload(CamelModel):
    at_destination: int = Field(20, alias="atDestination", gt=0)
    logistics: int = Field(10, gt=0)


class SaveRequest(CamelModel):
    trucks: List[UnitPayload]
    timer_defaults: Optional[TimerDefaultsPayload] = Field(None, alias="timerDefaults")
    client_timestamp: Optional[int] = Field(None, alias="clientTimestamp")


class FleetDocument(CamelModel):
    trucks: List[UnitPayload]
    timer_defaults: TimerDefaultsPayload = Field(default_factory=TimerDefaultsPayload, alias="timerDefaults")
    last_updated: str = Field(..., alias="lastUpdated")


class SaveResponse(CamelModel):
    success: bool
    message: str
    last_updated: str = Field(..., alias="lastUpdated")


class RestoreResponse(CamelModel):
    success: bool
    message: str


class StatusResponse(CamelModel):
    status: str
    timestamp: str
    uptime: float


class ErrorResponse(CamelModel):
    error: str
