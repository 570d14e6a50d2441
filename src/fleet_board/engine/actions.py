"""Action definitions for reducer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias, Union

from fleet_board.engine.snapshot import FleetSnapshot


@dataclass(frozen=True)
class SetStatus:
    unit_id: str
    status: str


@dataclass(frozen=True)
class CycleStatus:
    unit_id: str


@dataclass(frozen=True)
class AddUnit:
    unit_id: str
    name: str
    location: str
    status: str = "available"


@dataclass(frozen=True)
class BeginEdit:
    unit_id: str


@dataclass(frozen=True)
class EditUnit:
    unit_id: str
    new_id: str
    name: str
    location: str
    status: str


@dataclass(frozen=True)
class CancelEdit:
    pass


@dataclass(frozen=True)
class RemoveUnit:
    unit_id: str


@dataclass(frozen=True)
class SetTimerDefaults:
    # Raw form input is accepted; the reducer parses digit strings.
    at_destination: int | str
    logistics: int | str


@dataclass(frozen=True)
class ReplaceFleet:
    snapshot: FleetSnapshot


Action: TypeAlias = Union[
    SetStatus,
    CycleStatus,
    AddUnit,
    BeginEdit,
    EditUnit,
    CancelEdit,
    RemoveUnit,
    SetTimerDefaults,
    ReplaceFleet,
]
