"""
Purpose: Domain models for the facility network.
What it does:
- Defines core data structures:
- Facility (name, coordinates, address, type)
- Leg (one scheduled directional movement between two facilities)
- DegreeStats (in/out leg counts per facility)

Defines enums/constants:
- FacilityType = Gateway | Hub | IPC | Other
- NO_ROUTE sentinel for legs without a route id / route-set id

Rule: No parsing, no grouping, no HTTP. Models only.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from .clock import TimeOfDay

LatLon = Tuple[float, float]

# Route id / route-set id value for legs that are not part of a run
NO_ROUTE = "none"

RouteGroupKey = Tuple[str, str]
SENTINEL_GROUP_KEY: RouteGroupKey = (NO_ROUTE, NO_ROUTE)

DEFAULT_ADDRESS = "Address not available"


class FacilityType(str, Enum):
    GATEWAY = "Gateway"
    HUB = "Hub"
    IPC = "IPC"
    OTHER = "Other"

    @classmethod
    def from_name(cls, name: str) -> FacilityType:
        """
        Facility names carry their type as the last underscore token,
        e.g. "DEL_Bilaspur_GW" or "BLR_Nelamangala_H".
        """
        if not name:
            return cls.OTHER
        suffix = name.split("_")[-1].strip().upper()
        if suffix == "GW":
            return cls.GATEWAY
        if suffix in ("H", "HUB"):
            return cls.HUB
        if suffix == "I":
            return cls.IPC
        return cls.OTHER


@dataclass(frozen=True)
class Facility:
    """
    A physical location. Identity is the trimmed name.
    """

    name: str
    lat: float
    lng: float
    address: str = DEFAULT_ADDRESS
    type: FacilityType = FacilityType.OTHER

    @property
    def location(self) -> LatLon:
        return (self.lat, self.lng)


@dataclass(frozen=True)
class Leg:
    """
    One scheduled directional movement between two facilities.

    `departure` / `arrival` keep the schedule's raw text so dedup and display
    stay faithful to the input; use `departure_time` / `arrival_time` for
    ordering and arithmetic.
    """

    origin: str
    destination: str
    vehicle_mode: str = "UNKNOWN"
    vehicle_size: str = "Unknown"
    departure: str = ""
    arrival: str = ""
    tat_hours: Optional[float] = None
    route_id: str = NO_ROUTE
    route_set_id: str = NO_ROUTE

    @property
    def departure_time(self) -> Optional[TimeOfDay]:
        return TimeOfDay.parse(self.departure)

    @property
    def arrival_time(self) -> Optional[TimeOfDay]:
        return TimeOfDay.parse(self.arrival)

    @property
    def group_key(self) -> RouteGroupKey:
        return (self.route_id, self.route_set_id)

    @property
    def is_keyed(self) -> bool:
        return self.group_key != SENTINEL_GROUP_KEY

    @property
    def identity(self) -> Tuple:
        # two rows equal on all of these are the same leg
        return (
            self.origin,
            self.destination,
            self.departure,
            self.arrival,
            self.tat_hours,
            self.vehicle_mode,
            self.vehicle_size,
            self.route_id,
            self.route_set_id,
        )


@dataclass(frozen=True)
class DegreeStats:
    inbound: int = 0
    outbound: int = 0

    @property
    def is_active(self) -> bool:
        return self.inbound > 0 or self.outbound > 0


@dataclass(frozen=True)
class FacilityBuildResult:
    facilities: List[Facility]
    total_rows: int
    active_count: int


@dataclass(frozen=True)
class LegBuildResult:
    legs: List[Leg]
    total_rows: int
    valid_count: int
