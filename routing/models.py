"""
Purpose: Data structures produced by the route path resolver.
What it does:
- RoutingProvider = FREE | PRECISION
- ResolutionState = UNRESOLVED | RESOLVING | RESOLVED | RESOLVE_FAILED
- ResolvedPath with per-hop legs and (two-point) road segments
- BatchOutcome, one per unit streamed out of a batch

Rule: No HTTP and no cache logic. Models only.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

LatLon = Tuple[float, float]


class RoutingProvider(str, Enum):
    FREE = "FREE"
    PRECISION = "PRECISION"


class ResolutionState(str, Enum):
    UNRESOLVED = "UNRESOLVED"
    RESOLVING = "RESOLVING"
    RESOLVED = "RESOLVED"
    RESOLVE_FAILED = "RESOLVE_FAILED"


@dataclass(frozen=True)
class RoadSegment:
    """Distance/time travelled on one named road, summed over the route."""

    name: str
    distance_m: float
    duration_s: float

    @property
    def avg_speed_kmh(self) -> float:
        if self.duration_s <= 0:
            return 0.0
        return (self.distance_m / 1000) / (self.duration_s / 3600)


@dataclass(frozen=True)
class PathLeg:
    """Driving figures for one waypoint-to-waypoint hop."""

    distance_m: float
    duration_s: float

    @property
    def duration_minutes(self) -> float:
        return self.duration_s / 60


@dataclass(frozen=True)
class ResolvedPath:
    """
    Road path for a trip unit.

    `legs` has exactly one entry per hop between consecutive waypoints.
    `segments` is only filled for two-point (DIRECT) resolutions.
    """

    provider: RoutingProvider
    geometry: List[LatLon]
    distance_m: float
    duration_s: float
    legs: List[PathLeg] = field(default_factory=list)
    segments: List[RoadSegment] = field(default_factory=list)


@dataclass(frozen=True)
class BatchOutcome:
    unit_key: str
    state: ResolutionState
    path: Optional[ResolvedPath] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.state == ResolutionState.RESOLVED
