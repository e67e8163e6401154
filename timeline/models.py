"""
Purpose: Output structures of the timeline reconciler.
What it does:
- StopRole = start | stop | end
- StopManifestEntry: one stop of a trip with its times, dwell and next leg
- NextLeg: drive figures from the resolved path plus the schedule gap and road slack
- TimelineSummary: unit-level totals

Rule: Models only.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from network.clock import TimeOfDay


class StopRole(str, Enum):
    START = "start"
    STOP = "stop"
    END = "end"


@dataclass(frozen=True)
class NextLeg:
    """
    Travel from this stop to the next one.

    distance/duration/road slack stay None until the unit's path is resolved;
    `scheduled_gap_minutes` only needs the schedule.
    """

    scheduled_gap_minutes: Optional[int] = None
    distance_m: Optional[float] = None
    duration_s: Optional[float] = None
    road_slack_minutes: Optional[float] = None


@dataclass(frozen=True)
class StopManifestEntry:
    facility: str
    role: StopRole
    arrival: Optional[TimeOfDay] = None
    departure: Optional[TimeOfDay] = None
    # 0 at start/end, None when a side of the stop's schedule is missing
    dwell_minutes: Optional[int] = 0
    next_leg: Optional[NextLeg] = None


@dataclass(frozen=True)
class TimelineSummary:
    total_dwell_minutes: int
    total_road_slack_minutes: float
    total_buffer_hours: float
    scheduled_duration_minutes: Optional[int]
    # None unless every hop has resolved drive time
    drive_minutes: Optional[float]
