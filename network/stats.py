"""
Purpose: Per-facility connection statistics.
What it does:
- Straight-line (haversine) distance for a leg
- Shift bucketing (MORNING / AFTERNOON / NIGHT) of departure and arrival times
- Outbound / inbound leg lists for one facility, filtered and sorted for display

Shift counts are always computed on the unfiltered legs so the breakdown does
not move when the list filters change.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional

from .clock import TimeOfDay
from .models import Facility, LatLon, Leg

EARTH_RADIUS_KM = 6371
LONG_HAUL_KM = 500


class Shift(str, Enum):
    MORNING = "MORNING"
    AFTERNOON = "AFTERNOON"
    NIGHT = "NIGHT"
    UNKNOWN = "UNK"


class QuickFilter(str, Enum):
    ALL = "ALL"
    FTL = "FTL"
    CARTING = "CARTING"
    LONG = "LONG"


class SortKey(str, Enum):
    DISTANCE = "distance"
    SIZE = "size"


def haversine_km(a: Optional[LatLon], b: Optional[LatLon]) -> int:
    """Great-circle distance rounded to whole kilometres, 0 if a point is missing."""
    if not a or not b:
        return 0
    lat1, lon1 = a
    lat2, lon2 = b
    if not lat1 or not lon1 or not lat2 or not lon2:
        return 0

    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return round(EARTH_RADIUS_KM * c)


def shift_for(value: Optional[str]) -> Shift:
    time = TimeOfDay.parse(value)
    if time is None:
        return Shift.UNKNOWN
    # Morning: 06:00 to 13:59
    if 6 <= time.hour < 14:
        return Shift.MORNING
    # Afternoon: 14:00 to 21:59
    if 14 <= time.hour < 22:
        return Shift.AFTERNOON
    # Night: 22:00 to 05:59
    return Shift.NIGHT


@dataclass
class ShiftCounts:
    outbound: int = 0
    inbound: int = 0
    outbound_ftl: int = 0
    outbound_carting: int = 0
    inbound_ftl: int = 0
    inbound_carting: int = 0


@dataclass(frozen=True)
class LegView:
    leg: Leg
    distance_km: int


@dataclass(frozen=True)
class ConnectionFilter:
    """
    List filters for the facility panel.
    `vehicle_modes=None` allows every mode.
    """

    show_outbound: bool = True
    show_inbound: bool = True
    vehicle_modes: Optional[FrozenSet[str]] = None
    quick_filter: QuickFilter = QuickFilter.ALL
    sort_key: SortKey = SortKey.DISTANCE
    descending: bool = True


@dataclass(frozen=True)
class FacilityConnectionStats:
    facility: str
    outbound: List[LegView]
    inbound: List[LegView]
    raw_outbound_count: int
    raw_inbound_count: int
    shifts: Dict[Shift, ShiftCounts] = field(default_factory=dict)


def vehicle_modes(legs: Iterable[Leg]) -> List[str]:
    return sorted({leg.vehicle_mode for leg in legs})


def _leg_view(leg: Leg, facilities: Mapping[str, Facility]) -> LegView:
    origin = facilities.get(leg.origin)
    destination = facilities.get(leg.destination)
    if origin is None or destination is None:
        return LegView(leg=leg, distance_km=0)
    return LegView(leg=leg, distance_km=haversine_km(origin.location, destination.location))


def _matches_quick_filter(view: LegView, quick_filter: QuickFilter) -> bool:
    if quick_filter == QuickFilter.FTL:
        return view.leg.vehicle_mode == "FTL"
    if quick_filter == QuickFilter.CARTING:
        return view.leg.vehicle_mode in ("CARTING", "LTL")
    if quick_filter == QuickFilter.LONG:
        return view.distance_km > LONG_HAUL_KM
    return True


def _apply_filter(views: List[LegView], flt: ConnectionFilter) -> List[LegView]:
    kept = [
        view
        for view in views
        if (flt.vehicle_modes is None or view.leg.vehicle_mode in flt.vehicle_modes)
        and _matches_quick_filter(view, flt.quick_filter)
    ]
    if flt.sort_key == SortKey.SIZE:
        kept.sort(key=lambda view: view.leg.vehicle_size.lower(), reverse=flt.descending)
    else:
        kept.sort(key=lambda view: view.distance_km, reverse=flt.descending)
    return kept


def facility_connection_stats(
    facility_name: str,
    legs: Iterable[Leg],
    facilities: Mapping[str, Facility],
    flt: Optional[ConnectionFilter] = None,
) -> FacilityConnectionStats:
    """
    Outbound / inbound legs of one facility with straight-line distances.

    Outbound legs are bucketed into shifts by departure, inbound by arrival.
    """
    flt = flt or ConnectionFilter()
    legs = list(legs)

    outbound = [_leg_view(leg, facilities) for leg in legs if leg.origin == facility_name]
    inbound = [_leg_view(leg, facilities) for leg in legs if leg.destination == facility_name]

    shifts = {shift: ShiftCounts() for shift in (Shift.MORNING, Shift.AFTERNOON, Shift.NIGHT)}
    for view in outbound:
        counts = shifts.get(shift_for(view.leg.departure))
        if counts is None:
            continue
        counts.outbound += 1
        if view.leg.vehicle_mode == "FTL":
            counts.outbound_ftl += 1
        else:
            counts.outbound_carting += 1
    for view in inbound:
        counts = shifts.get(shift_for(view.leg.arrival))
        if counts is None:
            continue
        counts.inbound += 1
        if view.leg.vehicle_mode == "FTL":
            counts.inbound_ftl += 1
        else:
            counts.inbound_carting += 1

    return FacilityConnectionStats(
        facility=facility_name,
        outbound=_apply_filter(outbound, flt) if flt.show_outbound else [],
        inbound=_apply_filter(inbound, flt) if flt.show_inbound else [],
        raw_outbound_count=len(outbound),
        raw_inbound_count=len(inbound),
        shifts=shifts,
    )
