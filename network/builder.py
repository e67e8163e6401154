"""
Purpose: Network Model Builder.
What it does:
- Normalises raw facility rows into deduplicated Facility entities
- Normalises raw leg rows into deduplicated Leg entities
- Computes in/out degree per facility

Rows arrive already tokenised into field -> value mappings (CSV reading is the
caller's job). Bad rows are skipped, never raised on.

Rule: Pure functions of their input. No HTTP, no grouping.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from .models import (
    DEFAULT_ADDRESS,
    NO_ROUTE,
    DegreeStats,
    Facility,
    FacilityBuildResult,
    FacilityType,
    Leg,
    LegBuildResult,
)

Row = Mapping[str, Any]


def _normalise_row(row: Row) -> Dict[str, Any]:
    """Header keys are matched trimmed and lower-cased, values are left alone."""
    return {str(key).strip().lower(): value for key, value in row.items() if key is not None}


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        # pandas hands blank cells over as NaN
        return ""
    return str(value).strip()


def _parse_coordinate(value: Any) -> Optional[float]:
    text = _text(value)
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return number


def _parse_hours(value: Any) -> Optional[float]:
    text = _text(value)
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def clean_facility_name(name: Any) -> str:
    """
    Leg rows sometimes carry a parenthetical note after the facility name,
    e.g. "BLR_Nelamangala_H (Dock 4)". Only the part before "(" is the name.
    """
    return _text(name).split("(")[0].strip()


def build_facilities(rows: Iterable[Row]) -> FacilityBuildResult:
    """
    Build the facility set from raw rows.

    Skips (first occurrence wins):
    - rows flagged deactivated (non-blank `deactivated_at`)
    - blank or already-seen names
    - rows without parseable `property_lat` / `property_long`
    """
    facilities: List[Facility] = []
    seen: Set[str] = set()
    total_rows = 0

    for raw in rows:
        total_rows += 1
        row = _normalise_row(raw)

        if _text(row.get("deactivated_at")):
            continue

        name = _text(row.get("name"))
        if not name or name in seen:
            continue

        lat = _parse_coordinate(row.get("property_lat"))
        lng = _parse_coordinate(row.get("property_long"))
        if lat is None or lng is None:
            continue

        facilities.append(
            Facility(
                name=name,
                lat=lat,
                lng=lng,
                address=_text(row.get("property_address")) or DEFAULT_ADDRESS,
                type=FacilityType.from_name(name),
            )
        )
        seen.add(name)

    return FacilityBuildResult(
        facilities=facilities,
        total_rows=total_rows,
        active_count=len(facilities),
    )


def build_legs(rows: Iterable[Row]) -> LegBuildResult:
    """
    Build the deduplicated leg list from raw connection rows.

    Fields used: oc, cn, vehicle_size, vmode, cutoff_departure, eta, tat,
    route_id, route_set_id.
    """
    legs: List[Leg] = []
    seen: Set[Tuple] = set()
    total_rows = 0

    for raw in rows:
        total_rows += 1
        row = _normalise_row(raw)

        origin = clean_facility_name(row.get("oc"))
        destination = clean_facility_name(row.get("cn"))
        if not origin or not destination:
            continue

        leg = Leg(
            origin=origin,
            destination=destination,
            vehicle_mode=_text(row.get("vmode")).upper() or "UNKNOWN",
            vehicle_size=_text(row.get("vehicle_size")) or "Unknown",
            departure=_text(row.get("cutoff_departure")),
            arrival=_text(row.get("eta")),
            tat_hours=_parse_hours(row.get("tat")),
            route_id=_text(row.get("route_id")) or NO_ROUTE,
            route_set_id=_text(row.get("route_set_id")) or NO_ROUTE,
        )

        #idempotency : dont double insert
        if leg.identity in seen:
            continue
        seen.add(leg.identity)
        legs.append(leg)

    return LegBuildResult(legs=legs, total_rows=total_rows, valid_count=len(legs))


def degree_stats(legs: Iterable[Leg]) -> Dict[str, DegreeStats]:
    """
    Out-degree counted at each leg's origin, in-degree at its destination.
    """
    counts: Dict[str, List[int]] = {}
    for leg in legs:
        counts.setdefault(leg.origin, [0, 0])[1] += 1
        counts.setdefault(leg.destination, [0, 0])[0] += 1

    return {
        name: DegreeStats(inbound=inbound, outbound=outbound)
        for name, (inbound, outbound) in counts.items()
    }


def facility_index(facilities: Iterable[Facility]) -> Dict[str, Facility]:
    return {facility.name: facility for facility in facilities}


def visible_facilities(
    facilities: Iterable[Facility],
    stats: Mapping[str, DegreeStats],
) -> List[Facility]:
    """Facilities with zero associated legs are filtered from visibility."""
    return [
        facility
        for facility in facilities
        if stats.get(facility.name, DegreeStats()).is_active
    ]
