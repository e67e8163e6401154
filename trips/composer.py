"""
Purpose: Route Composer (the grouping "orchestrator").
What it does:
- Legs without a route group key become DIRECT units, one each
- Keyed legs are bucketed by (route id, route-set id)
- Each bucket is split around its focal facility into outbound / inbound legs
  and becomes a ROUND_TRIP (both sides) or a MILK_RUN (one side)

Every input leg lands in exactly one TripUnit.

Rule: Pure grouping transform. No HTTP, no clock arithmetic beyond ordering.
"""

from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from network.clock import TimeOfDay
from network.models import Facility, Leg, RouteGroupKey

from .models import Direction, TripKind, TripUnit


def _time_sort_key(time: Optional[TimeOfDay]) -> Tuple[int, int]:
    # unparseable times go last, sort is stable for ties
    if time is None:
        return (1, 0)
    return (0, time.minutes)


def sort_by_arrival(legs: Iterable[Leg]) -> List[Leg]:
    return sorted(legs, key=lambda leg: _time_sort_key(leg.arrival_time))


def sort_by_departure(legs: Iterable[Leg]) -> List[Leg]:
    return sorted(legs, key=lambda leg: _time_sort_key(leg.departure_time))


def _infer_focal(legs: Sequence[Leg]) -> str:
    """
    The facility touching the most legs of the bucket.
    Ties go to the facility seen first.
    """
    touches: Counter = Counter()
    first_seen: Dict[str, int] = {}
    for leg in legs:
        for name in (leg.origin, leg.destination):
            touches[name] += 1
            first_seen.setdefault(name, len(first_seen))
    return max(touches, key=lambda name: (touches[name], -first_seen[name]))


def _compose_bucket(
    group_key: RouteGroupKey,
    legs: Sequence[Leg],
    focal: Optional[str],
) -> List[TripUnit]:
    units: List[TripUnit] = []
    remaining = list(legs)

    while remaining:
        hub = focal if focal is not None and _touches(remaining, focal) else _infer_focal(remaining)

        outbound = [leg for leg in remaining if leg.origin == hub]
        inbound = [leg for leg in remaining if leg.origin != hub and leg.destination == hub]

        if outbound and inbound:
            units.append(
                TripUnit(
                    kind=TripKind.ROUND_TRIP,
                    anchor=hub,
                    outbound=tuple(sort_by_arrival(outbound)),
                    inbound=tuple(sort_by_departure(inbound)),
                    group_key=group_key,
                    direction=None,
                )
            )
        elif outbound:
            ordered = sort_by_arrival(outbound)
            units.append(
                TripUnit(
                    kind=TripKind.MILK_RUN,
                    anchor=ordered[0].origin,
                    outbound=tuple(ordered),
                    group_key=group_key,
                    direction=Direction.OUTBOUND,
                )
            )
        else:
            ordered = sort_by_departure(inbound)
            units.append(
                TripUnit(
                    kind=TripKind.MILK_RUN,
                    anchor=ordered[0].destination,
                    inbound=tuple(ordered),
                    group_key=group_key,
                    direction=Direction.INBOUND,
                )
            )

        # legs of the same key that never touch the hub form their own unit(s)
        used = set(map(id, outbound)) | set(map(id, inbound))
        remaining = [leg for leg in remaining if id(leg) not in used]

    return units


def _touches(legs: Sequence[Leg], name: str) -> bool:
    return any(leg.origin == name or leg.destination == name for leg in legs)


def compose(legs: Iterable[Leg], focal: Optional[str] = None) -> List[TripUnit]:
    """
    Group legs into DIRECT / MILK_RUN / ROUND_TRIP units.

    Args:
        legs: deduplicated legs from network.builder.build_legs
        focal: facility the caller is looking at. When given it is the split point
            of every bucket that touches it; otherwise each bucket picks its own hub.

    Returns:
        List[TripUnit], DIRECT units first in input order, then one or more units
        per group key in order of the key's first appearance.
    """
    directs: List[TripUnit] = []
    buckets: Dict[RouteGroupKey, List[Leg]] = {}

    # 1) standalone legs vs keyed legs
    for leg in legs:
        if not leg.is_keyed:
            directs.append(
                TripUnit(
                    kind=TripKind.DIRECT,
                    anchor=leg.origin,
                    outbound=(leg,),
                    direction=Direction.OUTBOUND,
                )
            )
            continue
        buckets.setdefault(leg.group_key, []).append(leg)

    # 2) one bucket per route group key
    units = list(directs)
    for group_key, bucket in buckets.items():
        units.extend(_compose_bucket(group_key, bucket, focal))

    return units


def compose_for_facility(legs: Iterable[Leg], facility_name: str) -> List[TripUnit]:
    """Trip units for the legs that leave from or arrive at one facility."""
    local = [
        leg
        for leg in legs
        if leg.origin == facility_name or leg.destination == facility_name
    ]
    return compose(local, focal=facility_name)


def routable(unit: TripUnit, facilities: Mapping[str, Facility]) -> bool:
    """True when at least one leg of the unit has both endpoints in `facilities`."""
    return unit.routable_view(facilities) is not None
