"""
Purpose: Timeline Reconciler.
What it does:
- Lays a trip unit out as an ordered stop manifest (same order as the unit's
  waypoints): start -> stops -> end
- Arrival/departure per stop, dwell at intermediate stops (day-wrap safe)
- Merges resolved per-hop drive times with the schedule to get road slack
- Summarises dwell + road slack into the unit's total buffer

Works without a resolved path: the schedule-only manifest has the same
stops and times, with the drive/slack fields left as None.

Rule: Stateless. Resolution state belongs to the resolver's cache.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Mapping, Optional

from network.clock import TimeOfDay, wrap_gap_minutes
from network.models import Facility
from routing.models import ResolvedPath
from trips.models import Direction, TripKind, TripUnit

from .models import NextLeg, StopManifestEntry, StopRole, TimelineSummary


@dataclass
class _Node:
    facility: str
    arrival: Optional[TimeOfDay] = None
    departure: Optional[TimeOfDay] = None


def _nodes(unit: TripUnit) -> List[_Node]:
    if unit.kind == TripKind.DIRECT:
        leg = unit.outbound[0]
        return [
            _Node(leg.origin, departure=leg.departure_time),
            _Node(leg.destination, arrival=leg.arrival_time),
        ]

    if unit.kind == TripKind.MILK_RUN and unit.direction == Direction.INBOUND:
        nodes = [_Node(leg.origin, departure=leg.departure_time) for leg in unit.inbound]
        nodes.append(_Node(unit.anchor, arrival=unit.inbound[-1].arrival_time))
        return nodes

    nodes = [_Node(unit.anchor, departure=unit.outbound[0].departure_time)]
    if unit.kind == TripKind.MILK_RUN:
        nodes.extend(_Node(leg.destination, arrival=leg.arrival_time) for leg in unit.outbound)
        return nodes

    # ROUND_TRIP: the departure from a stop is the first inbound leg leaving it
    visited = set()
    for leg in unit.outbound:
        onward = next((back for back in unit.inbound if back.origin == leg.destination), None)
        nodes.append(
            _Node(
                leg.destination,
                arrival=leg.arrival_time,
                departure=onward.departure_time if onward else None,
            )
        )
        visited.add(leg.destination)
    for back in unit.inbound:
        if back.origin not in visited:
            nodes.append(_Node(back.origin, departure=back.departure_time))
            visited.add(back.origin)
    nodes.append(_Node(unit.anchor, arrival=unit.inbound[-1].arrival_time))
    return nodes


def dwell_minutes(arrival: Optional[TimeOfDay], departure: Optional[TimeOfDay]) -> Optional[int]:
    """Arrival-to-departure gap; a departure earlier on the clock is the next day."""
    return wrap_gap_minutes(arrival, departure)


def reconcile(
    unit: TripUnit,
    path: Optional[ResolvedPath] = None,
    facilities: Optional[Mapping[str, Facility]] = None,
) -> List[StopManifestEntry]:
    """
    Build the stop manifest for one trip unit.

    Args:
        unit: composed trip unit
        path: resolved path for the unit, or None if it is not (yet) available.
            Hop data is used only when it has one leg per hop.
        facilities: optional facility lookup. Legs with an endpoint missing from
            it are left out of the manifest; a unit with no leg left gets [].
    """
    if facilities is not None:
        unit = unit.routable_view(facilities)
        if unit is None:
            return []

    nodes = _nodes(unit)
    last = len(nodes) - 1
    hops = path.legs if path is not None and len(path.legs) == last else None

    manifest: List[StopManifestEntry] = []
    for index, node in enumerate(nodes):
        if index == 0:
            role = StopRole.START
        elif index == last:
            role = StopRole.END
        else:
            role = StopRole.STOP

        next_leg = None
        if index < last:
            reference = node.departure or node.arrival
            gap = wrap_gap_minutes(reference, nodes[index + 1].arrival)
            if hops is not None:
                hop = hops[index]
                slack = max(0.0, gap - hop.duration_minutes) if gap is not None else None
                next_leg = NextLeg(
                    scheduled_gap_minutes=gap,
                    distance_m=hop.distance_m,
                    duration_s=hop.duration_s,
                    road_slack_minutes=slack,
                )
            else:
                next_leg = NextLeg(scheduled_gap_minutes=gap)

        manifest.append(
            StopManifestEntry(
                facility=node.facility,
                role=role,
                arrival=node.arrival if role != StopRole.START else None,
                departure=node.departure if role != StopRole.END else None,
                dwell_minutes=0 if role != StopRole.STOP else dwell_minutes(node.arrival, node.departure),
                next_leg=next_leg,
            )
        )

    return manifest


def summarize(manifest: List[StopManifestEntry]) -> TimelineSummary:
    """
    Total buffer = all dwell + all road slack, in hours.
    Scheduled duration = start departure to end arrival, day-wrap safe.
    """
    if not manifest:
        return TimelineSummary(0, 0.0, 0.0, None, None)

    total_dwell = sum(entry.dwell_minutes or 0 for entry in manifest)
    legs = [entry.next_leg for entry in manifest if entry.next_leg is not None]
    total_slack = sum(leg.road_slack_minutes or 0.0 for leg in legs)

    if legs and all(leg.duration_s is not None for leg in legs):
        drive_minutes = sum(leg.duration_s for leg in legs) / 60
    else:
        drive_minutes = None

    return TimelineSummary(
        total_dwell_minutes=total_dwell,
        total_road_slack_minutes=total_slack,
        total_buffer_hours=(total_dwell + total_slack) / 60,
        scheduled_duration_minutes=wrap_gap_minutes(manifest[0].departure, manifest[-1].arrival),
        drive_minutes=drive_minutes,
    )
