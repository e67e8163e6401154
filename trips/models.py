"""
Purpose: Domain models for composed trips.
What it does:
- TripKind = DIRECT | MILK_RUN | ROUND_TRIP
- Direction = OUTBOUND | INBOUND
- TripUnit: one logical run built from one or more legs, with its waypoint order

Rule: No grouping logic and no HTTP here. Models only.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Mapping, Optional, Tuple

from network.models import Facility, Leg, RouteGroupKey, SENTINEL_GROUP_KEY


class TripKind(str, Enum):
    DIRECT = "DIRECT"
    MILK_RUN = "MILK_RUN"
    ROUND_TRIP = "ROUND_TRIP"


class Direction(str, Enum):
    OUTBOUND = "OUTBOUND"
    INBOUND = "INBOUND"


@dataclass(frozen=True)
class TripUnit:
    """
    Output of the route composer.

    - DIRECT: `outbound` holds the single leg.
    - MILK_RUN: legs sit in `outbound` (sorted by arrival) or `inbound`
      (sorted by departure) according to `direction`.
    - ROUND_TRIP: both are non-empty; `anchor` is the facility the run leaves
      from and returns to.
    """

    kind: TripKind
    anchor: str
    outbound: Tuple[Leg, ...] = ()
    inbound: Tuple[Leg, ...] = ()
    group_key: RouteGroupKey = SENTINEL_GROUP_KEY
    direction: Optional[Direction] = Direction.OUTBOUND

    @property
    def legs(self) -> List[Leg]:
        return list(self.outbound) + list(self.inbound)

    @property
    def unit_key(self) -> str:
        if self.kind == TripKind.DIRECT:
            leg = self.outbound[0]
            return f"direct:{leg.origin}->{leg.destination}"
        # two units of one route group can visit different stops
        route_id, route_set_id = self.group_key
        stops = ">".join(self.waypoints())
        return f"{self.kind.value.lower()}:{route_id}:{route_set_id}:{stops}"

    def routable_view(self, facilities: Mapping[str, Facility]) -> Optional[TripUnit]:
        """
        The unit without the legs that touch a facility missing from `facilities`.

        A ROUND_TRIP left with one side only becomes a MILK_RUN in that direction.

        Returns:
            the unit itself when every leg is known, None when no leg is left.
        """
        def known(leg: Leg) -> bool:
            return leg.origin in facilities and leg.destination in facilities

        outbound = tuple(leg for leg in self.outbound if known(leg))
        inbound = tuple(leg for leg in self.inbound if known(leg))

        if len(outbound) == len(self.outbound) and len(inbound) == len(self.inbound):
            return self
        if not outbound and not inbound:
            return None

        if self.kind == TripKind.ROUND_TRIP and not inbound:
            return replace(self, kind=TripKind.MILK_RUN, outbound=outbound, inbound=(), direction=Direction.OUTBOUND)
        if self.kind == TripKind.ROUND_TRIP and not outbound:
            return replace(self, kind=TripKind.MILK_RUN, outbound=(), inbound=inbound, direction=Direction.INBOUND)
        return replace(self, outbound=outbound, inbound=inbound)

    def waypoints(self) -> List[str]:
        """
        Ordered facility names the vehicle visits.

        - DIRECT: origin, destination
        - outbound MILK_RUN: anchor, then each destination in arrival order
        - inbound MILK_RUN: each origin in departure order, then anchor
        - ROUND_TRIP: anchor, each outbound destination, any inbound origin not
          already visited, then anchor again
        """
        if self.kind == TripKind.DIRECT:
            leg = self.outbound[0]
            return [leg.origin, leg.destination]

        if self.kind == TripKind.MILK_RUN:
            if self.direction == Direction.INBOUND:
                return [leg.origin for leg in self.inbound] + [self.anchor]
            return [self.anchor] + [leg.destination for leg in self.outbound]

        stops = [leg.destination for leg in self.outbound]
        visited = set(stops)
        for leg in self.inbound:
            if leg.origin not in visited:
                stops.append(leg.origin)
                visited.add(leg.origin)
        return [self.anchor] + stops + [self.anchor]
