"""
Trips domain package.

Public API:
- Domain models: TripUnit, TripKind, Direction
- Composer entry: compose, compose_for_facility, routable
"""
from .models import Direction, TripKind, TripUnit
from .composer import compose, compose_for_facility, routable

__all__ = [
    "TripUnit",
    "TripKind",
    "Direction",
    "compose",
    "compose_for_facility",
    "routable",
]
