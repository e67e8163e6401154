"""
Facility network package.

Public API:
- Domain models: Facility, FacilityType, Leg, DegreeStats, TimeOfDay
- Builder: build_facilities, build_legs, degree_stats, facility_index, visible_facilities
- Panel stats: facility_connection_stats, ConnectionFilter
"""
from .clock import TimeOfDay
from .models import DegreeStats, Facility, FacilityType, Leg, NO_ROUTE
from .builder import (
    build_facilities,
    build_legs,
    degree_stats,
    facility_index,
    visible_facilities,
)
from .stats import ConnectionFilter, facility_connection_stats, haversine_km, shift_for

__all__ = [
    "TimeOfDay",
    "Facility",
    "FacilityType",
    "Leg",
    "DegreeStats",
    "NO_ROUTE",
    "build_facilities",
    "build_legs",
    "degree_stats",
    "facility_index",
    "visible_facilities",
    "ConnectionFilter",
    "facility_connection_stats",
    "haversine_km",
    "shift_for",
]
