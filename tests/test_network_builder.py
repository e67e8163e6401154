import math

import pytest

from network.builder import (
    build_facilities,
    build_legs,
    clean_facility_name,
    degree_stats,
    facility_index,
    visible_facilities,
)
from network.models import NO_ROUTE, FacilityType


@pytest.fixture
def facility_rows():
    return [
        {"name": " DEL_Bilaspur_GW ", "property_lat": "28.35", "property_long": "76.92", "property_address": "NH-48"},
        {"name": "BLR_Nelamangala_H", "property_lat": "13.09", "property_long": "77.39", "property_address": ""},
        {"name": "PNQ_Chakan_I", "property_lat": "18.76", "property_long": "73.86"},
        {"name": "BOM_Bhiwandi_DC", "property_lat": "19.29", "property_long": "73.06"},
        # duplicate name, first one wins
        {"name": "DEL_Bilaspur_GW", "property_lat": "0", "property_long": "0"},
        # deactivated
        {"name": "OLD_Site_H", "property_lat": "12.0", "property_long": "77.0", "deactivated_at": "2024-01-01"},
        # bad coordinates
        {"name": "NOWHERE_H", "property_lat": "", "property_long": "77.0"},
        {"name": "BROKEN_H", "property_lat": "abc", "property_long": "77.0"},
        {"name": "NAN_H", "property_lat": "nan", "property_long": "77.0"},
        # blank name
        {"name": "  ", "property_lat": "10", "property_long": "10"},
    ]


@pytest.fixture
def leg_rows():
    return [
        {"oc": "DEL_Bilaspur_GW (Dock 2)", "cn": "BLR_Nelamangala_H", "vmode": "ftl", "vehicle_size": "32 FT",
         "cutoff_departure": "22:00", "eta": "06:00 (+2)", "tat": "56", "route_id": "", "route_set_id": ""},
        # same leg after cleaning and normalising
        {"oc": "DEL_Bilaspur_GW", "cn": "BLR_Nelamangala_H", "vmode": "FTL", "vehicle_size": "32 FT",
         "cutoff_departure": "22:00", "eta": "06:00 (+2)", "tat": "56", "route_id": None, "route_set_id": None},
        {"oc": "BLR_Nelamangala_H", "cn": "PNQ_Chakan_I", "vmode": "", "vehicle_size": "",
         "cutoff_departure": "10:00", "eta": "20:00", "tat": "", "route_id": "R1", "route_set_id": "S1"},
        # missing destination
        {"oc": "BLR_Nelamangala_H", "cn": "", "vmode": "FTL"},
    ]


def test_build_facilities_skips_bad_rows(facility_rows):
    result = build_facilities(facility_rows)

    # 1. Only the four valid, first-seen, active rows survive
    assert [f.name for f in result.facilities] == [
        "DEL_Bilaspur_GW",
        "BLR_Nelamangala_H",
        "PNQ_Chakan_I",
        "BOM_Bhiwandi_DC",
    ]
    assert result.total_rows == len(facility_rows)
    assert result.active_count == 4

    # 2. First occurrence wins on duplicates
    delhi = result.facilities[0]
    assert delhi.lat == pytest.approx(28.35)
    assert delhi.address == "NH-48"

    # 3. Blank address falls back to the placeholder
    assert result.facilities[1].address == "Address not available"


def test_facility_type_from_name_suffix(facility_rows):
    types = {f.name: f.type for f in build_facilities(facility_rows).facilities}

    assert types["DEL_Bilaspur_GW"] == FacilityType.GATEWAY
    assert types["BLR_Nelamangala_H"] == FacilityType.HUB
    assert types["PNQ_Chakan_I"] == FacilityType.IPC
    assert types["BOM_Bhiwandi_DC"] == FacilityType.OTHER
    assert FacilityType.from_name("GGN_Sector9_HUB") == FacilityType.HUB
    assert FacilityType.from_name("") == FacilityType.OTHER


def test_build_facilities_accepts_untrimmed_headers():
    rows = [{" Name ": "X_H", "PROPERTY_LAT": "1.5", "property_long ": "2.5"}]
    result = build_facilities(rows)
    assert result.facilities[0].location == (1.5, 2.5)


def test_build_legs_normalises_and_dedups(leg_rows):
    result = build_legs(leg_rows)

    # 1. Duplicate and endpoint-less rows are dropped
    assert result.total_rows == 4
    assert result.valid_count == 2

    first, second = result.legs
    # 2. Parenthetical suffix stripped, mode upper-cased
    assert first.origin == "DEL_Bilaspur_GW"
    assert first.vehicle_mode == "FTL"
    assert first.tat_hours == 56.0
    assert first.group_key == (NO_ROUTE, NO_ROUTE)
    assert not first.is_keyed

    # 3. Defaults for blank mode / size
    assert second.vehicle_mode == "UNKNOWN"
    assert second.vehicle_size == "Unknown"
    assert second.tat_hours is None
    assert second.group_key == ("R1", "S1")
    assert second.is_keyed


def test_build_is_idempotent(facility_rows, leg_rows):
    assert build_facilities(facility_rows) == build_facilities(facility_rows)
    assert build_legs(leg_rows) == build_legs(leg_rows)

    # Feeding every row twice never grows the output
    assert build_legs(leg_rows + leg_rows).legs == build_legs(leg_rows).legs
    assert build_facilities(facility_rows * 2).facilities == build_facilities(facility_rows).facilities


def test_build_does_not_mutate_rows(leg_rows):
    snapshot = [dict(row) for row in leg_rows]
    build_legs(leg_rows)
    assert leg_rows == snapshot


def test_blank_cells_from_pandas_are_treated_as_empty():
    rows = [{"oc": "A_H", "cn": "B_H", "vmode": float("nan"), "vehicle_size": math.nan,
             "route_id": math.nan, "route_set_id": math.nan}]
    leg = build_legs(rows).legs[0]
    assert leg.vehicle_mode == "UNKNOWN"
    assert leg.route_id == NO_ROUTE


def test_degree_stats_and_visibility(facility_rows, leg_rows):
    facilities = build_facilities(facility_rows).facilities
    legs = build_legs(leg_rows).legs
    stats = degree_stats(legs)

    assert stats["DEL_Bilaspur_GW"].outbound == 1
    assert stats["DEL_Bilaspur_GW"].inbound == 0
    assert stats["BLR_Nelamangala_H"].inbound == 1
    assert stats["BLR_Nelamangala_H"].outbound == 1
    assert stats["PNQ_Chakan_I"].inbound == 1

    # BOM has no legs and is hidden
    visible = [f.name for f in visible_facilities(facilities, stats)]
    assert "BOM_Bhiwandi_DC" not in visible
    assert len(visible) == 3

    assert set(facility_index(facilities)) == {f.name for f in facilities}


def test_clean_facility_name():
    assert clean_facility_name("  PNQ_Chakan_I (Gate 3) ") == "PNQ_Chakan_I"
    assert clean_facility_name(None) == ""
