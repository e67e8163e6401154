import pytest

from network.models import Facility, Leg
from network.stats import (
    ConnectionFilter,
    QuickFilter,
    Shift,
    SortKey,
    facility_connection_stats,
    haversine_km,
    shift_for,
    vehicle_modes,
)


@pytest.fixture
def facilities():
    return {
        "DEL_Hub_H": Facility("DEL_Hub_H", 28.61, 77.21),
        "JAI_Hub_H": Facility("JAI_Hub_H", 26.91, 75.79),
        "BLR_Hub_H": Facility("BLR_Hub_H", 12.97, 77.59),
        "GGN_Spoke_I": Facility("GGN_Spoke_I", 28.46, 77.03),
    }


@pytest.fixture
def legs():
    return [
        Leg("DEL_Hub_H", "JAI_Hub_H", "FTL", "32 FT", "08:00", "14:00"),
        Leg("DEL_Hub_H", "BLR_Hub_H", "FTL", "24 FT", "15:00", "10:00 (+2)"),
        Leg("DEL_Hub_H", "GGN_Spoke_I", "CARTING", "14 FT", "23:00", "00:30"),
        Leg("GGN_Spoke_I", "DEL_Hub_H", "LTL", "14 FT", "05:00", "06:30"),
        Leg("UNKNOWN_X", "DEL_Hub_H", "FTL", "32 FT", "12:00", "22:30"),
    ]


def test_haversine_km():
    # Delhi -> Jaipur is roughly 235 km as the crow flies
    assert 230 <= haversine_km((28.61, 77.21), (26.91, 75.79)) <= 240
    assert haversine_km(None, (1.0, 1.0)) == 0
    assert haversine_km((0.0, 77.0), (1.0, 1.0)) == 0


@pytest.mark.parametrize(
    "time, shift",
    [
        ("06:00", Shift.MORNING),
        ("13:59", Shift.MORNING),
        ("14:00", Shift.AFTERNOON),
        ("21:59", Shift.AFTERNOON),
        ("22:00", Shift.NIGHT),
        ("05:59", Shift.NIGHT),
        ("18:00 (+2)", Shift.AFTERNOON),
        ("", Shift.UNKNOWN),
        (None, Shift.UNKNOWN),
    ],
)
def test_shift_for(time, shift):
    assert shift_for(time) == shift


def test_shift_breakdown_uses_unfiltered_legs(facilities, legs):
    stats = facility_connection_stats(
        "DEL_Hub_H", legs, facilities, ConnectionFilter(quick_filter=QuickFilter.FTL, show_inbound=False)
    )

    # 1. Raw counts ignore filters
    assert stats.raw_outbound_count == 3
    assert stats.raw_inbound_count == 2

    # 2. Outbound by departure, inbound by arrival
    assert stats.shifts[Shift.MORNING].outbound == 1
    assert stats.shifts[Shift.MORNING].outbound_ftl == 1
    assert stats.shifts[Shift.AFTERNOON].outbound == 1
    assert stats.shifts[Shift.NIGHT].outbound_carting == 1
    assert stats.shifts[Shift.MORNING].inbound_carting == 1
    assert stats.shifts[Shift.NIGHT].inbound_ftl == 1

    # 3. Lists are filtered
    assert stats.inbound == []
    assert [view.leg.destination for view in stats.outbound] == ["BLR_Hub_H", "JAI_Hub_H"]


def test_carting_filter_includes_ltl(facilities, legs):
    stats = facility_connection_stats("DEL_Hub_H", legs, facilities, ConnectionFilter(quick_filter=QuickFilter.CARTING))

    assert [view.leg.vehicle_mode for view in stats.outbound] == ["CARTING"]
    assert [view.leg.vehicle_mode for view in stats.inbound] == ["LTL"]


def test_long_haul_filter_and_unknown_endpoint(facilities, legs):
    stats = facility_connection_stats("DEL_Hub_H", legs, facilities, ConnectionFilter(quick_filter=QuickFilter.LONG))

    assert [view.leg.destination for view in stats.outbound] == ["BLR_Hub_H"]
    # unknown origin -> distance 0, never long haul
    assert stats.inbound == []


def test_default_sort_is_distance_descending(facilities, legs):
    stats = facility_connection_stats("DEL_Hub_H", legs, facilities)

    # the panel opens with the longest connections first
    assert [view.leg.destination for view in stats.outbound] == ["BLR_Hub_H", "JAI_Hub_H", "GGN_Spoke_I"]


def test_sorting(facilities, legs):
    by_distance = facility_connection_stats("DEL_Hub_H", legs, facilities, ConnectionFilter(descending=False))
    distances = [view.distance_km for view in by_distance.outbound]
    assert distances == sorted(distances)

    by_size = facility_connection_stats(
        "DEL_Hub_H", legs, facilities, ConnectionFilter(sort_key=SortKey.SIZE, descending=False)
    )
    assert [view.leg.vehicle_size for view in by_size.outbound] == ["14 FT", "24 FT", "32 FT"]


def test_mode_filter(facilities, legs):
    stats = facility_connection_stats(
        "DEL_Hub_H", legs, facilities, ConnectionFilter(vehicle_modes=frozenset({"LTL"}))
    )
    assert stats.outbound == []
    assert len(stats.inbound) == 1
    assert vehicle_modes(legs) == ["CARTING", "FTL", "LTL"]

