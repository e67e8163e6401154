import pytest

from network.clock import TimeOfDay, wrap_gap_minutes


@pytest.mark.parametrize(
    "text, minutes, offset",
    [
        ("00:00", 0, 0),
        ("08:05", 485, 0),
        ("23:59", 1439, 0),
        ("7:30", 450, 0),
        ("18:00 (+2)", 1080, 2),
        ("06:15:00", 375, 0),
    ],
)
def test_parse_valid_times(text, minutes, offset):
    time = TimeOfDay.parse(text)
    assert time.minutes == minutes
    assert time.day_offset == offset


@pytest.mark.parametrize("text", [None, "", "   ", "24:00", "12:60", "noon", "12-30"])
def test_parse_rejects_malformed(text):
    assert TimeOfDay.parse(text) is None


def test_day_wrap_gap():
    arrival = TimeOfDay.parse("23:40")
    departure = TimeOfDay.parse("00:20")

    # departure after midnight is the next day
    assert arrival.minutes_until(departure) == 40
    assert departure.minutes_until(arrival) == 1400
    assert arrival.minutes_until(arrival) == 0


def test_ordering_ignores_day_offset():
    assert TimeOfDay.parse("08:00") < TimeOfDay.parse("09:00")
    assert TimeOfDay.parse("18:00 (+1)") == TimeOfDay.parse("18:00")


def test_wrap_gap_with_missing_side():
    assert wrap_gap_minutes(None, TimeOfDay.parse("10:00")) is None
    assert wrap_gap_minutes(TimeOfDay.parse("10:00"), None) is None


def test_str_round_trips_to_clock_text():
    assert str(TimeOfDay.parse("7:05")) == "07:05"
