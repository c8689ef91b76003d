import pytest

from ride_dispatch import utils


def test_time_to_minutes():
    assert utils.time_to_minutes("00:00") == 0
    assert utils.time_to_minutes("14:30") == 870
    assert utils.time_to_minutes("24:10") == 1450


def test_time_difference_can_be_negative():
    assert utils.time_difference_minutes("09:00", "09:30") == 30
    assert utils.time_difference_minutes("10:00", "09:15") == -45


def test_add_minutes_does_not_wrap_midnight():
    assert utils.add_minutes_to_time("18:30", 45) == "19:15"
    assert utils.add_minutes_to_time("08:00", 0) == "08:00"
    assert utils.add_minutes_to_time("23:50", 20) == "24:10"
    assert utils.is_time_after("24:10", "23:59")


def test_is_time_after_is_strict():
    assert utils.is_time_after("09:01", "09:00")
    assert not utils.is_time_after("09:00", "09:00")
    assert not utils.is_time_after("08:59", "09:00")


def test_is_time_in_range_is_inclusive():
    assert utils.is_time_in_range("08:00", "08:00", "20:00")
    assert utils.is_time_in_range("20:00", "08:00", "20:00")
    assert not utils.is_time_in_range("20:01", "08:00", "20:00")
    assert not utils.is_time_in_range("07:59", "08:00", "20:00")


def test_parse_clock_pads_and_validates():
    assert utils.parse_clock("9:05") == "09:05"
    assert utils.parse_clock("23:59") == "23:59"
    for bad in ["24:00", "12:60", "noon", "", None, 900]:
        with pytest.raises(ValueError):
            utils.parse_clock(bad)


def test_haversine_distance():
    assert utils.haversine_distance((32.0, 34.8), (32.0, 34.8)) == 0.0
    # one degree of latitude is ~111.19 km on a 6371 km sphere
    assert utils.haversine_distance((32.0, 34.8), (33.0, 34.8)) == pytest.approx(111.19, abs=0.01)
    assert utils.haversine_distance((32.0, 34.8), (32.1, 34.9)) == pytest.approx(14.58, abs=0.01)


def test_haversine_is_symmetric():
    a, b = (31.25, 34.79), (32.79, 34.99)
    assert utils.haversine_distance(a, b) == pytest.approx(utils.haversine_distance(b, a))


def test_travel_time_minutes():
    assert utils.travel_time_minutes(15.0) == pytest.approx(15.0)
    assert utils.travel_time_minutes(30.0, speed_kmh=30.0) == pytest.approx(60.0)
    assert utils.travel_time_minutes(1.0, speed_kmh=0) == float("inf")



def test_parse_date_pads_and_validates():
    assert utils.parse_date("2023-6-1") == "2023-06-01"
    assert utils.parse_date("2023-06-01") == "2023-06-01"
    for bad in ["2023-13-01", "01/06/2023", "", None]:
        with pytest.raises(ValueError):
            utils.parse_date(bad)
