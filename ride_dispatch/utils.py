# ride-dispatch/ride_dispatch/utils.py
"""
Utility functions for the ride assignment engine.

Provides geographic calculations and the clock-time arithmetic the engine
relies on. Clock times are ``HH:MM`` strings on a 24-hour scale within a single
day; computed times are never wrapped around midnight.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Sequence, Union

from . import config

LatLon = Sequence[float]


def haversine_distance(origin: LatLon, destination: LatLon) -> float:
    """
    Calculate the great-circle distance between two points on Earth.

    Args:
        origin: (latitude, longitude) of point 1 in decimal degrees
        destination: (latitude, longitude) of point 2 in decimal degrees

    Returns:
        Distance in kilometers between the two points

    Example:
        >>> round(haversine_distance((32.0, 34.8), (32.1, 34.9)), 2)
        14.58
    """
    lat1, lon1 = origin
    lat2, lon2 = destination

    # Convert decimal degrees to radians
    lon1, lat1, lon2, lat2 = map(math.radians, [lon1, lat1, lon2, lat2])

    dlon = lon2 - lon1
    dlat = lat2 - lat1
    a = math.sin(dlat / 2)**2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2)**2
    c = 2 * math.asin(math.sqrt(min(1.0, a)))

    return c * config.EARTH_RADIUS_KM


def parse_clock(value: str) -> str:
    """
    Validate a ``HH:MM`` clock string and return it zero-padded.

    Raises:
        ValueError: If the value is not a valid 24-hour clock time
    """
    if not isinstance(value, str):
        raise ValueError(f"expected 'HH:MM' string, got {value!r}")
    return datetime.strptime(value.strip(), "%H:%M").strftime("%H:%M")


def parse_date(value: str) -> str:
    """
    Validate a ``YYYY-MM-DD`` date and return it zero-padded.

    Dates are compared as strings, so ``"2023-6-1"`` must become
    ``"2023-06-01"`` before it is stored.

    Raises:
        ValueError: If the value is not a valid calendar date
    """
    if not isinstance(value, str):
        raise ValueError(f"expected 'YYYY-MM-DD' string, got {value!r}")
    return datetime.strptime(value.strip(), "%Y-%m-%d").strftime("%Y-%m-%d")


def time_to_minutes(clock: str) -> int:
    """
    Convert a ``HH:MM`` clock string to minutes since midnight.

    Hours past 23 are accepted so that computed arrival times which run past
    midnight still compare correctly.

    Example:
        >>> time_to_minutes("14:30")
        870
    """
    hours, minutes = clock.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_clock(minutes: int) -> str:
    """Format minutes since midnight as ``HH:MM`` without wrapping."""
    hours, mins = divmod(int(minutes), 60)
    return f"{hours:02d}:{mins:02d}"


def time_difference_minutes(start: str, end: str) -> int:
    """
    Minutes from ``start`` to ``end``.

    Negative when the two are misordered; callers decide what that means.
    """
    return time_to_minutes(end) - time_to_minutes(start)


def add_minutes_to_time(clock: str, minutes_to_add: Union[int, float]) -> str:
    """
    Add a whole number of minutes to a clock time.

    Note: Designed for single-day scheduling. The result is not wrapped, so
    ``add_minutes_to_time("23:50", 20)`` gives ``"24:10"``.

    Example:
        >>> add_minutes_to_time("18:30", 45)
        '19:15'
    """
    return minutes_to_clock(time_to_minutes(clock) + int(minutes_to_add))


def is_time_after(first: str, second: str) -> bool:
    """True when ``first`` is strictly later than ``second``."""
    return time_to_minutes(first) > time_to_minutes(second)


def is_time_in_range(clock: str, start: str, end: str) -> bool:
    """True when ``start <= clock <= end`` (inclusive at both ends)."""
    return time_to_minutes(start) <= time_to_minutes(clock) <= time_to_minutes(end)


def travel_time_minutes(distance_km: float, speed_kmh: float = None) -> float:
    """
    Calculate estimated travel time for a given distance.

    Args:
        distance_km: Distance in kilometers
        speed_kmh: Average speed (default from config)

    Returns:
        Estimated travel time in minutes

    Example:
        >>> travel_time_minutes(15.0)  # 15km at 60km/h
        15.0
    """
    if speed_kmh is None:
        speed_kmh = config.AVG_SPEED_KMH
    if speed_kmh <= 0:
        return float('inf')
    return (distance_km / speed_kmh) * 60
