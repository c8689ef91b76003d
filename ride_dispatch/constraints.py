# ride-dispatch/ride_dispatch/constraints.py
"""
Hard feasibility constraints for pairing a driver with a ride.

A driver may take a ride only if every check passes:
1. Capacity: enough seats
2. Shift: ride starts and ends inside the shift window
3. Blocked addresses: neither endpoint matches a blocked substring
4. Daily hours: the ride keeps the driver under the daily cap
5. Busy-until: the driver is free no later than the ride start
6. Reachability: the driver can drive to the pickup before the ride starts

Checks run cheapest first. Only reachability resolves a distance.
"""

from __future__ import annotations

import math
from typing import Optional

from . import utils
from .models import Driver, DriverAvailability, DriverDailyLedger, Ride
from .routing import DistanceResolver


def has_capacity(driver: Driver, ride: Ride) -> bool:
    return driver.seats >= ride.seats


def is_on_shift(driver: Driver, ride: Ride) -> bool:
    """Drivers without a shift are always on shift."""
    if not driver.has_shift:
        return True
    return (
        utils.is_time_in_range(ride.start_time, driver.shift_start, driver.shift_end)
        and utils.is_time_in_range(ride.end_time, driver.shift_start, driver.shift_end)
    )


def is_address_blocked(driver: Driver, address: str) -> bool:
    """Case-insensitive substring match against the driver's blocked list."""
    if not driver.blocked_addresses:
        return False
    address = address.lower()
    return any(blocked.lower() in address for blocked in driver.blocked_addresses)


def would_exceed_daily_hours(driver: Driver, ledger: DriverDailyLedger, ride: Ride) -> bool:
    if driver.max_daily_work_hours is None:
        return False
    max_daily_minutes = driver.max_daily_work_hours * 60
    return ledger.minutes_on(ride.date) + ride.duration_minutes > max_daily_minutes


def earliest_arrival(
    availability: DriverAvailability,
    ride: Ride,
    empty_leg_km: float,
    speed_kmh: Optional[float] = None,
) -> str:
    """Clock time the driver can be at the ride's start point."""
    travel_minutes = math.ceil(utils.travel_time_minutes(empty_leg_km, speed_kmh))
    return utils.add_minutes_to_time(availability.free_from(ride.date), travel_minutes)


def can_reach_in_time(
    availability: DriverAvailability,
    ride: Ride,
    resolver: DistanceResolver,
    speed_kmh: Optional[float] = None,
) -> bool:
    empty_leg_km = resolver.resolve(availability.position, ride.start_coords)
    arrival = earliest_arrival(availability, ride, empty_leg_km, speed_kmh)
    return not utils.is_time_after(arrival, ride.start_time)


def check_feasibility(
    driver: Driver,
    availability: DriverAvailability,
    ledger: DriverDailyLedger,
    ride: Ride,
    resolver: DistanceResolver,
    speed_kmh: Optional[float] = None,
) -> Optional[str]:
    """
    Run every constraint for one (driver, ride) pair.

    Args:
        driver: Candidate driver
        availability: The driver's current position and busy-until time
        ledger: The driver's assigned minutes per date
        ride: Ride being dispatched
        resolver: Distance resolver for the empty leg
        speed_kmh: Average speed for the reachability estimate (default from config)

    Returns:
        None if the driver can take the ride, otherwise a short reason
    """
    if not has_capacity(driver, ride):
        return "capacity"
    if utils.is_time_after(availability.free_from(ride.date), ride.start_time):
        return "busy"
    if not is_on_shift(driver, ride):
        return "off shift"
    if is_address_blocked(driver, ride.start_point) or is_address_blocked(driver, ride.end_point):
        return "blocked address"
    if would_exceed_daily_hours(driver, ledger, ride):
        return "daily hours"
    if not can_reach_in_time(availability, ride, resolver, speed_kmh):
        return "unreachable"
    return None


def is_feasible(
    driver: Driver,
    availability: DriverAvailability,
    ledger: DriverDailyLedger,
    ride: Ride,
    resolver: DistanceResolver,
    speed_kmh: Optional[float] = None,
) -> bool:
    return check_feasibility(driver, availability, ledger, ride, resolver, speed_kmh) is None
