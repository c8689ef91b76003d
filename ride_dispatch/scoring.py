# ride-dispatch/ride_dispatch/scoring.py
"""
Cost function used to rank feasible drivers for a ride.

The cost of giving a ride to a driver has three parts:
1. Driver time: ride duration in hours times the hourly rate
2. Ride fuel: routed ride distance times the driver's fuel cost per km
3. Empty-leg fuel: distance from the driver's last position to the pickup,
   times the same fuel cost

Lower cost = better candidate. Feasibility is checked separately in
``constraints``; this module assumes the pairing is already allowed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from . import config
from .models import Driver, Ride


@dataclass(frozen=True)
class CostBreakdown:
    """The components of one assignment's cost."""
    driver_time: float
    ride_fuel: float
    empty_leg_fuel: float

    @property
    def total(self) -> float:
        return self.driver_time + self.ride_fuel + self.empty_leg_fuel


def cost_breakdown(
    driver: Driver,
    ride: Ride,
    empty_leg_km: float,
    ride_km: float,
    hourly_rate: Optional[float] = None,
) -> CostBreakdown:
    """
    Break down the cost for a driver to take a ride.

    Args:
        driver: The driver being priced
        ride: The ride being dispatched
        empty_leg_km: Repositioning distance to the ride's start point
        ride_km: Distance from the ride's start point to its end point
        hourly_rate: Driver-time cost per hour (default from config)

    Returns:
        CostBreakdown whose ``total`` is the assignment cost
    """
    if hourly_rate is None:
        hourly_rate = config.DRIVER_HOURLY_RATE

    return CostBreakdown(
        driver_time=(ride.duration_minutes / 60) * hourly_rate,
        ride_fuel=ride_km * driver.fuel_cost,
        empty_leg_fuel=empty_leg_km * driver.fuel_cost,
    )


def calculate_assignment_cost(
    driver: Driver,
    ride: Ride,
    empty_leg_km: float,
    ride_km: float,
    hourly_rate: Optional[float] = None,
) -> float:
    """Scalar cost of a feasible (driver, ride) pairing. See ``cost_breakdown``."""
    return cost_breakdown(driver, ride, empty_leg_km, ride_km, hourly_rate).total
