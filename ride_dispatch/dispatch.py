# ride-dispatch/ride_dispatch/dispatch.py
"""
Assignment engine: chronological greedy matching of rides to drivers.

Rides are processed one at a time in (date, start time) order. For each ride
every driver is checked against the hard constraints; feasible drivers "bid"
their assignment cost and the lowest bidder wins. The winner's availability
and daily ledger are updated before the next ride is considered.

Per-driver state machine:
    Idle -> Busy-until(t) -> Idle ...
A driver leaves Busy-until(t) implicitly once a ride starts at or after ``t``
and is reachable from the driver's last drop-off.

The algorithm is a single-pass heuristic. It does not search for a globally
optimal assignment, and a ride with no feasible driver is dropped.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from . import config, constraints, scoring
from .models import (
    Assignment,
    AssignmentResult,
    Driver,
    DriverAvailability,
    DriverDailyLedger,
    Ride,
    load_drivers,
    load_rides,
)
from .routing import DistanceResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Bid:
    """A feasible driver's offer for one ride."""
    driver: Driver
    cost: float
    empty_leg_km: float
    ride_km: float


class AssignmentEngine:
    """
    Orchestrates ride-to-driver assignment for one run.

    The engine owns all mutable per-driver state (availability and daily
    ledger). Distance lookups go through a single ``DistanceResolver`` whose
    cache lives as long as the engine, so build one engine per run.

    Attributes:
        resolver: Distance resolver (a fresh one is built when not given)
        max_workers: Threads used to evaluate drivers for a single ride
        avg_speed_kmh: Speed used for the reachability estimate
        hourly_rate: Driver-time cost per hour
    """

    def __init__(
        self,
        resolver: Optional[DistanceResolver] = None,
        max_workers: Optional[int] = None,
        avg_speed_kmh: Optional[float] = None,
        hourly_rate: Optional[float] = None,
    ) -> None:
        self.resolver = resolver if resolver is not None else DistanceResolver()
        self.max_workers = max(1, max_workers if max_workers is not None else config.MAX_WORKERS)
        self.avg_speed_kmh = avg_speed_kmh if avg_speed_kmh is not None else config.AVG_SPEED_KMH
        self.hourly_rate = hourly_rate if hourly_rate is not None else config.DRIVER_HOURLY_RATE

        self.availability: Dict[str, DriverAvailability] = {}
        self.ledgers: Dict[str, DriverDailyLedger] = {}

    def _reset(self, drivers: Sequence[Driver]) -> None:
        self.availability = {d.driver_id: DriverAvailability.for_driver(d) for d in drivers}
        self.ledgers = {d.driver_id: DriverDailyLedger() for d in drivers}

    def evaluate(self, driver: Driver, ride: Ride) -> Optional[Bid]:
        """
        Price one driver for one ride.

        Reads the driver's state but never mutates it, so evaluations for
        different drivers can run concurrently.

        Returns:
            The driver's bid, or None if the pairing is infeasible
        """
        availability = self.availability[driver.driver_id]
        reason = constraints.check_feasibility(
            driver,
            availability,
            self.ledgers[driver.driver_id],
            ride,
            self.resolver,
            self.avg_speed_kmh,
        )
        if reason is not None:
            logger.debug(f"{driver.driver_id} rejected for ride {ride.ride_id}: {reason}")
            return None

        # The empty leg is already cached by the reachability check
        empty_leg_km = self.resolver.resolve(availability.position, ride.start_coords)
        ride_km = self.resolver.resolve(ride.start_coords, ride.end_coords)
        cost = scoring.calculate_assignment_cost(
            driver, ride, empty_leg_km, ride_km, self.hourly_rate
        )
        return Bid(driver=driver, cost=cost, empty_leg_km=empty_leg_km, ride_km=ride_km)

    def _collect_bids(
        self,
        drivers: Sequence[Driver],
        ride: Ride,
        executor: Optional[ThreadPoolExecutor],
    ) -> List[Optional[Bid]]:
        # executor.map preserves driver order, which keeps tie-breaking stable
        if executor is None:
            return [self.evaluate(driver, ride) for driver in drivers]
        return list(executor.map(lambda driver: self.evaluate(driver, ride), drivers))

    @staticmethod
    def select_winner(bids: Iterable[Optional[Bid]]) -> Optional[Bid]:
        """
        Lowest-cost bid. On ties the first bid in driver order wins.
        """
        best: Optional[Bid] = None
        for bid in bids:
            if bid is not None and (best is None or bid.cost < best.cost):
                best = bid
        return best

    def _commit(self, bid: Bid, ride: Ride, assignments: Dict[str, Assignment]) -> None:
        driver_id = bid.driver.driver_id
        assignments[driver_id].ride_ids.append(ride.ride_id)
        self.availability[driver_id].commit(ride)
        self.ledgers[driver_id].record(ride)

    def run(self, drivers: Sequence[Driver], rides: Sequence[Ride]) -> AssignmentResult:
        """
        Assign rides to drivers.

        Args:
            drivers: The fleet; list order decides ties between equal bids
            rides: Rides to dispatch, in any order

        Returns:
            AssignmentResult with per-driver ride lists (drivers without rides
            omitted) and the total cost rounded to two decimals
        """
        self._reset(drivers)
        assignments: Dict[str, Assignment] = {d.driver_id: Assignment(d.driver_id) for d in drivers}
        dropped: List[str] = []
        total_cost = 0.0

        ordered_rides = sorted(rides, key=lambda r: r.sort_key)

        executor = ThreadPoolExecutor(max_workers=self.max_workers) if self.max_workers > 1 else None
        try:
            for ride in ordered_rides:
                winner = self.select_winner(self._collect_bids(drivers, ride, executor))

                if winner is None:
                    logger.debug(f"No feasible driver for ride {ride.ride_id}, dropping it")
                    dropped.append(ride.ride_id)
                    continue

                self._commit(winner, ride, assignments)
                total_cost += winner.cost
                logger.debug(
                    f"Ride {ride.ride_id} -> {winner.driver.driver_id} "
                    f"(cost={winner.cost:.2f}, empty leg={winner.empty_leg_km:.2f} km)"
                )
        finally:
            if executor is not None:
                executor.shutdown(wait=True)

        result = AssignmentResult(
            assignments=[a for a in assignments.values() if a.ride_ids],
            total_cost=round(total_cost, 2),
            dropped_ride_ids=dropped,
        )

        logger.info(
            f"Assigned {result.assigned_ride_count}/{len(ordered_rides)} rides "
            f"to {len(result.assignments)} drivers, dropped {len(dropped)}, "
            f"total cost {result.total_cost:.2f}"
        )
        logger.info(f"Distance resolution: {self.resolver.stats.to_dict()}")
        return result


def assign_drivers_to_rides(
    drivers_data: Iterable[Mapping[str, Any]],
    rides_data: Iterable[Mapping[str, Any]],
    resolver: Optional[DistanceResolver] = None,
    max_workers: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Run the engine over raw driver and ride records.

    Args:
        drivers_data: Driver records as loaded from JSON
        rides_data: Ride records as loaded from JSON
        resolver: Optional distance resolver (default: fresh OSRM-backed one)
        max_workers: Optional worker count for per-ride evaluation

    Returns:
        ``{"assignments": [{"driverId", "rideIds"}, ...], "totalCost": float}``

    Raises:
        InvalidRecordError: If any record is malformed
    """
    drivers = load_drivers(drivers_data)
    rides = load_rides(rides_data)
    engine = AssignmentEngine(resolver=resolver, max_workers=max_workers)
    return engine.run(drivers, rides).to_dict()
