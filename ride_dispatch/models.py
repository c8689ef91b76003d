# ride-dispatch/ride_dispatch/models.py
"""
Core domain models for the ride assignment engine.

This module defines the data structures used throughout a run:
- Driver: A driver with vehicle capacity, fuel cost, home location and limits
- Ride: A scheduled ride request between two locations on one date
- DriverAvailability: Where and when a driver is next free (engine-owned state)
- DriverDailyLedger: Assigned ride minutes per date, for the daily-hour cap
- Assignment / AssignmentResult: The output of a run

Input records are validated when parsed. Malformed records raise
``InvalidRecordError`` and abort the whole run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from . import config, utils

LatLon = Tuple[float, float]


class InvalidRecordError(ValueError):
    """Raised when a driver or ride record is missing fields or malformed."""

    def __init__(self, kind: str, record_id: Any, message: str) -> None:
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"Invalid {kind} record {record_id!r}: {message}")


def _require(record: Mapping[str, Any], key: str, kind: str, record_id: Any) -> Any:
    if key not in record or record[key] is None:
        raise InvalidRecordError(kind, record_id, f"missing required field '{key}'")
    return record[key]


def _coords(value: Any, key: str, kind: str, record_id: Any) -> LatLon:
    if isinstance(value, (str, bytes)):
        raise InvalidRecordError(kind, record_id, f"'{key}' must be a [lat, lon] pair, got {value!r}")
    try:
        lat, lon = value
        return (float(lat), float(lon))
    except (TypeError, ValueError):
        raise InvalidRecordError(kind, record_id, f"'{key}' must be a [lat, lon] pair, got {value!r}")


def _positive_int(value: Any, key: str, kind: str, record_id: Any) -> int:
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise InvalidRecordError(kind, record_id, f"'{key}' must be an integer, got {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise InvalidRecordError(kind, record_id, f"'{key}' must be an integer, got {value!r}")
    if number <= 0:
        raise InvalidRecordError(kind, record_id, f"'{key}' must be a positive integer, got {value!r}")
    return number


def _clock(value: Any, key: str, kind: str, record_id: Any) -> str:
    try:
        return utils.parse_clock(value)
    except ValueError:
        raise InvalidRecordError(kind, record_id, f"'{key}' must be an 'HH:MM' time, got {value!r}")


@dataclass(frozen=True)
class Driver:
    """
    Represents a driver in the fleet. Immutable for the duration of a run.

    Attributes:
        driver_id: Unique identifier
        city: Name of the home location
        home: (latitude, longitude) of the home location
        seats: Seating capacity
        fuel_cost: Fuel cost per kilometer
        shift_start/shift_end: Optional shift window ('HH:MM')
        max_daily_work_hours: Optional cap on assigned ride hours per date
        blocked_addresses: Substrings of addresses the driver will not serve
    """
    driver_id: str
    home: LatLon
    seats: int
    fuel_cost: float
    city: str = ""
    shift_start: Optional[str] = None
    shift_end: Optional[str] = None
    max_daily_work_hours: Optional[float] = None
    blocked_addresses: Tuple[str, ...] = ()

    @property
    def has_shift(self) -> bool:
        return self.shift_start is not None and self.shift_end is not None

    @property
    def day_start(self) -> str:
        """Clock time the driver becomes available on a fresh day."""
        return self.shift_start or config.DEFAULT_DAY_START

    @classmethod
    def from_dict(cls, record: Mapping[str, Any]) -> "Driver":
        """
        Parse a driver input record.

        Raises:
            InvalidRecordError: If a required field is missing or malformed
        """
        kind = "driver"
        driver_id = _require(record, "driverId", kind, None)
        home = _coords(_require(record, "city_coords", kind, driver_id), "city_coords", kind, driver_id)
        seats = _positive_int(_require(record, "numberOfSeats", kind, driver_id), "numberOfSeats", kind, driver_id)

        fuel_cost = _require(record, "fuelCost", kind, driver_id)
        try:
            fuel_cost = float(fuel_cost)
        except (TypeError, ValueError):
            raise InvalidRecordError(kind, driver_id, f"'fuelCost' must be a number, got {fuel_cost!r}")
        if fuel_cost < 0:
            raise InvalidRecordError(kind, driver_id, "'fuelCost' must not be negative")

        shift_start = record.get("shiftStart")
        shift_end = record.get("shiftEnd")
        if (shift_start is None) != (shift_end is None):
            raise InvalidRecordError(kind, driver_id, "'shiftStart' and 'shiftEnd' must be given together")
        if shift_start is not None:
            shift_start = _clock(shift_start, "shiftStart", kind, driver_id)
            shift_end = _clock(shift_end, "shiftEnd", kind, driver_id)
            if utils.is_time_after(shift_start, shift_end):
                raise InvalidRecordError(kind, driver_id, "shift ends before it starts")

        max_hours = record.get("maxDailyWorkHours")
        if max_hours is not None:
            try:
                max_hours = float(max_hours)
            except (TypeError, ValueError):
                raise InvalidRecordError(kind, driver_id, f"'maxDailyWorkHours' must be a number, got {max_hours!r}")
            if max_hours <= 0:
                raise InvalidRecordError(kind, driver_id, "'maxDailyWorkHours' must be positive")

        blocked = record.get("blockedAddresses") or []
        if isinstance(blocked, str) or not all(isinstance(b, str) for b in blocked):
            raise InvalidRecordError(kind, driver_id, "'blockedAddresses' must be a list of strings")

        return cls(
            driver_id=str(driver_id),
            home=home,
            seats=seats,
            fuel_cost=fuel_cost,
            city=str(record.get("city") or ""),
            shift_start=shift_start,
            shift_end=shift_end,
            max_daily_work_hours=max_hours,
            blocked_addresses=tuple(b for b in blocked if b),
        )

    def __repr__(self) -> str:
        return f"Driver({self.driver_id}, seats={self.seats})"


@dataclass(frozen=True)
class Ride:
    """
    Represents a scheduled ride request. Immutable; carries no driver reference.

    Attributes:
        ride_id: Unique identifier
        date: Service date ('YYYY-MM-DD')
        start_time/end_time: Pickup and dropoff clock times ('HH:MM')
        start_point/end_point: Address strings (matched against blocked lists)
        start_coords/end_coords: (latitude, longitude) of both ends
        seats: Required seat count
    """
    ride_id: str
    date: str
    start_time: str
    end_time: str
    start_point: str
    start_coords: LatLon
    end_point: str
    end_coords: LatLon
    seats: int

    @property
    def duration_minutes(self) -> int:
        return utils.time_difference_minutes(self.start_time, self.end_time)

    @property
    def sort_key(self) -> Tuple[str, int, str]:
        """Chronological processing key: (date, start minute), then ride id."""
        return (self.date, utils.time_to_minutes(self.start_time), self.ride_id)

    @classmethod
    def from_dict(cls, record: Mapping[str, Any]) -> "Ride":
        """
        Parse a ride input record.

        Rides that end at or before their start time (including rides crossing
        midnight) are rejected here instead of being silently dropped later.

        Raises:
            InvalidRecordError: If a required field is missing or malformed
        """
        kind = "ride"
        ride_id = _require(record, "_id", kind, None)

        raw_date = _require(record, "date", kind, ride_id)
        try:
            date = utils.parse_date(raw_date)
        except ValueError:
            raise InvalidRecordError(kind, ride_id, f"'date' must be 'YYYY-MM-DD', got {raw_date!r}")

        start_time = _clock(_require(record, "startTime", kind, ride_id), "startTime", kind, ride_id)
        end_time = _clock(_require(record, "endTime", kind, ride_id), "endTime", kind, ride_id)
        if not utils.is_time_after(end_time, start_time):
            raise InvalidRecordError(
                kind, ride_id, f"ride must end after it starts on the same day ({start_time}-{end_time})"
            )

        return cls(
            ride_id=str(ride_id),
            date=date,
            start_time=start_time,
            end_time=end_time,
            start_point=str(_require(record, "startPoint", kind, ride_id)),
            start_coords=_coords(
                _require(record, "startPoint_coords", kind, ride_id), "startPoint_coords", kind, ride_id
            ),
            end_point=str(_require(record, "endPoint", kind, ride_id)),
            end_coords=_coords(
                _require(record, "endPoint_coords", kind, ride_id), "endPoint_coords", kind, ride_id
            ),
            seats=_positive_int(_require(record, "numberOfSeats", kind, ride_id), "numberOfSeats", kind, ride_id),
        )

    def __repr__(self) -> str:
        return f"Ride({self.ride_id}, {self.date} {self.start_time}-{self.end_time})"


@dataclass
class DriverAvailability:
    """
    Where and when a driver is next free. Owned and mutated only by the engine.

    Attributes:
        position: Last known (latitude, longitude)
        busy_until: Clock time the driver becomes free
        day_start: Clock time the driver becomes free on a new date
        last_active_date: Date of the last accepted ride, None before the first
    """
    position: LatLon
    busy_until: str
    day_start: str
    last_active_date: Optional[str] = None

    @classmethod
    def for_driver(cls, driver: Driver) -> "DriverAvailability":
        """Initial state: at home, free from the start of the shift."""
        return cls(position=driver.home, busy_until=driver.day_start, day_start=driver.day_start)

    def free_from(self, date: str) -> str:
        """
        Clock time the driver is free on ``date``.

        A ride on a later date than the last accepted one starts from a fresh
        day, so the previous day's end time does not carry over.
        """
        if self.last_active_date is not None and date > self.last_active_date:
            return self.day_start
        return self.busy_until

    def commit(self, ride: Ride) -> None:
        """Move to the end state of an accepted ride."""
        self.position = ride.end_coords
        self.busy_until = ride.end_time
        self.last_active_date = ride.date


@dataclass
class DriverDailyLedger:
    """Cumulative assigned ride minutes per date. Never decremented."""
    minutes_by_date: Dict[str, int] = field(default_factory=dict)

    def minutes_on(self, date: str) -> int:
        return self.minutes_by_date.get(date, 0)

    def record(self, ride: Ride) -> None:
        self.minutes_by_date[ride.date] = self.minutes_on(ride.date) + ride.duration_minutes


@dataclass
class Assignment:
    """A driver and the rides it accepted, in acceptance order."""
    driver_id: str
    ride_ids: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"driverId": self.driver_id, "rideIds": list(self.ride_ids)}


@dataclass
class AssignmentResult:
    """
    Output of one engine run.

    Attributes:
        assignments: One entry per driver with at least one ride
        total_cost: Sum of the accepted minimum costs, rounded to 2 decimals
        dropped_ride_ids: Rides for which no feasible driver existed
    """
    assignments: List[Assignment]
    total_cost: float
    dropped_ride_ids: List[str] = field(default_factory=list)

    @property
    def assigned_ride_count(self) -> int:
        return sum(len(a.ride_ids) for a in self.assignments)

    def rides_for(self, driver_id: str) -> List[str]:
        for assignment in self.assignments:
            if assignment.driver_id == driver_id:
                return list(assignment.ride_ids)
        return []

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the external output shape."""
        return {
            "assignments": [a.to_dict() for a in self.assignments],
            "totalCost": self.total_cost,
        }


def _unique(items: List[Any], key: str, kind: str) -> List[Any]:
    seen = set()
    for item in items:
        item_id = getattr(item, key)
        if item_id in seen:
            raise InvalidRecordError(kind, item_id, "duplicate identifier")
        seen.add(item_id)
    return items


def load_drivers(records: Iterable[Mapping[str, Any]]) -> List[Driver]:
    """Parse driver records, rejecting malformed records and duplicate ids."""
    return _unique([Driver.from_dict(r) for r in records], "driver_id", "driver")


def load_rides(records: Iterable[Mapping[str, Any]]) -> List[Ride]:
    """Parse ride records, rejecting malformed records and duplicate ids."""
    return _unique([Ride.from_dict(r) for r in records], "ride_id", "ride")
