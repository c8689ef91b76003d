# ride-dispatch/ride_dispatch/__init__.py

from .models import (
    Driver,
    Ride,
    DriverAvailability,
    DriverDailyLedger,
    Assignment,
    AssignmentResult,
    InvalidRecordError,
    load_drivers,
    load_rides,
)
from .config import (
    AVG_SPEED_KMH,
    DRIVER_HOURLY_RATE,
    ROUTED_DISTANCE_THRESHOLD_KM,
)
from .routing import DistanceResolver, OSRMClient, RoutingError
from .constraints import check_feasibility, is_feasible
from .scoring import calculate_assignment_cost, cost_breakdown
from .dispatch import AssignmentEngine, assign_drivers_to_rides

__version__ = "1.0.0"

__all__ = [
    # Models
    "Driver",
    "Ride",
    "DriverAvailability",
    "DriverDailyLedger",
    "Assignment",
    "AssignmentResult",
    "InvalidRecordError",
    "load_drivers",
    "load_rides",
    # Core
    "AssignmentEngine",
    "DistanceResolver",
    "OSRMClient",
    "RoutingError",
    # Functions
    "assign_drivers_to_rides",
    "check_feasibility",
    "is_feasible",
    "calculate_assignment_cost",
    "cost_breakdown",
    # Config
    "AVG_SPEED_KMH",
    "DRIVER_HOURLY_RATE",
    "ROUTED_DISTANCE_THRESHOLD_KM",
]
