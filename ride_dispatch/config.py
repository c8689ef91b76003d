# ride-dispatch/ride_dispatch/config.py
"""
Configuration parameters for the ride assignment engine.

This module centralizes all tunable parameters, making it easy to:
- Trade routed-distance precision against routing service load
- Adjust the reachability model used for feasibility
- Tune the cost model used to rank candidate drivers

Components read these values at call time, and every one of them can be
overridden per instance through the corresponding constructor argument.
"""

from typing import Final

# =============================================================================
# PHYSICS AND TIME CONSTANTS
# =============================================================================

EARTH_RADIUS_KM: Final[float] = 6371.0
"""Mean Earth radius used by the great-circle (Haversine) distance."""

AVG_SPEED_KMH: float = 60.0
"""
Average driving speed in km/h used to turn an empty-leg distance into a
travel-time estimate for the reachability check.
"""

DEFAULT_DAY_START: Final[str] = "00:00"
"""Clock time a driver without a defined shift becomes available each day."""

# =============================================================================
# COST MODEL
# =============================================================================

DRIVER_HOURLY_RATE: float = 30.0
"""Driver-time cost per hour of assigned ride (currency units / hour)."""

# =============================================================================
# ROAD DISTANCE (OSRM) CONFIGURATION
# =============================================================================

ROUTED_DISTANCE_THRESHOLD_KM: float = 30.0
"""
Geometric distance (km) above which the routing service is not queried.
Road detours matter most on short legs; long legs use Haversine directly.
"""

OSRM_SERVER_URL: str = "http://router.project-osrm.org"
"""
OSRM server URL. Options:
- "http://router.project-osrm.org" (public demo, rate-limited)
- "http://localhost:5000" (local Docker instance)
"""

OSRM_PROFILE: str = "driving"
"""OSRM routing profile (driving, walking, cycling)."""

OSRM_TIMEOUT_SECONDS: float = 5.0
"""Timeout for OSRM API requests. A timed-out query falls back to Haversine."""

# =============================================================================
# CONCURRENCY
# =============================================================================

MAX_WORKERS: int = 1
"""
Worker threads used to evaluate drivers for a single ride.
1 evaluates sequentially; higher values overlap routing service latency.
"""
