# ride-dispatch/ride_dispatch/routing.py
"""
Road distance resolution for the ride assignment engine.

Two pieces live here:

- ``OSRMClient`` talks to an OSRM server over HTTP and returns the driving
  distance between two points, raising ``RoutingError`` on any failure.
- ``DistanceResolver`` decides when a routed query is worth making. Legs whose
  Haversine distance is above a threshold skip the query entirely; failed
  queries fall back to the Haversine value. Results are cached for the
  lifetime of the resolver, so one resolver should be built per run.

The resolver never raises for routing problems. It degrades precision, not
availability.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, asdict
from typing import Dict, Optional, Protocol, Tuple

import requests

from . import config, utils

logger = logging.getLogger(__name__)

LatLon = Tuple[float, float]
CacheKey = Tuple[float, float, float, float]


class RoutingError(Exception):
    """Raised when the routing service cannot produce a usable route."""


class RoutingClient(Protocol):
    """Anything that can report a driving distance in kilometers, or raise."""

    def route_distance_km(self, origin: LatLon, destination: LatLon) -> float:
        ...


class OSRMClient:
    """
    OSRM adapter.

    Converts internal (lat, lon) pairs to OSRM's lon,lat order, calls the
    /route endpoint and normalizes the answer to kilometers.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        profile: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.base_url = (base_url or config.OSRM_SERVER_URL).rstrip("/")
        self.profile = profile or config.OSRM_PROFILE
        self.timeout = timeout if timeout is not None else config.OSRM_TIMEOUT_SECONDS

    @staticmethod
    def format_coordinates(*coords: LatLon) -> str:
        """Convert (lat, lon) pairs to OSRM format 'lon,lat;lon,lat'."""
        return ";".join(f"{lon},{lat}" for lat, lon in coords)

    def route_distance_km(self, origin: LatLon, destination: LatLon) -> float:
        """
        Query the driving distance between two points.

        Args:
            origin: (lat, lon) of the start
            destination: (lat, lon) of the end

        Returns:
            Route distance in kilometers

        Raises:
            RoutingError: On timeout, HTTP error, error code, empty route set
                or an unparseable response
        """
        url = f"{self.base_url}/route/v1/{self.profile}/{self.format_coordinates(origin, destination)}"

        try:
            response = requests.get(
                url,
                params={"overview": "false"},  # geometry is not needed
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.Timeout as e:
            raise RoutingError(f"OSRM request timed out after {self.timeout}s") from e
        except requests.exceptions.RequestException as e:
            raise RoutingError(f"OSRM request failed: {e}") from e
        except ValueError as e:
            raise RoutingError(f"OSRM returned invalid JSON: {e}") from e

        if not isinstance(data, dict) or data.get("code") != "Ok":
            code = data.get("code") if isinstance(data, dict) else None
            raise RoutingError(f"OSRM error: {code}")
        routes = data.get("routes") or []
        if not routes:
            raise RoutingError("OSRM returned no route")

        try:
            return float(routes[0]["distance"]) / 1000  # meters -> km
        except (KeyError, TypeError, ValueError) as e:
            raise RoutingError(f"OSRM response parsing failed: {e}") from e


@dataclass
class ResolverStats:
    """Counters describing how distances were resolved during a run."""
    routed_queries: int = 0
    cache_hits: int = 0
    threshold_skips: int = 0
    fallbacks: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


class DistanceResolver:
    """
    Resolves driving distances with a Haversine pre-filter and fallback.

    Algorithm for ``resolve(origin, destination)``:
    1. Return the cached value for the pair if present
    2. Compute the Haversine distance
    3. Above the threshold: cache and return the Haversine distance
    4. Otherwise query the routing client; on any failure cache and return
       the Haversine distance instead

    The cache is safe to share between threads. Concurrent resolutions of the
    same pair wait on a per-pair lock, so each pair is queried at most once.

    Attributes:
        client: Routing client (default: ``OSRMClient``)
        threshold_km: Haversine distance above which the client is skipped
        stats: Resolution counters for this resolver's lifetime
    """

    def __init__(
        self,
        client: Optional[RoutingClient] = None,
        threshold_km: Optional[float] = None,
    ) -> None:
        self.client: RoutingClient = client if client is not None else OSRMClient()
        self.threshold_km = (
            threshold_km if threshold_km is not None else config.ROUTED_DISTANCE_THRESHOLD_KM
        )
        self.stats = ResolverStats()

        self._cache: Dict[CacheKey, float] = {}
        self._lock = threading.Lock()
        self._key_locks: Dict[CacheKey, threading.Lock] = {}

    @staticmethod
    def _cache_key(origin: LatLon, destination: LatLon) -> CacheKey:
        return (origin[0], origin[1], destination[0], destination[1])

    def _cached(self, key: CacheKey) -> Optional[float]:
        with self._lock:
            value = self._cache.get(key)
            if value is not None:
                self.stats.cache_hits += 1
            return value

    def _store(self, key: CacheKey, value: float) -> float:
        with self._lock:
            self._cache[key] = value
        return value

    def _lock_for(self, key: CacheKey) -> threading.Lock:
        with self._lock:
            return self._key_locks.setdefault(key, threading.Lock())

    def _count(self, counter: str) -> None:
        with self._lock:
            setattr(self.stats, counter, getattr(self.stats, counter) + 1)

    def resolve(self, origin: LatLon, destination: LatLon) -> float:
        """
        Get the driving distance between two points in kilometers.

        Never raises for routing failures; the Haversine distance is used
        instead and a warning is logged.
        """
        origin = (float(origin[0]), float(origin[1]))
        destination = (float(destination[0]), float(destination[1]))
        key = self._cache_key(origin, destination)

        cached = self._cached(key)
        if cached is not None:
            return cached

        if origin == destination:
            return self._store(key, 0.0)

        with self._lock_for(key):
            # Another thread may have resolved the pair while we waited
            cached = self._cached(key)
            if cached is not None:
                return cached

            geometric = utils.haversine_distance(origin, destination)
            if geometric > self.threshold_km:
                self._count("threshold_skips")
                return self._store(key, geometric)

            self._count("routed_queries")
            try:
                distance = float(self.client.route_distance_km(origin, destination))
                if distance < 0:
                    raise RoutingError(f"negative route distance {distance}")
            except Exception as e:
                # Any client failure degrades to the geometric distance
                logger.warning(
                    f"Routed distance failed for {origin} -> {destination}, "
                    f"using Haversine ({geometric:.2f} km): {e}"
                )
                self._count("fallbacks")
                return self._store(key, geometric)

            return self._store(key, distance)

    def clear_cache(self) -> int:
        """
        Clear the distance cache.

        Returns:
            Number of cached entries that were cleared
        """
        with self._lock:
            count = len(self._cache)
            self._cache.clear()
            self._key_locks.clear()
        return count

    @property
    def cache_size(self) -> int:
        with self._lock:
            return len(self._cache)
