import threading
import time

import pytest

from ride_dispatch.models import Driver, Ride
from ride_dispatch.routing import DistanceResolver, RoutingError
from ride_dispatch.utils import haversine_distance


class FakeRoutingClient:
    """Routing client that answers with Haversine x factor and counts calls."""

    def __init__(self, factor: float = 1.0, fail: bool = False, delay: float = 0.0):
        self.factor = factor
        self.fail = fail
        self.delay = delay
        self.calls = []
        self._lock = threading.Lock()

    def route_distance_km(self, origin, destination):
        with self._lock:
            self.calls.append((origin, destination))
        if self.delay:
            time.sleep(self.delay)
        if self.fail:
            raise RoutingError("routing service unavailable")
        return haversine_distance(origin, destination) * self.factor


@pytest.fixture
def routing_client():
    return FakeRoutingClient()


@pytest.fixture
def resolver(routing_client):
    return DistanceResolver(client=routing_client)


def driver_record(driver_id="driver1", **overrides):
    record = {
        "driverId": driver_id,
        "city": "Tel Aviv, Israel",
        "city_coords": [32.0, 34.8],
        "numberOfSeats": 4,
        "fuelCost": 0.6,
        "shiftStart": "08:00",
        "shiftEnd": "20:00",
        "blockedAddresses": [],
    }
    record.update(overrides)
    return {k: v for k, v in record.items() if v is not None}


def ride_record(ride_id="ride1", **overrides):
    record = {
        "_id": ride_id,
        "date": "2023-06-01",
        "startTime": "09:00",
        "endTime": "09:30",
        "startPoint": "Tel Aviv, Israel",
        "startPoint_coords": [32.0, 34.8],
        "endPoint": "Ramat Gan, Israel",
        "endPoint_coords": [32.1, 34.9],
        "numberOfSeats": 2,
    }
    record.update(overrides)
    return record


@pytest.fixture
def make_driver():
    def _make(driver_id="driver1", **overrides) -> Driver:
        return Driver.from_dict(driver_record(driver_id, **overrides))
    return _make


@pytest.fixture
def make_ride():
    def _make(ride_id="ride1", **overrides) -> Ride:
        return Ride.from_dict(ride_record(ride_id, **overrides))
    return _make
