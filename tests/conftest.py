"""Shared fixtures for the simulation core tests."""

import pytest

from Gridlock.game_model import RoutingGameModel
from Gridlock.road_network import RoadNetwork

RED = "#ff6b6b"
TEAL = "#4ecdc4"


@pytest.fixture
def model():
    """Small headless model with the building cadence switched off."""
    return RoutingGameModel(width=20, height=12, spawn_buildings=False, seed=42)


@pytest.fixture
def corridor():
    """Straight road (0,0) … (4,0)."""
    return RoadNetwork([(x, 0) for x in range(5)])


def run_ticks(scheduler, start, stop, dt=0.05, destinations=None):
    """Tick *scheduler* from *start* (exclusive) to *stop*; returns total deliveries."""
    delivered = 0
    steps = int(round((stop - start) / dt))
    for i in range(1, steps + 1):
        delivered += scheduler.tick(start + i * dt, dt, destinations)
    return delivered
