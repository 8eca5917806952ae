from __future__ import annotations

import heapq
import itertools
import logging
from typing import TYPE_CHECKING, Iterable, Sequence

from Gridlock.config import Defaults
from Gridlock.agents.buildings import House, Destination
from Gridlock.agents.building_registry import matching_destinations
from Gridlock.agents.vehicles.vehicle_base import VehicleAgent
from Gridlock.utilities.general import manhattan, color_name
from Gridlock.utilities.pathfinding import find_path, find_nearest_road

if TYPE_CHECKING:  # avoid circular at runtime
    from Gridlock.road_network import RoadNetwork
    from Gridlock.utilities.grid import Cell, Grid

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────────
#  Helper for planned spawns
# ──────────────────────────────────────────────────────────────────────
class SpawnPlan:
    __slots__ = ("house", "destination", "start_cell", "path")

    def __init__(self, house: House, destination: Destination,
                 start_cell: "Cell", path: list["Cell"]) -> None:
        self.house = house
        self.destination = destination
        self.start_cell = start_cell
        self.path = path

    def __repr__(self):
        return (f"<SpawnPlan {color_name(self.house.color)} "
                f"{self.start_cell}->{self.path[-1]} len={len(self.path)}>")


def complete_route(path: list["Cell"], destination_road: "Cell") -> list["Cell"]:
    """
    Make sure *path* ends on *destination_road*.

    The cell is appended only when it is one step away from the current tail;
    a route that would need a longer jump is rejected (empty list).
    """
    if not path:
        return []
    tail = path[-1]
    if tail == destination_road:
        return path
    if manhattan(tail, destination_road) == 1:
        return [*path, destination_road]
    return []


# ──────────────────────────────────────────────────────────────────────
#  Main scheduler
# ──────────────────────────────────────────────────────────────────────
class TrafficScheduler:
    """
    Spawns, moves and retires vehicles.

    Every house owns one timer in a heap keyed by ``(fire_time, seq)``. A
    firing tries to route a vehicle to a matching destination and always
    re-arms the timer ``spawn_delay`` later, whether a vehicle was produced or
    not. Nothing runs outside :meth:`tick`; time is whatever the caller feeds
    in, which keeps the scheduler drivable by synthetic clocks.
    """

    def __init__(self,
                 model,
                 network: "RoadNetwork",
                 layout: "Grid",
                 spawn_delay: float = Defaults.CAR_SPAWN_DELAY,
                 road_radius: int = Defaults.NEAREST_ROAD_RADIUS,
                 car_speed: float = Defaults.CAR_SPEED,
                 snap_distance: float = Defaults.WAYPOINT_SNAP_DISTANCE):
        self.model = model
        self.network = network
        self.layout = layout
        self.spawn_delay = spawn_delay
        self.road_radius = road_radius
        self.car_speed = car_speed
        self.snap_distance = snap_distance

        self.now = 0.0
        self.active = True

        self._timers: list[tuple[float, int, House]] = []
        self._seq = itertools.count()
        self._tracked: set[House] = set()
        self._destinations: Sequence[Destination] = []
        self._vehicles: list[VehicleAgent] = []

        self.spawned_total = 0
        self.delivered_total = 0
        self.failed_attempts = 0

    # ════════════════════════════════════════════════════════════════
    #  Registration
    # ════════════════════════════════════════════════════════════════
    def start(self, houses: Iterable[House], destinations: Sequence[Destination],
              now: float | None = None) -> None:
        """
        Begin spawning for *houses*. *destinations* is kept by reference, so
        destinations appended to that list later are seen by future firings.
        """
        if now is not None:
            self.now = now
        self._destinations = destinations
        for house in houses:
            self.add_house(house)

    def add_house(self, house: House) -> bool:
        """Track *house* and arm its first firing. No-op if already tracked."""
        if not self.active or house in self._tracked:
            return False
        self._tracked.add(house)
        self._schedule(house, self.now + self.spawn_delay)
        logger.debug("Tracking %r, first spawn at %.2f", house, house.next_spawn_time)
        return True

    @property
    def tracked_houses(self) -> list[House]:
        return list(self._tracked)

    @property
    def pending_timers(self) -> int:
        return len(self._timers)

    def live_vehicles(self) -> list[VehicleAgent]:
        return list(self._vehicles)

    # ════════════════════════════════════════════════════════════════
    #  Public tick
    # ════════════════════════════════════════════════════════════════
    def tick(self, time: float, dt: float,
             destinations: Sequence[Destination] | None = None) -> int:
        """
        Advance the traffic to *time*, moving vehicles by *dt* seconds.

        Runs as a read pass (vehicle movement, due timers, route planning)
        followed by a write pass (retirements, then new vehicles), so vehicles
        spawned in this tick neither move nor interact with this tick's
        arrivals. Returns the number of vehicles delivered.
        """
        if not self.active:
            return 0
        self.now = time
        destinations = self._destinations if destinations is None else destinations

        # read pass
        arrived = [v for v in self._vehicles if v.advance(dt)]

        plans: list[SpawnPlan] = []
        while self._timers and self._timers[0][0] <= time:
            _, _, house = heapq.heappop(self._timers)
            plan = self.plan_spawn(house, destinations)
            if plan is not None:
                plans.append(plan)
            else:
                self.failed_attempts += 1
            self._schedule(house, time + self.spawn_delay)

        # write pass
        delivered = 0
        if arrived:
            lookup = {d.position: d for d in destinations}
            for vehicle in arrived:
                if self._retire(vehicle, lookup):
                    delivered += 1

        for plan in plans:
            self._commit(plan)

        self.delivered_total += delivered
        return delivered

    # ════════════════════════════════════════════════════════════════
    #  Routing
    # ════════════════════════════════════════════════════════════════
    def plan_spawn(self, house: House,
                   destinations: Sequence[Destination] | None = None) -> SpawnPlan | None:
        """Route one vehicle for *house*, or ``None`` if no destination is reachable."""
        destinations = self._destinations if destinations is None else destinations

        candidates = matching_destinations(destinations, house.color)
        if not candidates:
            logger.debug("%r: no %s destination yet", house, color_name(house.color))
            return None

        start_cell = find_nearest_road(self.network, house.position, self.road_radius)
        if start_cell is None:
            logger.debug("%r: not connected to any road", house)
            return None

        for destination in candidates:
            end_cell = find_nearest_road(self.network, destination.position, self.road_radius)
            if end_cell is None:
                continue
            path = complete_route(find_path(self.network, start_cell, end_cell), end_cell)
            if path:
                return SpawnPlan(house, destination, start_cell, path)

        logger.debug("%r: no route to any of %d destinations", house, len(candidates))
        return None

    # ════════════════════════════════════════════════════════════════
    #  Teardown
    # ════════════════════════════════════════════════════════════════
    def stop(self) -> None:
        """Freeze the scheduler: no more timers fire and ticks do nothing."""
        self.active = False

    def destroy(self) -> None:
        """Cancel every timer and drop every live vehicle without retiring it."""
        self.active = False
        for _, _, house in self._timers:
            house.next_spawn_time = None
        self._timers.clear()
        self._tracked.clear()
        for vehicle in self._vehicles:
            vehicle.retired = True
            vehicle.remove()
        self._vehicles.clear()

    # ════════════════════════════════════════════════════════════════
    #  Internals
    # ════════════════════════════════════════════════════════════════
    def _schedule(self, house: House, fire_time: float) -> None:
        house.next_spawn_time = fire_time
        heapq.heappush(self._timers, (fire_time, next(self._seq), house))

    def _commit(self, plan: SpawnPlan) -> VehicleAgent:
        vehicle = VehicleAgent(
            self.model,
            self.layout,
            plan.start_cell,
            plan.house.color,
            plan.path,
            plan.destination.position,
            speed=self.car_speed,
            snap_distance=self.snap_distance,
        )
        plan.destination.reserve()
        self._vehicles.append(vehicle)
        self.spawned_total += 1
        logger.debug("Spawned %r via %r", vehicle, plan)
        return vehicle

    def _retire(self, vehicle: VehicleAgent, lookup: dict) -> bool:
        if vehicle.retired:
            return False
        vehicle.retired = True
        self._vehicles.remove(vehicle)

        destination = lookup.get(vehicle.target_destination)
        if destination is None:
            logger.error("%r arrived at unknown destination %s", vehicle, vehicle.target_destination)
        else:
            destination.release()

        vehicle.remove()
        return True
