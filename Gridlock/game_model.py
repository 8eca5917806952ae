# game_model.py ─ headless per-frame driver around the simulation core
from __future__ import annotations

import mesa
from mesa.space import MultiGrid

from Gridlock.config import Defaults
from Gridlock.road_network import RoadNetwork
from Gridlock.run_state import RunState, GamePhase
from Gridlock.agents.buildings import House
from Gridlock.agents.building_registry import BuildingRegistry, BuildingSpawner
from Gridlock.agents.traffic_scheduler import TrafficScheduler
from Gridlock.utilities.grid import Grid, Cell


def max_waiting(model: "RoutingGameModel") -> int:
    return max((d.waiting_count for d in model.registry.destinations), default=0)


class RoutingGameModel(mesa.Model):
    """
    One run of the routing game.

    Each :meth:`step` is one frame: the clock advances by ``time_per_step``,
    the building cadence may add a house or destination, traffic is ticked,
    deliveries are scored and the capacity rule is checked. Road edits come
    from outside through :meth:`build_road` / :meth:`erase_road`.
    """

    def __init__(self,
                 width=Defaults.WIDTH,
                 height=Defaults.HEIGHT,
                 cell_size=Defaults.GRID_SIZE,
                 time_per_step=Defaults.TIME_PER_STEP_IN_SECONDS,
                 spawn_buildings=True,
                 initial_spawn_delay=Defaults.INITIAL_SPAWN_DELAY,
                 spawn_interval=Defaults.SPAWN_INTERVAL,
                 spawn_interval_decrease=Defaults.SPAWN_INTERVAL_DECREASE,
                 min_spawn_interval=Defaults.MIN_SPAWN_INTERVAL,
                 car_spawn_delay=Defaults.CAR_SPAWN_DELAY,
                 car_speed=Defaults.CAR_SPEED,
                 max_cars_per_destination=Defaults.MAX_CARS_PER_DESTINATION,
                 points_per_delivery=Defaults.POINTS_PER_DELIVERY,
                 seed=None):

        super().__init__(seed=seed)
        self.width = width
        self.height = height
        self.time_per_step = time_per_step
        self.spawn_buildings = spawn_buildings
        self.now = 0.0

        self.layout = Grid(width, height, cell_size)
        self.grid = MultiGrid(width, height, torus=False)
        self.network = RoadNetwork()

        self.registry = BuildingRegistry(self, self.network, width, height)
        self.spawner = BuildingSpawner(
            self.registry,
            initial_delay=initial_spawn_delay,
            interval=spawn_interval,
            interval_decrease=spawn_interval_decrease,
            min_interval=min_spawn_interval,
        )
        self.traffic = TrafficScheduler(
            self,
            self.network,
            self.layout,
            spawn_delay=car_spawn_delay,
            car_speed=car_speed,
        )
        self.run_state = RunState(max_cars_per_destination, points_per_delivery)

        self.datacollector = mesa.DataCollector(
            model_reporters={
                "Score": lambda m: m.run_state.score,
                "Deliveries": lambda m: m.run_state.deliveries,
                "LiveVehicles": lambda m: len(m.traffic.live_vehicles()),
                "MaxWaiting": max_waiting,
            }
        )

        self.running = True
        self.start_run()

    # -------------------------------------------------------------------
    #  Lifecycle
    # -------------------------------------------------------------------
    def start_run(self) -> None:
        if not self.run_state.start(self.now):
            return
        if self.spawn_buildings:
            self.spawner.start(self.now)
        self.traffic.start(self.registry.houses, self.registry.destinations, now=self.now)

    def step(self):
        if self.run_state.phase is not GamePhase.RUNNING:
            self.running = False
            return

        self.now += self.time_per_step

        for building in self.spawner.tick(self.now):
            if isinstance(building, House):
                self.traffic.add_house(building)

        deliveries = self.traffic.tick(self.now, self.time_per_step, self.registry.destinations)
        self.run_state.add_deliveries(deliveries)
        self.datacollector.collect(self)

        if self.run_state.check_game_over(self.registry.destinations):
            self.end_run()

    def end_run(self) -> None:
        if self.run_state.end(self.now):
            self.traffic.stop()
            self.spawner.stop()
            self.running = False

    # -------------------------------------------------------------------
    #  Editing passthroughs
    # -------------------------------------------------------------------
    def build_road(self, start: Cell, end: Cell | None = None) -> int:
        """Lay road on the cell line from *start* to *end*; returns new cells."""
        end = start if end is None else end
        cells = [c for c in self.layout.line_between(start, end) if self.layout.is_valid(c)]
        return self.network.add_line(cells)

    def erase_road(self, cell: Cell) -> bool:
        if not self.layout.is_valid(cell):
            return False
        return self.network.remove(cell)

    def add_house(self, cell: Cell, color: str):
        """Scripted house placement; the house starts spawning right away."""
        house = self.registry.add_house(cell, color)
        if house is not None:
            self.traffic.add_house(house)
        return house

    def add_destination(self, cell: Cell, color: str):
        return self.registry.add_destination(cell, color)

    # -------------------------------------------------------------------
    #  Queries
    # -------------------------------------------------------------------
    @property
    def score(self) -> int:
        return self.run_state.score
