from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING, Iterable, Sequence

from Gridlock.config import Defaults
from Gridlock.agents.buildings import Building, House, Destination
from Gridlock.utilities.general import manhattan, colors_match
from Gridlock.utilities.grid import Cell

if TYPE_CHECKING:  # avoid circular at runtime
    from Gridlock.road_network import RoadNetwork

logger = logging.getLogger(__name__)


def matching_destinations(destinations: Iterable[Destination], color: str) -> list[Destination]:
    """Destinations of *color*, in registration order."""
    return [d for d in destinations if colors_match(d.color, color)]


class BuildingRegistry:
    """
    Owns every house and destination of a run and decides where new ones go.

    A candidate cell is valid when it is inside the map, not a road and at
    Manhattan distance >= ``min_spacing`` from every building already placed.
    Random placement samples at most ``max_attempts`` cells and otherwise
    gives up for this cycle.
    """

    def __init__(self,
                 model,
                 network: "RoadNetwork",
                 width: int | None = None,
                 height: int | None = None,
                 min_spacing: int = Defaults.MIN_BUILDING_SPACING,
                 max_attempts: int = Defaults.MAX_PLACEMENT_ATTEMPTS,
                 color_match_chance: float = Defaults.DESTINATION_COLOR_MATCH_CHANCE,
                 palette: Sequence[str] = tuple(Defaults.COLORS)):
        self.model = model
        self.network = network
        self.space = getattr(model, "grid", None)
        self.width = width if width is not None else getattr(self.space, "width", Defaults.WIDTH)
        self.height = height if height is not None else getattr(self.space, "height", Defaults.HEIGHT)
        self.min_spacing = min_spacing
        self.max_attempts = max_attempts
        self.color_match_chance = color_match_chance
        self.palette = list(palette)

        self.houses: list[House] = []
        self.destinations: list[Destination] = []

    # ------------------------------------------------------------
    #  Queries
    # ------------------------------------------------------------
    @property
    def buildings(self) -> list[Building]:
        return [*self.houses, *self.destinations]

    def matching_destinations(self, color: str) -> list[Destination]:
        return matching_destinations(self.destinations, color)

    def building_at(self, cell: Cell) -> Building | None:
        cell = tuple(cell)
        if self.space is not None and not self.space.out_of_bounds(cell):
            for agent in self.space.get_cell_list_contents([cell]):
                if isinstance(agent, Building):
                    return agent
            return None
        for building in self.buildings:
            if building.position == cell:
                return building
        return None

    def is_valid_spawn_position(self, cell: Cell) -> bool:
        x, y = cell
        if not (0 <= x < self.width and 0 <= y < self.height):
            return False
        if self.network.has(cell):
            return False
        for building in self.buildings:
            if manhattan(building.position, cell) < self.min_spacing:
                return False
        return True

    def find_valid_spawn_position(self, rng: random.Random | None = None) -> Cell | None:
        rng = rng or self._rng()
        for _ in range(self.max_attempts):
            cell = (rng.randrange(self.width), rng.randrange(self.height))
            if self.is_valid_spawn_position(cell):
                return cell
        return None

    # ------------------------------------------------------------
    #  Random placement
    # ------------------------------------------------------------
    def place_house(self, rng: random.Random | None = None) -> House | None:
        rng = rng or self._rng()
        position = self.find_valid_spawn_position(rng)
        if position is None:
            logger.debug("No valid cell for a house after %d attempts", self.max_attempts)
            return None
        return self._register(House(self.model, position, rng.choice(self.palette)))

    def place_destination(self, rng: random.Random | None = None,
                          houses: Sequence[House] | None = None) -> Destination | None:
        rng = rng or self._rng()
        houses = self.houses if houses is None else houses
        position = self.find_valid_spawn_position(rng)
        if position is None:
            logger.debug("No valid cell for a destination after %d attempts", self.max_attempts)
            return None

        color = rng.choice(self.palette)
        if houses and rng.random() < self.color_match_chance:
            color = rng.choice(list(houses)).color
        return self._register(Destination(self.model, position, color))

    # ------------------------------------------------------------
    #  Scripted placement
    # ------------------------------------------------------------
    def add_house(self, cell: Cell, color: str) -> House | None:
        if not self.is_valid_spawn_position(cell):
            return None
        return self._register(House(self.model, cell, color))

    def add_destination(self, cell: Cell, color: str) -> Destination | None:
        if not self.is_valid_spawn_position(cell):
            return None
        return self._register(Destination(self.model, cell, color))

    # ------------------------------------------------------------
    #  Internals
    # ------------------------------------------------------------
    def _rng(self) -> random.Random:
        return getattr(self.model, "random", None) or random.Random()

    def _register(self, building: Building):
        if isinstance(building, House):
            self.houses.append(building)
        else:
            self.destinations.append(building)
        if self.space is not None:
            self.space.place_agent(building, building.position)
        logger.info("Placed %r", building)
        return building


class BuildingSpawner:
    """
    Periodic building cadence with a linear difficulty ramp.

    The first building appears ``initial_delay`` after :meth:`start`; each
    later interval is the previous one minus ``interval_decrease``, floored at
    ``min_interval``. Houses and destinations alternate (a house whenever
    there are no more houses than destinations).
    """

    def __init__(self,
                 registry: BuildingRegistry,
                 initial_delay: float = Defaults.INITIAL_SPAWN_DELAY,
                 interval: float = Defaults.SPAWN_INTERVAL,
                 interval_decrease: float = Defaults.SPAWN_INTERVAL_DECREASE,
                 min_interval: float = Defaults.MIN_SPAWN_INTERVAL):
        self.registry = registry
        self.initial_delay = initial_delay
        self.current_interval = interval
        self.interval_decrease = interval_decrease
        self.min_interval = min_interval
        self.next_spawn_time: float | None = None

    @property
    def active(self) -> bool:
        return self.next_spawn_time is not None

    def start(self, now: float = 0.0) -> None:
        self.next_spawn_time = now + self.initial_delay

    def stop(self) -> None:
        self.next_spawn_time = None

    def tick(self, now: float) -> list[Building]:
        """Fire at most one spawn if due; returns the buildings created."""
        if self.next_spawn_time is None or now < self.next_spawn_time:
            return []

        spawned = []
        building = self.spawn_building()
        if building is not None:
            spawned.append(building)

        self.current_interval = max(self.min_interval,
                                    self.current_interval - self.interval_decrease)
        self.next_spawn_time = now + self.current_interval
        return spawned

    def spawn_building(self) -> Building | None:
        registry = self.registry
        if len(registry.houses) <= len(registry.destinations):
            return registry.place_house()
        return registry.place_destination()
