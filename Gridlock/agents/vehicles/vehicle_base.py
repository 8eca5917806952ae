# vehicle_base.py – point agent following a waypoint list
from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

import numpy as np
from mesa import Agent

from Gridlock.config import Defaults
from Gridlock.utilities.general import color_name

if TYPE_CHECKING:
    from Gridlock.utilities.grid import Cell, Grid


class VehicleAgent(Agent):
    """
    A vehicle that drives from its spawn road cell to a destination's road
    cell along a precomputed list of cells.

    Movement is continuous in world space: each tick the vehicle heads for the
    centre of ``path[path_index]``. Once within the snap distance of that
    centre the index moves on instead of the vehicle. ``path_index`` never
    decreases; ``path_index == len(path)`` means arrived.
    """

    # ════════════════════════════════════════════════════════════
    #  INIT / HELPERS
    # ════════════════════════════════════════════════════════════
    def __init__(self,
                 model,
                 layout: "Grid",
                 start_cell: "Cell",
                 color: str,
                 path: Sequence["Cell"],
                 target_destination: "Cell",
                 speed: float = Defaults.CAR_SPEED,
                 snap_distance: float = Defaults.WAYPOINT_SNAP_DISTANCE):
        super().__init__(model)
        self.layout = layout
        self.start_cell = tuple(start_cell)
        self.color = color
        self.path: list["Cell"] = [tuple(c) for c in path]
        self.path_index = 0
        self.target_destination = tuple(target_destination)
        self.speed = speed
        self.snap_distance = snap_distance

        self.position = np.array(layout.grid_to_world(self.start_cell), dtype=float)
        self.distance_traveled = 0.0
        self.retired = False

    @property
    def arrived(self) -> bool:
        return self.path_index >= len(self.path)

    @property
    def current_waypoint(self) -> "Cell | None":
        if self.arrived:
            return None
        return self.path[self.path_index]

    @property
    def world_position(self) -> tuple[float, float]:
        return float(self.position[0]), float(self.position[1])

    # ════════════════════════════════════════════════════════════
    #  STEP
    # ════════════════════════════════════════════════════════════
    def advance(self, dt: float) -> bool:
        """
        Move for *dt* seconds. Returns *True* if the vehicle is arrived after
        this call (including one that was already at the end of its path).
        """
        if self.arrived:
            return True

        target = np.array(self.layout.grid_to_world(self.path[self.path_index]), dtype=float)
        delta = target - self.position
        distance = float(np.hypot(delta[0], delta[1]))

        if distance < self.snap_distance:
            # reached this waypoint, no movement this tick
            self.path_index += 1
            return self.arrived

        step = min(self.speed * dt, distance)
        if step > 0:
            self.position += delta / distance * step
            self.distance_traveled += step
        return False

    def __repr__(self):
        return (f"<Vehicle {color_name(self.color)} "
                f"{self.path_index}/{len(self.path)} -> {self.target_destination}>")
