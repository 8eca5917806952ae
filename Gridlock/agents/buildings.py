from __future__ import annotations

import logging

from mesa import Agent

from Gridlock.utilities.general import color_name
from Gridlock.utilities.grid import Cell

logger = logging.getLogger(__name__)


class Building(Agent):
    """
    A coloured building pinned to one grid cell.

    The position is fixed at construction and never changes; buildings live
    for the whole run.
    """

    kind = "Building"

    def __init__(self, model, position: Cell, color: str):
        super().__init__(model)
        self._position: Cell = (int(position[0]), int(position[1]))
        self.color = color

    @property
    def position(self) -> Cell:
        return self._position

    @property
    def grid_x(self) -> int:
        return self._position[0]

    @property
    def grid_y(self) -> int:
        return self._position[1]

    def __repr__(self):
        return f"<{self.kind} {color_name(self.color)} @{self._position}>"


class House(Building):
    """Source building. Owns the time at which its next vehicle is due."""

    kind = "House"

    def __init__(self, model, position: Cell, color: str):
        super().__init__(model, position, color)
        self.next_spawn_time: float | None = None


class Destination(Building):
    """
    Sink building. Counts vehicles that are on their way here.

    ``waiting_count`` is only changed through :meth:`reserve` (a vehicle was
    assigned to this destination) and :meth:`release` (that vehicle arrived).
    """

    kind = "Destination"

    def __init__(self, model, position: Cell, color: str):
        super().__init__(model, position, color)
        self._waiting_count = 0

    @property
    def waiting_count(self) -> int:
        return self._waiting_count

    def reserve(self) -> int:
        self._waiting_count += 1
        return self._waiting_count

    def release(self) -> bool:
        """Drop one waiting vehicle; refuses (and logs) instead of going negative."""
        if self._waiting_count == 0:
            logger.error("release() on %r with no waiting vehicles", self)
            return False
        self._waiting_count -= 1
        return True
