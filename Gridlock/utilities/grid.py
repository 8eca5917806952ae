# grid.py
from __future__ import annotations

import math

from Gridlock.config import Defaults

Cell = tuple[int, int]


class Grid:
    """
    Pure coordinate transform between world space (pixels) and integer cells.

    Holds nothing but its fixed dimensions; every method is a query.
    """

    def __init__(self,
                 width: int = Defaults.WIDTH,
                 height: int = Defaults.HEIGHT,
                 cell_size: int = Defaults.GRID_SIZE):
        self.width = width
        self.height = height
        self.cell_size = cell_size

    @property
    def dimensions(self) -> tuple[int, int]:
        return self.width, self.height

    # ------------------------------------------------------------
    #  Transforms
    # ------------------------------------------------------------
    def world_to_grid(self, x: float, y: float) -> Cell:
        return math.floor(x / self.cell_size), math.floor(y / self.cell_size)

    def grid_to_world(self, cell: Cell) -> tuple[float, float]:
        """Centre of *cell* in world coordinates."""
        gx, gy = cell
        half = self.cell_size / 2
        return gx * self.cell_size + half, gy * self.cell_size + half

    def snap_to_grid(self, x: float, y: float) -> tuple[float, float]:
        return self.grid_to_world(self.world_to_grid(x, y))

    # ------------------------------------------------------------
    #  Queries
    # ------------------------------------------------------------
    def is_valid(self, cell: Cell) -> bool:
        x, y = cell
        return 0 <= x < self.width and 0 <= y < self.height

    def neighbors(self, cell: Cell) -> list[Cell]:
        """In-bounds 4-neighbours, in N, E, S, W order."""
        x, y = cell
        result = []
        for d in Defaults.AVAILABLE_DIRECTIONS:
            dx, dy = Defaults.DIRECTION_VECTORS[d]
            n = (x + dx, y + dy)
            if self.is_valid(n):
                result.append(n)
        return result

    @staticmethod
    def line_between(start: Cell, end: Cell) -> list[Cell]:
        """
        Cells on the Bresenham line from *start* to *end*, both included.

        Diagonal strokes produce diagonal steps; callers that need a
        4-connected road should feed consecutive pointer cells, which is what
        a drag gesture produces anyway.
        """
        x0, y0 = start
        x1, y1 = end
        dx, dy = abs(x1 - x0), abs(y1 - y0)
        sx = 1 if x0 < x1 else -1
        sy = 1 if y0 < y1 else -1
        err = dx - dy

        cells = []
        while True:
            cells.append((x0, y0))
            if x0 == x1 and y0 == y1:
                break
            e2 = 2 * err
            if e2 > -dy:
                err -= dy
                x0 += sx
            if e2 < dx:
                err += dx
                y0 += sy
        return cells
