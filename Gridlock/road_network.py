# road_network.py
from __future__ import annotations

from typing import Iterable, Iterator

from Gridlock.config import Defaults
from Gridlock.utilities.grid import Cell


class RoadSegment:
    """One occupied cell and the occupied cells 4-adjacent to it."""
    __slots__ = ("position", "neighbors")

    def __init__(self, position: Cell) -> None:
        self.position = position
        self.neighbors: set[Cell] = set()

    @property
    def x(self) -> int:
        return self.position[0]

    @property
    def y(self) -> int:
        return self.position[1]

    def __repr__(self):
        return f"<RoadSegment {self.position} n={len(self.neighbors)}>"


class RoadNetwork:
    """
    Mutable road graph keyed by cell.

    Every occupied cell is a node; an edge exists exactly between two occupied
    cells that are 4-adjacent. Links are kept symmetric on both insert and
    remove, so ``neighbors_of`` never needs to look at the geometry again.

    Segments are stored in insertion order, which fixes the scan order used by
    the nearest-road search.
    """

    def __init__(self, cells: Iterable[Cell] = ()):
        self._segments: dict[Cell, RoadSegment] = {}
        for cell in cells:
            self.add(cell)

    # ════════════════════════════════════════════════════════════
    #  Mutation
    # ════════════════════════════════════════════════════════════
    def add(self, cell: Cell) -> bool:
        cell = (int(cell[0]), int(cell[1]))
        if cell in self._segments:
            return False

        segment = RoadSegment(cell)
        x, y = cell
        for d in Defaults.AVAILABLE_DIRECTIONS:
            dx, dy = Defaults.DIRECTION_VECTORS[d]
            neighbor = self._segments.get((x + dx, y + dy))
            if neighbor is not None:
                segment.neighbors.add(neighbor.position)
                neighbor.neighbors.add(cell)

        self._segments[cell] = segment
        return True

    def remove(self, cell: Cell) -> bool:
        segment = self._segments.pop(tuple(cell), None)
        if segment is None:
            return False

        for pos in segment.neighbors:
            neighbor = self._segments.get(pos)
            if neighbor is not None:
                neighbor.neighbors.discard(segment.position)
        return True

    def add_line(self, cells: Iterable[Cell]) -> int:
        """Add every cell of *cells*; returns how many were new."""
        return sum(1 for cell in cells if self.add(cell))

    def clear(self) -> None:
        self._segments.clear()

    # ════════════════════════════════════════════════════════════
    #  Queries
    # ════════════════════════════════════════════════════════════
    def has(self, cell: Cell) -> bool:
        return tuple(cell) in self._segments

    def neighbors_of(self, cell: Cell) -> set[Cell]:
        segment = self._segments.get(tuple(cell))
        if segment is None:
            return set()
        return set(segment.neighbors)

    def all_segments(self) -> list[RoadSegment]:
        return list(self._segments.values())

    def adjacency(self) -> dict[Cell, list[Cell]]:
        """Snapshot of the graph as an adjacency list."""
        return {pos: sorted(seg.neighbors) for pos, seg in self._segments.items()}

    def __contains__(self, cell) -> bool:
        return self.has(cell)

    def __len__(self) -> int:
        return len(self._segments)

    def __iter__(self) -> Iterator[Cell]:
        return iter(list(self._segments))
