from __future__ import annotations

import heapq
import itertools
from collections import deque
from typing import TYPE_CHECKING

from Gridlock.config import Defaults
from Gridlock.utilities.general import manhattan

if TYPE_CHECKING:
    from Gridlock.road_network import RoadNetwork
    from Gridlock.utilities.grid import Cell


def _endpoints_usable(network: "RoadNetwork", start, goal) -> bool:
    return network.has(start) and network.has(goal)


def _reconstruct(came_from: dict, node) -> list:
    path = [node]
    while node in came_from:
        node = came_from[node]
        path.append(node)
    path.reverse()
    return path


def astar_python(network: "RoadNetwork", start: "Cell", goal: "Cell") -> list["Cell"]:
    """
    A* over the road graph, unit step cost, Manhattan heuristic.

    Returns the cell path *including* both endpoints, ``[start]`` when
    ``start == goal`` and ``[]`` when either endpoint is off-road or the two
    lie in different components. Frontier ties on ``f`` are broken by
    insertion order so a fixed network always yields the same path.
    """
    start, goal = tuple(start), tuple(goal)
    if not _endpoints_usable(network, start, goal):
        return []
    if start == goal:
        return [start]

    counter = itertools.count()

    # open_set entry: (f, seq, g, pos)
    open_set: list[tuple[int, int, int, tuple[int, int]]] = []
    heapq.heappush(open_set, (manhattan(start, goal), next(counter), 0, start))
    best_g: dict[tuple[int, int], int] = {start: 0}
    came_from: dict[tuple[int, int], tuple[int, int]] = {}
    closed: set[tuple[int, int]] = set()

    while open_set:
        f, _, g, pos = heapq.heappop(open_set)
        if pos in closed:
            continue
        if pos == goal:
            return _reconstruct(came_from, pos)
        closed.add(pos)

        for npos in sorted(network.neighbors_of(pos)):
            if npos in closed:
                continue
            ng = g + 1
            if npos not in best_g or ng < best_g[npos]:
                best_g[npos] = ng
                came_from[npos] = pos
                heapq.heappush(open_set, (ng + manhattan(npos, goal), next(counter), ng, npos))

    return []  # goal unreachable


def bfs_python(network: "RoadNetwork", start: "Cell", goal: "Cell") -> list["Cell"]:
    """Plain breadth-first search with the same contract as :func:`astar_python`."""
    start, goal = tuple(start), tuple(goal)
    if not _endpoints_usable(network, start, goal):
        return []
    if start == goal:
        return [start]

    came_from: dict[tuple[int, int], tuple[int, int]] = {}
    seen = {start}
    queue = deque([start])
    while queue:
        pos = queue.popleft()
        for npos in sorted(network.neighbors_of(pos)):
            if npos in seen:
                continue
            seen.add(npos)
            came_from[npos] = pos
            if npos == goal:
                return _reconstruct(came_from, npos)
            queue.append(npos)

    return []


def find_nearest_road(network: "RoadNetwork", cell: "Cell",
                      max_distance: int = Defaults.NEAREST_ROAD_RADIUS) -> "Cell | None":
    """
    Closest road cell to *cell* (Manhattan) within *max_distance*.

    Linear scan in segment insertion order; the first segment reaching the
    minimum wins ties.
    """
    nearest = None
    min_distance = None
    for segment in network.all_segments():
        distance = manhattan(segment.position, cell)
        if distance > max_distance:
            continue
        if min_distance is None or distance < min_distance:
            min_distance = distance
            nearest = segment.position
    return nearest
