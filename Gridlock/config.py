# config.py
from dataclasses import dataclass

@dataclass(frozen=True)
class Defaults:
    # grid
    GRID_SIZE: int = 25       # pixels per cell
    WIDTH:     int = 48
    HEIGHT:    int = 32

    AVAILABLE_DIRECTIONS = ["N", "E", "S", "W"]

    # screen-space directions, y grows downwards
    DIRECTION_VECTORS = {"N": (0, -1), "E": (1, 0), "S": (0, 1), "W": (-1, 0)}
    DIRECTION_OPPOSITES = {"N": "S", "S": "N", "E": "W", "W": "E"}

    # colours shared by houses and destinations
    COLORS = [
        "#ff6b6b",
        "#4ecdc4",
        "#ffe66d",
        "#95e1d3",
    ]

    COLOR_NAMES = {
        "#ff6b6b": "Red",
        "#4ecdc4": "Teal",
        "#ffe66d": "Yellow",
        "#95e1d3": "Mint",
    }

    # BUILDING SPAWNING (seconds)

    INITIAL_SPAWN_DELAY: float = 6.0
    SPAWN_INTERVAL: float = 8.0
    SPAWN_INTERVAL_DECREASE: float = 0.05
    MIN_SPAWN_INTERVAL: float = 4.0

    MIN_BUILDING_SPACING: int = 3
    MAX_PLACEMENT_ATTEMPTS: int = 50
    DESTINATION_COLOR_MATCH_CHANCE: float = 0.7

    # TRAFFIC

    CAR_SPEED: float = 150.0            # pixels per second
    CAR_SPAWN_DELAY: float = 4.0        # seconds between spawns from one house
    WAYPOINT_SNAP_DISTANCE: float = 3.0  # pixels
    NEAREST_ROAD_RADIUS: int = 3

    # RUN

    MAX_CARS_PER_DESTINATION: int = 8
    POINTS_PER_DELIVERY: int = 10
    TIME_PER_STEP_IN_SECONDS: float = 0.05

    # PATHFINDING

    PATHFINDING_METHOD = "ASTAR"
    # "ASTAR" "BFS"
