import logging

from ...config import Defaults
from .astar_python import astar_python, bfs_python, find_nearest_road

logger = logging.getLogger(__name__)

if Defaults.PATHFINDING_METHOD == "BFS":
    find_path = bfs_python
    logger.debug("Requested BFS → Using breadth-first path search")
else:
    find_path = astar_python
    logger.debug("Requested ASTAR → Using A* path search")

__all__ = ["astar_python", "bfs_python", "find_path", "find_nearest_road"]
