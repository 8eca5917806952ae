# run_state.py
from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Callable, Iterable

from Gridlock.config import Defaults

if TYPE_CHECKING:
    from Gridlock.agents.buildings import Destination

logger = logging.getLogger(__name__)


class GamePhase(Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    ENDED = "ended"


class RunState:
    """
    Score, clock and phase of one run.

    The phase only moves forward (NOT_STARTED → RUNNING → ENDED) and the score
    only grows; both transitions and scoring outside RUNNING are refused.
    """

    def __init__(self,
                 max_cars_per_destination: int = Defaults.MAX_CARS_PER_DESTINATION,
                 points_per_delivery: int = Defaults.POINTS_PER_DELIVERY,
                 on_state_change: Callable[[GamePhase], None] | None = None,
                 on_score_change: Callable[[int], None] | None = None):
        self.max_cars_per_destination = max_cars_per_destination
        self.points_per_delivery = points_per_delivery
        self.on_state_change = on_state_change
        self.on_score_change = on_score_change

        self.phase = GamePhase.NOT_STARTED
        self.score = 0
        self.deliveries = 0
        self.start_time: float | None = None
        self.end_time: float | None = None

    @property
    def running(self) -> bool:
        return self.phase is GamePhase.RUNNING

    # ------------------------------------------------------------
    #  Transitions
    # ------------------------------------------------------------
    def start(self, now: float = 0.0) -> bool:
        if self.phase is not GamePhase.NOT_STARTED:
            return False
        self.phase = GamePhase.RUNNING
        self.start_time = now
        logger.info("Run started at %.2f", now)
        self._notify_state()
        self._notify_score()
        return True

    def end(self, now: float | None = None) -> bool:
        if self.phase is not GamePhase.RUNNING:
            return False
        self.phase = GamePhase.ENDED
        self.end_time = now
        logger.info("Run ended with score %d after %d deliveries", self.score, self.deliveries)
        self._notify_state()
        return True

    # ------------------------------------------------------------
    #  Scoring
    # ------------------------------------------------------------
    def add_score(self, points: int) -> int:
        if not self.running or points <= 0:
            return 0
        self.score += points
        self._notify_score()
        return points

    def add_deliveries(self, count: int) -> int:
        """Award points for *count* delivered vehicles; returns the points added."""
        if not self.running or count <= 0:
            return 0
        self.deliveries += count
        return self.add_score(count * self.points_per_delivery)

    def elapsed(self, now: float) -> float:
        if self.start_time is None:
            return 0.0
        until = self.end_time if self.end_time is not None else now
        return max(0.0, until - self.start_time)

    # ------------------------------------------------------------
    #  Failure condition
    # ------------------------------------------------------------
    def check_game_over(self, destinations: Iterable["Destination"]) -> bool:
        return any(d.waiting_count >= self.max_cars_per_destination for d in destinations)

    def _notify_state(self):
        if self.on_state_change:
            self.on_state_change(self.phase)

    def _notify_score(self):
        if self.on_score_change:
            self.on_score_change(self.score)
