"""Tests for score, phase transitions and the capacity rule."""

from Gridlock.run_state import RunState, GamePhase

from conftest import RED


class TestTransitions:
    """The phase only moves forward."""

    def test_initial_state(self):
        state = RunState()
        assert state.phase is GamePhase.NOT_STARTED
        assert state.score == 0
        assert state.elapsed(10.0) == 0.0

    def test_forward_only(self):
        state = RunState()
        assert state.end() is False
        assert state.start(1.0) is True
        assert state.start(2.0) is False
        assert state.end(5.0) is True
        assert state.phase is GamePhase.ENDED
        assert state.start(6.0) is False
        assert state.end() is False

    def test_elapsed_freezes_at_end(self):
        state = RunState()
        state.start(2.0)
        assert state.elapsed(4.5) == 2.5
        state.end(5.0)
        assert state.elapsed(100.0) == 3.0

    def test_callbacks(self):
        phases, scores = [], []
        state = RunState(on_state_change=phases.append, on_score_change=scores.append)
        state.start()
        state.add_deliveries(2)
        state.end()
        assert phases == [GamePhase.RUNNING, GamePhase.ENDED]
        assert scores == [0, 20]


class TestScoring:
    """Points per delivery, only while running."""

    def test_deliveries_award_fixed_points(self):
        state = RunState(points_per_delivery=10)
        state.start()
        assert state.add_deliveries(3) == 30
        assert state.score == 30
        assert state.deliveries == 3

    def test_no_score_outside_running(self):
        state = RunState()
        assert state.add_deliveries(1) == 0
        state.start()
        state.end()
        assert state.add_deliveries(5) == 0
        assert state.add_score(10) == 0
        assert state.score == 0

    def test_score_never_decreases(self):
        state = RunState()
        state.start()
        state.add_score(10)
        assert state.add_score(-5) == 0
        assert state.add_deliveries(0) == 0
        assert state.score == 10


class TestGameOver:
    """Any destination at or above the threshold ends the run."""

    def test_threshold(self, model):
        state = RunState(max_cars_per_destination=6)
        quiet = model.add_destination((0, 0), RED)
        busy = model.add_destination((10, 0), RED)
        quiet.reserve()
        for _ in range(5):
            busy.reserve()
        assert state.check_game_over([quiet, busy]) is False
        busy.reserve()
        assert state.check_game_over([quiet, busy]) is True
        busy.reserve()
        assert state.check_game_over([quiet, busy]) is True

    def test_no_destinations(self):
        assert RunState().check_game_over([]) is False
