"""Tests for vehicle spawning, movement and retirement."""

import pytest

from Gridlock.agents.traffic_scheduler import complete_route
from Gridlock.agents.vehicles.vehicle_base import VehicleAgent
from Gridlock.run_state import RunState

from conftest import RED, TEAL, run_ticks


def _scenario(model, dest_color=RED, length=5):
    model.build_road((0, 0), (length - 1, 0))
    house = model.add_house((0, 1), RED)
    dest = model.add_destination((length - 1, 1), dest_color)
    return house, dest


class TestScenarios:
    """End-to-end behaviour on hand-built maps."""

    def test_single_delivery(self, model):
        """A vehicle spawns, follows five waypoints, arrives and scores once."""
        house, dest = _scenario(model)
        traffic = model.traffic

        seen_path = None
        peak_waiting = 0
        while model.now < 7.0:
            model.step()
            peak_waiting = max(peak_waiting, dest.waiting_count)
            if seen_path is None and traffic.live_vehicles():
                seen_path = traffic.live_vehicles()[0].path

        assert seen_path == [(0, 0), (1, 0), (2, 0), (3, 0), (4, 0)]
        assert peak_waiting == 1
        assert traffic.spawned_total == 1
        assert traffic.delivered_total == 1
        assert traffic.live_vehicles() == []
        assert dest.waiting_count == 0
        assert model.score == 10

    def test_mismatched_colors_never_spawn(self, model):
        house, dest = _scenario(model, dest_color=TEAL)
        for _ in range(400):
            model.step()
        assert model.traffic.spawned_total == 0
        assert model.traffic.failed_attempts >= 4
        assert model.traffic.pending_timers == 1
        assert house.next_spawn_time > model.now - 4.0
        assert model.score == 0

    def test_capacity_reached_without_arrivals(self, model):
        """Vehicles pile up on a long road; the threshold trips exactly at max."""
        house, dest = _scenario(model, length=10)
        traffic = model.traffic
        run_state = RunState(max_cars_per_destination=6)

        for k in range(1, 9):
            # dt = 0: timers fire but nobody moves far enough to arrive
            assert traffic.tick(4.0 * k, 0.0) == 0
            assert dest.waiting_count == k
            assert run_state.check_game_over([dest]) is (k >= 6)


class TestSpawnRules:
    """Per-house timers and route planning."""

    def test_add_house_is_idempotent(self, model):
        house, _ = _scenario(model)
        assert model.traffic.add_house(house) is False
        assert model.traffic.pending_timers == 1

    def test_first_firing_after_spawn_delay(self, model):
        _scenario(model)
        assert model.traffic.tick(3.9, 0.05) == 0
        assert model.traffic.spawned_total == 0
        model.traffic.tick(4.0, 0.05)
        assert model.traffic.spawned_total == 1

    def test_spawning_is_perpetual(self, model):
        _scenario(model, length=10)
        for k in range(1, 4):
            model.traffic.tick(4.0 * k, 0.0)
        assert model.traffic.spawned_total == 3

    def test_unconnected_house_does_not_block_others(self, model):
        _scenario(model)
        lonely = model.add_house((15, 10), RED)
        traffic = model.traffic
        for k in range(1, 6):
            traffic.tick(4.0 * k, 0.0)
        assert traffic.spawned_total == 5
        assert traffic.failed_attempts == 5
        assert lonely.next_spawn_time == pytest.approx(24.0)

    def test_destination_out_of_reach_is_skipped(self, model):
        model.build_road((0, 0), (4, 0))
        model.build_road((10, 8), (14, 8))
        model.add_house((0, 1), RED)
        far = model.add_destination((12, 9), RED)        # separate component
        near = model.add_destination((4, 1), RED)
        plan = model.traffic.plan_spawn(model.registry.houses[0])
        assert plan.destination is near
        assert far.waiting_count == 0

    def test_new_destination_seen_by_running_timers(self, model):
        model.build_road((0, 0), (4, 0))
        model.add_house((0, 1), RED)
        model.traffic.tick(4.0, 0.0)
        assert model.traffic.spawned_total == 0
        model.add_destination((4, 1), RED)
        model.traffic.tick(8.0, 0.0)
        assert model.traffic.spawned_total == 1

    def test_spawned_vehicle_does_not_move_in_its_first_tick(self, model):
        _scenario(model)
        model.traffic.tick(4.0, 0.5)
        vehicle = model.traffic.live_vehicles()[0]
        assert vehicle.path_index == 0
        assert vehicle.world_position == model.layout.grid_to_world((0, 0))


class TestRetirement:
    """Arrival bookkeeping and teardown."""

    def test_retire_twice_releases_once(self, model):
        _, dest = _scenario(model)
        traffic = model.traffic
        traffic.tick(4.0, 0.0)
        vehicle = traffic.live_vehicles()[0]
        lookup = {dest.position: dest}
        assert traffic._retire(vehicle, lookup) is True
        assert traffic._retire(vehicle, lookup) is False
        assert dest.waiting_count == 0

    def test_destroy_cancels_everything(self, model):
        house, dest = _scenario(model, length=10)
        traffic = model.traffic
        traffic.tick(4.0, 0.0)
        traffic.tick(8.0, 0.0)
        vehicles = traffic.live_vehicles()
        assert len(vehicles) == 2

        traffic.destroy()
        assert traffic.live_vehicles() == []
        assert traffic.pending_timers == 0
        assert house.next_spawn_time is None
        assert traffic.tick(100.0, 1.0) == 0
        assert traffic.spawned_total == 2
        for vehicle in vehicles:
            assert vehicle not in model.agents

    def test_stop_makes_scheduler_inert(self, model):
        _scenario(model)
        model.traffic.stop()
        assert run_ticks(model.traffic, 0.0, 10.0) == 0
        assert model.traffic.spawned_total == 0
        late = model.add_house((10, 10), RED)
        assert model.traffic.add_house(late) is False
        assert model.traffic.pending_timers == 1


class TestVehicleMovement:
    """Waypoint following."""

    def test_speed_caps_displacement(self, model):
        vehicle = VehicleAgent(model, model.layout, (0, 0), RED, [(0, 0), (4, 0)], (4, 1),
                               speed=100.0)
        assert vehicle.advance(0.1) is False      # snaps off the start cell
        assert vehicle.path_index == 1
        x0, _ = vehicle.world_position
        vehicle.advance(0.1)
        x1, y1 = vehicle.world_position
        assert x1 - x0 == pytest.approx(10.0)
        assert y1 == pytest.approx(12.5)

    def test_does_not_overshoot_waypoint(self, model):
        vehicle = VehicleAgent(model, model.layout, (0, 0), RED, [(1, 0)], (1, 1),
                               speed=1000.0)
        vehicle.advance(1.0)
        assert vehicle.world_position == pytest.approx(model.layout.grid_to_world((1, 0)))
        assert vehicle.advance(1.0) is True
        assert vehicle.arrived

    def test_path_index_never_decreases(self, model):
        path = [(x, 0) for x in range(5)]
        vehicle = VehicleAgent(model, model.layout, (0, 0), RED, path, (4, 1))
        last = 0
        while not vehicle.advance(0.05):
            assert vehicle.path_index >= last
            last = vehicle.path_index
        assert vehicle.path_index == len(path)


class TestCompleteRoute:
    """Final hop onto the destination's road cell."""

    def test_already_ends_there(self):
        assert complete_route([(0, 0), (1, 0)], (1, 0)) == [(0, 0), (1, 0)]

    def test_adjacent_cell_is_appended(self):
        assert complete_route([(0, 0), (1, 0)], (2, 0)) == [(0, 0), (1, 0), (2, 0)]

    def test_non_adjacent_cell_rejects_route(self):
        assert complete_route([(0, 0), (1, 0)], (5, 5)) == []

    def test_empty_path(self):
        assert complete_route([], (0, 0)) == []
