"""
Integration Test: Simulation Stepper
====================================

Drives a complete vehicle (force model + control integrator + rigid-body
world) through the stepper and checks the paused/running behavior:
1. Paused ticks pre-stage controls but never move the vehicle
2. Running ticks step the engine once and emit time = k · dt telemetry
3. Straight-line runs stay straight and decelerate by drag
4. Telemetry angle is the unwrapped engine angle
"""

import copy
import pytest
import numpy as np
import sys
from pathlib import Path

# Add src to path
sys.path.append(str(Path(__file__).parent.parent.parent.parent / "src"))

from subsim.data_types.types import InputSample
from subsim.simulation.context import SimulationContext

DT = 0.01

BASE_CONFIG = {
    'environment': {'fluid_density': 1000.0},
    'vehicles': {
        'submarine': {
            'hull': {
                'width': 2.2, 'height': 0.6, 'mass': 140.0,
                'cross_sectional_area': 0.2827433, 'drag_coefficient': 0.04,
                'lift_coefficient_slope': 6.2831853, 'spinning_drag_coefficient': 0.5
            },
            'fins': {'cross_sectional_area': 0.05, 'lift_coefficient_slope': 6.2831853,
                     'drag_coefficient': 0.02},
            'control': {'max_thrust': 150.0, 'max_rudder_angle': 20.0},
            'initial': {'position': [0.0, 0.0], 'heading': 0.0, 'speed': 7.0}
        },
        'test_hull': {
            'hull': {
                'width': 2.2, 'height': 0.6, 'mass': 140.0,
                'cross_sectional_area': 0.2827433, 'drag_coefficient': 0.04,
                'lift_coefficient_slope': 6.2831853, 'spinning_drag_coefficient': 0.0
            },
            'control': {'max_thrust': 300.0, 'max_rudder_angle': 20.0},
            'initial': {'position': [0.0, 0.0], 'heading': 0.0, 'speed': 7.0}
        }
    },
    'control': {'input_mode': 'discrete', 'step_size': 1.0},
    'simulation': {'vehicle': 'submarine', 'fixed_timestep': DT,
                   'velocity_iterations': 6, 'position_iterations': 2}
}


class RecordingSink:
    """Telemetry sink that keeps records in memory."""

    def __init__(self):
        self.records = []

    def log(self, record):
        self.records.append(record)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def context(sink):
    return SimulationContext.from_config(copy.deepcopy(BASE_CONFIG), telemetry=sink)


def test_starts_paused(context):
    assert context.paused
    assert context.stepper.tick_count == 0


def test_paused_ticks_do_not_move_vehicle(context, sink):
    before = context.kinematic_state()

    for _ in range(10):
        record = context.tick(sample=InputSample(throttle_up=True))
        assert record is None

    after = context.kinematic_state()
    np.testing.assert_array_equal(after.position, before.position)
    np.testing.assert_array_equal(after.linear_velocity, before.linear_velocity)
    assert after.orientation == before.orientation

    assert sink.records == []
    assert context.stepper.tick_count == 0
    assert context.engine.step_count == 0

    # Controls were pre-staged and forces computed for display
    assert context.control_state.throttle == 10.0
    assert len(context.stepper.last_contributions) == 6


def test_running_ticks_emit_telemetry(context, sink):
    context.toggle_pause()

    for _ in range(5):
        context.tick(sample=InputSample())

    times = [record.time for record in sink.records]
    np.testing.assert_allclose(times, [0.0, 0.01, 0.02, 0.03, 0.04])
    assert context.stepper.tick_count == 5
    assert context.engine.step_count == 5
    assert context.engine.last_iterations == (6, 2)


def test_telemetry_reports_post_step_position(context, sink):
    context.toggle_pause()
    record = context.tick()

    position = context.kinematic_state().position
    assert record.x == pytest.approx(position[0])
    assert record.y == pytest.approx(position[1])
    assert record.x > 0.0


def test_explicit_running_flag_overrides_pause(context, sink):
    assert context.tick(running=True) is not None
    assert context.paused

    context.toggle_pause()
    assert context.tick(running=False) is None
    assert len(sink.records) == 1


def test_first_tick_drag(context):
    """Drag on the first running tick and the resulting deceleration."""
    context.toggle_pause()
    context.tick(sample=InputSample())

    hull_drag = context.stepper.last_contributions[1]
    expected_hull = 0.5 * 1000.0 * 0.2827433 * 0.04 * 49.0
    np.testing.assert_allclose(hull_drag.force, [-expected_hull, 0.0], atol=1e-9)

    total_drag = 0.5 * 1000.0 * 49.0 * (0.2827433 * 0.04 + 0.05 * 0.02)
    velocity = context.kinematic_state().linear_velocity
    np.testing.assert_allclose(velocity, [7.0 - total_drag / 140.0 * DT, 0.0], rtol=1e-9, atol=1e-12)


def test_straight_run_stays_straight(context, sink):
    context.toggle_pause()
    for _ in range(200):
        context.tick(sample=InputSample())

    state = context.kinematic_state()
    assert abs(state.position[1]) < 1e-9
    assert abs(state.orientation) < 1e-9
    assert 0.0 < state.speed < 7.0

    xs = [record.x for record in sink.records]
    assert all(b > a for a, b in zip(xs, xs[1:]))


def test_rudder_turns_vehicle(context):
    """Held rudder with thrust makes the hull yaw."""
    context.toggle_pause()
    for _ in range(300):
        context.tick(sample=InputSample(rudder_left=True, throttle_up=True))

    assert context.control_state.rudder_angle == 20.0
    assert context.control_state.throttle == 150.0
    assert abs(context.kinematic_state().angular_velocity) > 0.0
    assert abs(context.kinematic_state().position[1]) > 1e-3


def test_telemetry_angle_unwrapped(sink):
    config = copy.deepcopy(BASE_CONFIG)
    ctx = SimulationContext.from_config(config, vehicle_name='test_hull', telemetry=sink)
    ctx.engine.set_linear_velocity(ctx.body, [0.0, 0.0])
    ctx.engine.set_angular_velocity(ctx.body, 10.0)

    ctx.toggle_pause()
    for _ in range(100):
        ctx.tick()

    # No spinning drag and no velocity: free rotation at 10 rad/s
    assert sink.records[-1].angle == pytest.approx(np.degrees(10.0))
    assert sink.records[-1].angle > 180.0
    assert -np.pi < ctx.kinematic_state().orientation <= np.pi


def test_spinning_drag_slows_rotation(context):
    context.engine.set_linear_velocity(context.body, [0.0, 0.0])
    context.engine.set_angular_velocity(context.body, 2.0)

    context.toggle_pause()
    context.tick()

    spin = context.stepper.last_contributions[-1]
    assert spin.name == 'spinning_drag'
    assert spin.torque < 0.0
    assert 0.0 < context.kinematic_state().angular_velocity < 2.0


def test_state_summary(context):
    summary = context.stepper.get_state_summary()
    assert "Speed:  7.00m/s" in summary
    assert "Throttle:" in summary
