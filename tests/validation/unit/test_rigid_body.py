"""
Unit Test: Rigid-Body World
===========================

Validates mass properties, semi-implicit Euler integration and the
force/torque accumulators of the planar world.
"""

import pytest
import numpy as np
import sys
from pathlib import Path

# Add src to path
sys.path.append(str(Path(__file__).parent.parent.parent.parent / "src"))

from subsim.exceptions import ConfigurationError
from subsim.physics.rigid_body import RigidBodyWorld, RigidBodyEngine

DT = 0.01


@pytest.fixture
def world():
    return RigidBodyWorld()


@pytest.fixture
def body(world):
    return world.create_body((0.0, 0.0), 0.0, (2.2, 0.6), density=140.0 / (2.2 * 0.6))


def test_world_satisfies_engine_protocol(world):
    assert isinstance(world, RigidBodyEngine)


def test_box_mass_properties(body):
    assert body.mass == pytest.approx(140.0)
    assert body.inertia == pytest.approx(140.0 * (2.2**2 + 0.6**2) / 12.0)


def test_create_body_rejects_bad_shape(world):
    with pytest.raises(ConfigurationError):
        world.create_body((0, 0), 0.0, (0.0, 1.0), density=1.0)
    with pytest.raises(ConfigurationError):
        world.create_body((0, 0), 0.0, (1.0, 1.0), density=-1.0)


def test_coasting_without_forces(world, body):
    world.set_linear_velocity(body, [7.0, 0.0])
    for _ in range(10):
        world.step(DT, 6, 2)

    np.testing.assert_allclose(world.get_world_center(body), [0.7, 0.0], atol=1e-12)
    np.testing.assert_allclose(world.get_linear_velocity(body), [7.0, 0.0])


def test_semi_implicit_euler_order(world, body):
    """Velocity is updated first, then used for the position update."""
    world.apply_force_to_center(body, [140.0, 0.0], True)
    world.step(DT, 6, 2)

    np.testing.assert_allclose(world.get_linear_velocity(body), [0.01, 0.0])
    np.testing.assert_allclose(world.get_world_center(body), [1e-4, 0.0])


def test_off_center_force_adds_torque(world, body):
    world.apply_force(body, [0.0, 10.0], [1.0, 0.0], True)
    assert body.torque == pytest.approx(10.0)

    world.step(DT)
    assert world.get_angular_velocity(body) == pytest.approx(10.0 / body.inertia * DT)
    # Accumulators cleared after the step
    assert body.torque == 0.0
    np.testing.assert_array_equal(body.force, np.zeros(2))


def test_apply_torque_and_angle(world, body):
    world.set_angular_velocity(body, 1.0)
    world.apply_torque(body, body.inertia, True)
    world.step(DT)

    assert world.get_angular_velocity(body) == pytest.approx(1.0 + DT)
    assert world.get_angle(body) == pytest.approx((1.0 + DT) * DT)


def test_world_point_follows_rotation(world):
    rotated = world.create_body((1.0, 2.0), np.pi / 2, (2.0, 1.0), density=1.0)
    np.testing.assert_allclose(world.get_world_point(rotated, [1.0, 0.0]), [1.0, 3.0], atol=1e-12)


def test_getters_return_copies(world, body):
    world.set_linear_velocity(body, [1.0, 0.0])
    velocity = world.get_linear_velocity(body)
    velocity[0] = 99.0
    center = world.get_world_center(body)
    center[1] = 99.0

    np.testing.assert_allclose(world.get_linear_velocity(body), [1.0, 0.0])
    np.testing.assert_allclose(world.get_world_center(body), [0.0, 0.0])


def test_step_records_iterations(world, body):
    world.step(DT, 8, 3)
    assert world.last_iterations == (8, 3)
    assert world.step_count == 1


def test_step_rejects_non_positive_dt(world):
    with pytest.raises(ValueError):
        world.step(0.0)


def test_kinetic_energy(world, body):
    world.set_linear_velocity(body, [2.0, 0.0])
    world.set_angular_velocity(body, 1.0)
    expected = 0.5 * 140.0 * 4.0 + 0.5 * body.inertia
    assert world.compute_kinetic_energy(body) == pytest.approx(expected)
