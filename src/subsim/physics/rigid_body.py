"""
2D Rigid-Body World
===================

This module defines the contract the simulation core needs from a rigid-body
physics engine, and a small planar implementation of it.

The world integrates dynamic box-shaped bodies with semi-implicit Euler:
accumulated forces and torques update the velocities first, the new
velocities then update position and angle. There is no gravity by default,
no collision detection and no constraint solving, so the velocity/position
iteration counts passed to ``step`` are accepted and recorded but have
nothing to iterate over.

Notation:
- m: body mass [kg] = density · w · h
- I: rotational inertia about the center [kg·m²] = m (w² + h²) / 12
- F, τ: accumulated force [N] and torque [N·m] for the current step
"""

import numpy as np
from dataclasses import dataclass, field
from typing import List, Protocol, Tuple, runtime_checkable

from subsim.data_types.types import rotate_vector
from subsim.exceptions import ConfigurationError
from subsim.utils.logging_config import get_logger

logger = get_logger()


@runtime_checkable
class RigidBodyEngine(Protocol):
    """Operations the simulation core calls on a rigid-body engine."""

    def create_body(self, position, orientation: float, shape_dimensions,
                    density: float, friction: float, restitution: float): ...

    def get_linear_velocity(self, body) -> np.ndarray: ...

    def get_angular_velocity(self, body) -> float: ...

    def get_angle(self, body) -> float: ...

    def get_world_center(self, body) -> np.ndarray: ...

    def get_world_point(self, body, local_point) -> np.ndarray: ...

    def apply_force(self, body, force, world_point, wake: bool) -> None: ...

    def apply_force_to_center(self, body, force, wake: bool) -> None: ...

    def apply_torque(self, body, torque: float, wake: bool) -> None: ...

    def step(self, time_step: float, velocity_iterations: int, position_iterations: int) -> None: ...


@dataclass
class BodyHandle:
    """
    Dynamic box body owned by a RigidBodyWorld.

    Attributes:
        body_id: Index of the body in its world
        width, height: Box dimensions [m]
        mass: Body mass [kg]
        inertia: Rotational inertia about the center [kg·m²]
        friction, restitution: Surface properties (kept for contact-capable engines)
    """
    body_id: int
    width: float
    height: float
    mass: float
    inertia: float
    friction: float = 0.0
    restitution: float = 0.0
    position: np.ndarray = field(default_factory=lambda: np.zeros(2))          # [m]
    angle: float = 0.0                                                         # [rad]
    linear_velocity: np.ndarray = field(default_factory=lambda: np.zeros(2))   # [m/s]
    angular_velocity: float = 0.0                                              # [rad/s]
    force: np.ndarray = field(default_factory=lambda: np.zeros(2))             # [N] accumulator
    torque: float = 0.0                                                        # [N*m] accumulator
    awake: bool = True


class RigidBodyWorld:
    """
    Minimal planar rigid-body world implementing RigidBodyEngine.

    Getters return copies so callers can never modify body state except
    through the force/torque interface.
    """

    def __init__(self, gravity: Tuple[float, float] = (0.0, 0.0)):
        """
        Initialize world.

        Args:
            gravity: Gravity vector [m/s²]
        """
        self.gravity = np.array(gravity, dtype=float)
        self.bodies: List[BodyHandle] = []
        self.step_count = 0
        self.last_iterations = (0, 0)

        logger.debug(f"Rigid-body world created: gravity={self.gravity}")

    def create_body(self, position, orientation: float, shape_dimensions,
                    density: float, friction: float = 0.0, restitution: float = 0.0) -> BodyHandle:
        """
        Create a dynamic box body.

        Args:
            position: Initial center position [m]
            orientation: Initial angle [rad]
            shape_dimensions: (width, height) of the box [m]
            density: Planar density [kg/m²]
            friction: Friction coefficient [-]
            restitution: Restitution coefficient [-]

        Returns:
            Handle to the new body
        """
        width, height = (float(d) for d in shape_dimensions)
        if width <= 0 or height <= 0:
            raise ConfigurationError(f"Body dimensions must be positive, got {shape_dimensions}")
        if not np.isfinite(density) or density <= 0:
            raise ConfigurationError(f"Body density must be positive, got {density}")

        mass = density * width * height
        inertia = mass * (width ** 2 + height ** 2) / 12.0

        body = BodyHandle(
            body_id=len(self.bodies),
            width=width,
            height=height,
            mass=mass,
            inertia=inertia,
            friction=friction,
            restitution=restitution,
            position=np.array(position, dtype=float),
            angle=float(orientation)
        )
        self.bodies.append(body)

        logger.info(f"Body {body.body_id} created: {width}x{height}m, mass={mass:.1f}kg, "
                    f"inertia={inertia:.2f}kg·m²")
        return body

    # === STATE ACCESS ===

    def get_linear_velocity(self, body: BodyHandle) -> np.ndarray:
        return body.linear_velocity.copy()

    def get_angular_velocity(self, body: BodyHandle) -> float:
        return body.angular_velocity

    def get_angle(self, body: BodyHandle) -> float:
        return body.angle

    def get_world_center(self, body: BodyHandle) -> np.ndarray:
        return body.position.copy()

    def get_world_point(self, body: BodyHandle, local_point) -> np.ndarray:
        """Transform a body-frame point into the world frame."""
        return body.position + rotate_vector(local_point, body.angle)

    def set_linear_velocity(self, body: BodyHandle, velocity) -> None:
        body.linear_velocity = np.array(velocity, dtype=float)

    def set_angular_velocity(self, body: BodyHandle, angular_velocity: float) -> None:
        body.angular_velocity = float(angular_velocity)

    # === LOADS ===

    def apply_force(self, body: BodyHandle, force, world_point, wake: bool = True) -> None:
        """
        Apply a force at a world point; adds torque r × F about the center.
        """
        if not body.awake and not wake:
            return
        force = np.asarray(force, dtype=float)
        r = np.asarray(world_point, dtype=float) - body.position
        body.force = body.force + force
        body.torque += r[0] * force[1] - r[1] * force[0]
        body.awake = body.awake or wake

    def apply_force_to_center(self, body: BodyHandle, force, wake: bool = True) -> None:
        if not body.awake and not wake:
            return
        body.force = body.force + np.asarray(force, dtype=float)
        body.awake = body.awake or wake

    def apply_torque(self, body: BodyHandle, torque: float, wake: bool = True) -> None:
        if not body.awake and not wake:
            return
        body.torque += float(torque)
        body.awake = body.awake or wake

    # === INTEGRATION ===

    def step(self, time_step: float, velocity_iterations: int = 6, position_iterations: int = 2) -> None:
        """
        Advance every awake body by one fixed timestep.

        Args:
            time_step: Timestep [s]
            velocity_iterations: Velocity solver iterations (passed through)
            position_iterations: Position solver iterations (passed through)
        """
        if time_step <= 0:
            raise ValueError(f"Time step must be positive, got {time_step}")

        self.last_iterations = (velocity_iterations, position_iterations)

        for body in self.bodies:
            if body.awake:
                # Velocities first, then positions from the updated velocities
                acceleration = body.force / body.mass + self.gravity
                angular_acceleration = body.torque / body.inertia

                body.linear_velocity = body.linear_velocity + acceleration * time_step
                body.angular_velocity += angular_acceleration * time_step

                body.position = body.position + body.linear_velocity * time_step
                body.angle += body.angular_velocity * time_step

            body.force = np.zeros(2)
            body.torque = 0.0

        self.step_count += 1

    def compute_kinetic_energy(self, body: BodyHandle) -> float:
        """Translational + rotational kinetic energy [J]."""
        v2 = float(np.dot(body.linear_velocity, body.linear_velocity))
        return 0.5 * body.mass * v2 + 0.5 * body.inertia * body.angular_velocity ** 2
