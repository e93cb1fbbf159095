"""
Submarine Hydrodynamics - 2D Force Model
========================================

This module implements the hydrodynamic force model for a rudder-and-throttle
controlled submarine moving in a horizontal plane. Given the kinematic state
read from the rigid-body engine and the pilot's control state, it produces
the individual forces and the rotational drag torque acting on the hull.
Applying them and integrating motion is left to the rigid-body engine.

Force Contributions (in order):
1. Thrust        - vectored by the rudder, applied at the stern
2. Hull drag     - quadratic, opposite the velocity, at the center of mass
3. Hull lift     - linear in angle of attack, forward of center, stall-gated
4. Fin lift      - as hull lift with fin coefficients, at the stern
5. Fin drag      - as hull drag with fin coefficients, at the center of mass
6. Spinning drag - quadratic torque opposing the yaw rate

Symbols and Notation:
- ρ: Fluid density [kg/m³]
- A: Cross-sectional area [m²]
- Cd, CL: Drag and lift coefficients [-]
- α: Angle of attack [rad] = wrap(heading - velocity direction)
- V: Speed [m/s]
- ω: Yaw rate [rad/s]
- w: Hull width (length along body x) [m]

Lift is only generated while |α| < 15°. Beyond that the contribution is
exactly zero; the cutoff is a hard step, not a smooth stall curve.
"""

import numpy as np
from typing import List

from subsim.data_types.types import (
    KinematicState, ControlState, HullParameters, FinParameters, FluidProperties,
    ForceContribution, degrees_to_radians, rotate_vector, rotate_90
)
from subsim.exceptions import DegenerateVelocity
from subsim.utils.logging_config import get_logger

logger = get_logger()

STALL_ANGLE = np.pi / 12.0     # [rad] 15°, lift cutoff
MIN_SPEED = 1e-9               # [m/s] below this the velocity has no direction

# Contribution names, in the order compute_forces returns them
FORCE_NAMES = ('thrust', 'hull_drag', 'hull_lift', 'fin_lift', 'fin_drag', 'spinning_drag')


def wrap_angle(angle: float) -> float:
    """
    Wrap an angle into (-π, π].

    Values already inside the interval are returned unchanged, so the
    function is idempotent.
    """
    two_pi = 2.0 * np.pi
    wrapped = angle - two_pi * np.ceil((angle - np.pi) / two_pi)
    # Rounding can land one ulp outside the interval
    if wrapped <= -np.pi:
        wrapped += two_pi
    elif wrapped > np.pi:
        wrapped -= two_pi
    return float(wrapped)


def unit_vector(vector: np.ndarray) -> np.ndarray:
    """
    Normalize a 2D vector.

    Raises:
        DegenerateVelocity: If the vector is (numerically) zero length
    """
    length = np.linalg.norm(vector)
    if not np.isfinite(length) or length < MIN_SPEED:
        raise DegenerateVelocity(f"Cannot normalize vector {vector}")
    return np.asarray(vector, dtype=float) / length


def angle_of_attack(orientation: float, velocity: np.ndarray) -> float:
    """
    Angle between the hull heading and the velocity direction.

    Both angles are wrapped before differencing so headings either side of
    ±π do not produce a spurious ~2π angle of attack.

    Args:
        orientation: Hull heading [rad]
        velocity: World-frame velocity [m/s]

    Returns:
        α [rad] in (-π, π]
    """
    heading = wrap_angle(orientation)
    velocity_angle = wrap_angle(np.arctan2(velocity[1], velocity[0]))
    return wrap_angle(heading - velocity_angle)


def thrust_force(throttle: float, rudder_angle_deg: float, orientation: float) -> np.ndarray:
    """
    Thrust vector in the world frame.

    The thrust of magnitude ``throttle`` is deflected by the rudder angle
    relative to the hull's nose, then rotated into the world by the heading.
    """
    thrust_body = np.array([throttle, 0.0])
    return rotate_vector(thrust_body, degrees_to_radians(rudder_angle_deg) + orientation)


def dynamic_pressure(velocity: np.ndarray, fluid_density: float) -> float:
    """Dynamic pressure q = 0.5·ρ·V² [Pa]."""
    return 0.5 * fluid_density * float(np.dot(velocity, velocity))


def quadratic_drag(velocity: np.ndarray, fluid_density: float,
                   area: float, drag_coefficient: float) -> np.ndarray:
    """
    Quadratic drag: F = -0.5·ρ·A·Cd·V²·v̂

    Returns the zero vector when the velocity is zero.
    """
    try:
        direction = unit_vector(velocity)
    except DegenerateVelocity:
        return np.zeros(2)

    value = dynamic_pressure(velocity, fluid_density) * area * drag_coefficient
    return -value * direction


def lift_force(velocity: np.ndarray, alpha: float, fluid_density: float,
               area: float, lift_coefficient_slope: float) -> np.ndarray:
    """
    Linear lift: L = 0.5·ρ·A·(CLα·α)·V², perpendicular to the velocity.

    The magnitude is signed, so scaling the +90° rotated unit velocity by it
    puts the lift on the correct side. Zero outside the stall envelope and at
    zero velocity.
    """
    if abs(alpha) >= STALL_ANGLE:
        return np.zeros(2)

    try:
        direction = unit_vector(velocity)
    except DegenerateVelocity:
        return np.zeros(2)

    lift_coefficient = alpha * lift_coefficient_slope
    value = dynamic_pressure(velocity, fluid_density) * area * lift_coefficient
    return rotate_90(direction) * value


def spinning_drag_torque(angular_velocity: float, fluid_density: float, area: float,
                         spinning_drag_coefficient: float, width: float) -> float:
    """
    Rotational drag torque: τ = -sign(ω)·0.5·ρ·A·Cs·ω² / w
    """
    value = (0.5 * fluid_density * area * spinning_drag_coefficient
             * angular_velocity * angular_velocity) / width
    return float(-np.sign(angular_velocity) * value)


class HydrodynamicForceModel:
    """
    Hydrodynamic forces on a 2D submarine hull.

    The model holds only immutable parameters; ``compute_forces`` is a pure
    function of the kinematic and control state. The result is used both for
    applying loads to the rigid-body engine and for diagnostics.

    Application points (body frame):
    - Stern:  (-w/2, 0) for thrust and fin lift
    - Bow:    (w/4, 0) for hull lift
    - Center of mass for both drag terms
    """

    def __init__(self, hull: HullParameters, fins: FinParameters = None,
                 fluid: FluidProperties = None):
        """
        Initialize force model.

        Args:
            hull: Hull geometry and coefficients
            fins: Fin coefficients (None for a vehicle without fins)
            fluid: Fluid properties (fresh water if None)
        """
        self.hull = hull
        self.fins = fins if fins is not None else FinParameters()
        self.fluid = fluid if fluid is not None else FluidProperties()

        self.stern_point = np.array([-hull.width / 2.0, 0.0])   # [m] body frame
        self.lift_point = np.array([hull.width / 4.0, 0.0])     # [m] body frame
        self.center_point = np.zeros(2)

        logger.debug(f"Force model: width={hull.width}m, A={hull.cross_sectional_area:.4f}m², "
                     f"Cd={hull.drag_coefficient}, CLα={hull.lift_coefficient_slope:.3f}/rad, "
                     f"fin A={self.fins.cross_sectional_area}m², rho={self.fluid.density}kg/m³")

    def compute_forces(self, state: KinematicState, controls: ControlState) -> List[ForceContribution]:
        """
        Compute every force contribution acting on the hull for one tick.

        Args:
            state: Kinematic snapshot for this tick
            controls: Current (already clamped) control state

        Returns:
            Ordered list: thrust, hull_drag, hull_lift, fin_lift, fin_drag, spinning_drag
        """
        rho = self.fluid.density
        velocity = np.asarray(state.linear_velocity, dtype=float)
        alpha = angle_of_attack(state.orientation, velocity)

        thrust = thrust_force(controls.throttle, controls.rudder_angle, state.orientation)

        hull_drag = quadratic_drag(velocity, rho, self.hull.cross_sectional_area,
                                   self.hull.drag_coefficient)
        hull_lift = lift_force(velocity, alpha, rho, self.hull.cross_sectional_area,
                               self.hull.lift_coefficient_slope)

        fin_lift = lift_force(velocity, alpha, rho, self.fins.cross_sectional_area,
                              self.fins.lift_coefficient_slope)
        fin_drag = quadratic_drag(velocity, rho, self.fins.cross_sectional_area,
                                  self.fins.drag_coefficient)

        spin_drag = spinning_drag_torque(state.angular_velocity, rho,
                                         self.hull.cross_sectional_area,
                                         self.hull.spinning_drag_coefficient,
                                         self.hull.width)

        logger.debug(f"Thrust = {thrust}, Rudder = {controls.rudder_angle:.1f}°")
        logger.debug(f"Velocity = {velocity}, Drag = {hull_drag}, Fin drag = {fin_drag}")
        logger.debug(f"Alpha = {np.degrees(alpha):.2f}°, Lift = {hull_lift}, Fin lift = {fin_lift}")
        logger.debug(f"Angular Velocity = {state.angular_velocity:.4f}, Spinning Drag = {spin_drag:.4f}")

        return [
            ForceContribution('thrust', self.stern_point.copy(), thrust),
            ForceContribution('hull_drag', self.center_point.copy(), hull_drag,
                              at_center_of_mass=True),
            ForceContribution('hull_lift', self.lift_point.copy(), hull_lift),
            ForceContribution('fin_lift', self.stern_point.copy(), fin_lift),
            ForceContribution('fin_drag', self.center_point.copy(), fin_drag,
                              at_center_of_mass=True),
            ForceContribution('spinning_drag', self.center_point.copy(), np.zeros(2),
                              torque=spin_drag, at_center_of_mass=True),
        ]

    def total_force(self, contributions: List[ForceContribution]) -> np.ndarray:
        """Sum of all force vectors [N] (world frame)."""
        total = np.zeros(2)
        for contribution in contributions:
            total += contribution.force
        return total

    def total_torque(self, contributions: List[ForceContribution], orientation: float) -> float:
        """
        Net yaw moment about the center of mass [N*m].

        Point forces contribute r × F, with r the application point rotated
        into the world frame.
        """
        torque = 0.0
        for contribution in contributions:
            torque += contribution.torque
            if contribution.at_center_of_mass:
                continue
            r = rotate_vector(contribution.application_point, orientation)
            torque += r[0] * contribution.force[1] - r[1] * contribution.force[0]
        return float(torque)
