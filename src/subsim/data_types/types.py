"""
Submarine Simulation Data Types
===============================

This module defines the data structures passed between the components of the
2D submarine simulation: the kinematic snapshot read from the rigid-body
engine, the pilot's control state, the fixed hull/fin/fluid parameters and
the transient force contributions produced by the hydrodynamic model.

Key Design Principles:
- Pilot-facing angles (rudder, telemetry) use degrees, internal math uses radians
- All physical units in SI (meters, kg, seconds, newtons)
- Parameter objects are frozen and validated on construction
- World frame: x right, y up, angles counter-clockwise positive
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple
import numpy as np

from subsim.exceptions import ConfigurationError


@dataclass(frozen=True)
class KinematicState:
    """
    Snapshot of the vehicle's motion read from the rigid-body engine.

    The snapshot is only valid for the tick in which it was read; the engine
    changes the body as soon as forces are applied and the world is stepped.

    Attributes:
        position: Body world center [m] (x, y)
        linear_velocity: Velocity of the center of mass [m/s] (world frame)
        angular_velocity: Yaw rate [rad/s] (counter-clockwise positive)
        orientation: Heading [rad], wrapped into (-π, π]
    """
    position: np.ndarray = field(default_factory=lambda: np.zeros(2))         # [m]
    linear_velocity: np.ndarray = field(default_factory=lambda: np.zeros(2))  # [m/s]
    angular_velocity: float = 0.0                                             # [rad/s]
    orientation: float = 0.0                                                  # [rad]

    @property
    def speed(self) -> float:
        """Magnitude of the linear velocity [m/s]."""
        return float(np.linalg.norm(self.linear_velocity))


@dataclass
class ControlState:
    """
    Pilot control state, persistent across ticks.

    Attributes:
        rudder_angle: Thrust deflection relative to the hull's nose [deg]
        throttle: Commanded thrust magnitude [N]
    """
    rudder_angle: float = 0.0    # [deg]
    throttle: float = 0.0        # [N]

    def clamp(self, limits: 'ControlLimits') -> 'ControlState':
        """Clamp both controls into their allowed ranges (idempotent)."""
        self.rudder_angle = float(np.clip(self.rudder_angle,
                                          -limits.max_rudder_angle, limits.max_rudder_angle))
        self.throttle = float(np.clip(self.throttle, 0.0, limits.max_thrust))
        return self

    def copy(self) -> 'ControlState':
        return ControlState(rudder_angle=self.rudder_angle, throttle=self.throttle)


@dataclass(frozen=True)
class ControlLimits:
    """
    Allowed control ranges.

    Attributes:
        max_thrust: Upper throttle bound [N] (lower bound is 0)
        max_rudder_angle: Symmetric rudder bound [deg]
    """
    max_thrust: float = 150.0        # [N]
    max_rudder_angle: float = 20.0   # [deg]

    def __post_init__(self):
        if not np.isfinite(self.max_thrust) or self.max_thrust <= 0:
            raise ConfigurationError(f"max_thrust must be positive, got {self.max_thrust}")
        if not np.isfinite(self.max_rudder_angle) or self.max_rudder_angle <= 0:
            raise ConfigurationError(f"max_rudder_angle must be positive, got {self.max_rudder_angle}")


@dataclass(frozen=True)
class HullParameters:
    """
    Fixed hull geometry and hydrodynamic coefficients.

    Attributes:
        width: Hull length along the body x-axis [m]
        height: Hull beam along the body y-axis [m]
        mass: Vehicle mass [kg]
        cross_sectional_area: Frontal area [m²]
        drag_coefficient: Hull drag coefficient Cd [-]
        lift_coefficient_slope: dCL/dα [1/rad]
        spinning_drag_coefficient: Rotational drag coefficient [-]
    """
    width: float
    height: float
    mass: float
    cross_sectional_area: float
    drag_coefficient: float
    lift_coefficient_slope: float
    spinning_drag_coefficient: float = 0.0

    def __post_init__(self):
        for name in ('width', 'height', 'mass', 'cross_sectional_area'):
            value = getattr(self, name)
            if not np.isfinite(value) or value <= 0:
                raise ConfigurationError(f"Hull {name} must be positive, got {value}")
        for name in ('drag_coefficient', 'spinning_drag_coefficient'):
            value = getattr(self, name)
            if not np.isfinite(value) or value < 0:
                raise ConfigurationError(f"Hull {name} must be non-negative, got {value}")
        if not np.isfinite(self.lift_coefficient_slope):
            raise ConfigurationError(
                f"Hull lift_coefficient_slope must be finite, got {self.lift_coefficient_slope}")

    @property
    def density(self) -> float:
        """Planar density used for the rigid-body box [kg/m²]."""
        return self.mass / (self.width * self.height)


@dataclass(frozen=True)
class FinParameters:
    """
    Control fin coefficients. All zero for a vehicle without fins.

    Attributes:
        cross_sectional_area: Total fin area [m²]
        lift_coefficient_slope: dCL/dα of the fins [1/rad]
        drag_coefficient: Fin drag coefficient [-]
    """
    cross_sectional_area: float = 0.0
    lift_coefficient_slope: float = 0.0
    drag_coefficient: float = 0.0

    def __post_init__(self):
        for name in ('cross_sectional_area', 'drag_coefficient'):
            value = getattr(self, name)
            if not np.isfinite(value) or value < 0:
                raise ConfigurationError(f"Fin {name} must be non-negative, got {value}")
        if not np.isfinite(self.lift_coefficient_slope):
            raise ConfigurationError(
                f"Fin lift_coefficient_slope must be finite, got {self.lift_coefficient_slope}")


@dataclass(frozen=True)
class FluidProperties:
    """
    Fluid the vehicle moves through.

    Attributes:
        density: Fluid density [kg/m³] (fresh water ≈ 1000)
    """
    density: float = 1000.0

    def __post_init__(self):
        if not np.isfinite(self.density) or self.density <= 0:
            raise ConfigurationError(f"Fluid density must be positive, got {self.density}")


@dataclass(frozen=True)
class ForceContribution:
    """
    One force (or torque) produced by the hydrodynamic model for one tick.

    Attributes:
        name: Contribution identifier (thrust, hull_drag, hull_lift, ...)
        application_point: Point of application in the body frame [m]
        force: Force vector in the world frame [N] (zero for torques)
        torque: Torque about the center of mass [N*m] (spinning drag only)
        at_center_of_mass: True if the force acts at the center of mass
    """
    name: str
    application_point: np.ndarray = field(default_factory=lambda: np.zeros(2))  # [m] body frame
    force: np.ndarray = field(default_factory=lambda: np.zeros(2))              # [N] world frame
    torque: float = 0.0                                                         # [N*m]
    at_center_of_mass: bool = False

    @property
    def is_torque(self) -> bool:
        return self.name == 'spinning_drag'

    @property
    def magnitude(self) -> float:
        if self.is_torque:
            return abs(self.torque)
        return float(np.linalg.norm(self.force))


@dataclass(frozen=True)
class InputSample:
    """
    One tick of pilot input.

    Discrete inputs are "held" flags; continuous inputs are analog axis
    samples in [-1, 1], or None when the axis did not move this tick.
    """
    rudder_left: bool = False
    rudder_right: bool = False
    throttle_up: bool = False
    throttle_down: bool = False
    rudder_axis: Optional[float] = None
    throttle_axis: Optional[float] = None


@dataclass(frozen=True)
class TelemetryRecord:
    """
    One row of the telemetry stream.

    Attributes:
        time: Elapsed simulated time [s]
        x, y: Vehicle world center [m]
        angle: Vehicle heading [deg]
    """
    time: float
    x: float
    y: float
    angle: float

    def as_row(self) -> Tuple[float, float, float, float]:
        return (self.time, self.x, self.y, self.angle)


@dataclass(frozen=True)
class VehicleConfig:
    """
    Complete vehicle description parsed from configuration.

    Attributes:
        name: Vehicle variant name
        hull: Hull parameters
        fins: Fin parameters (zero-valued if the variant has no fins)
        limits: Control ranges
        initial_position: Spawn position [m]
        initial_heading: Spawn heading [deg]
        initial_speed: Spawn speed along the heading [m/s]
    """
    name: str
    hull: HullParameters
    fins: FinParameters = FinParameters()
    limits: ControlLimits = ControlLimits()
    initial_position: Tuple[float, float] = (0.0, 0.0)   # [m]
    initial_heading: float = 0.0                         # [deg]
    initial_speed: float = 0.0                           # [m/s]


def vehicle_config_from_dict(name: str, cfg: Dict[str, Any]) -> VehicleConfig:
    """
    Build a VehicleConfig from one ``vehicles.<name>`` YAML block.

    Args:
        name: Variant name (used for logging and metadata)
        cfg: Dictionary with ``hull``, optional ``fins``, ``control`` and ``initial`` sections

    Returns:
        Validated VehicleConfig

    Raises:
        ConfigurationError: Missing sections/keys or invalid values
    """
    try:
        hull_cfg = cfg['hull']
        hull = HullParameters(
            width=float(hull_cfg['width']),
            height=float(hull_cfg['height']),
            mass=float(hull_cfg['mass']),
            cross_sectional_area=float(hull_cfg['cross_sectional_area']),
            drag_coefficient=float(hull_cfg['drag_coefficient']),
            lift_coefficient_slope=float(hull_cfg['lift_coefficient_slope']),
            spinning_drag_coefficient=float(hull_cfg.get('spinning_drag_coefficient', 0.0))
        )
    except KeyError as e:
        raise ConfigurationError(f"Vehicle '{name}' is missing hull parameter {e}") from e

    fin_cfg = cfg.get('fins') or {}
    fins = FinParameters(
        cross_sectional_area=float(fin_cfg.get('cross_sectional_area', 0.0)),
        lift_coefficient_slope=float(fin_cfg.get('lift_coefficient_slope', 0.0)),
        drag_coefficient=float(fin_cfg.get('drag_coefficient', 0.0))
    )

    control_cfg = cfg.get('control') or {}
    limits = ControlLimits(
        max_thrust=float(control_cfg.get('max_thrust', 150.0)),
        max_rudder_angle=float(control_cfg.get('max_rudder_angle', 20.0))
    )

    initial_cfg = cfg.get('initial') or {}
    position = initial_cfg.get('position', [0.0, 0.0])
    if len(position) != 2:
        raise ConfigurationError(f"Vehicle '{name}' initial position must have 2 components")

    return VehicleConfig(
        name=name,
        hull=hull,
        fins=fins,
        limits=limits,
        initial_position=(float(position[0]), float(position[1])),
        initial_heading=float(initial_cfg.get('heading', 0.0)),
        initial_speed=float(initial_cfg.get('speed', 0.0))
    )


# Utility functions for unit conversions
def degrees_to_radians(angle_deg: float) -> float:
    """Convert angle from degrees to radians."""
    return angle_deg * np.pi / 180.0


def radians_to_degrees(angle_rad: float) -> float:
    """Convert angle from radians to degrees."""
    return angle_rad * 180.0 / np.pi


def rotation_matrix_2d(angle: float) -> np.ndarray:
    """
    Counter-clockwise rotation matrix (body to world).

    Args:
        angle: Rotation angle in radians

    Returns:
        2x2 rotation matrix
    """
    c, s = np.cos(angle), np.sin(angle)
    return np.array([
        [c, -s],
        [s, c]
    ])


def rotate_vector(vector: np.ndarray, angle: float) -> np.ndarray:
    """Rotate a 2D vector counter-clockwise by ``angle`` radians."""
    return rotation_matrix_2d(angle) @ np.asarray(vector, dtype=float)


def rotate_90(vector: np.ndarray) -> np.ndarray:
    """Rotate a 2D vector by +90° (counter-clockwise)."""
    x, y = vector
    return np.array([-y, x], dtype=float)
