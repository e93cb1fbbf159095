"""
Simulation Context
==================

Explicitly constructed owner of everything one simulated vehicle needs: the
rigid-body world and body handle, the force model, the control integrator,
the stepper and the configuration they were built from. There are no
module-level simulation globals; several vehicles are several contexts.
"""

import numpy as np
from typing import Any, Dict, List, Optional

from subsim.control.control_state import ControlStateIntegrator, InputMode
from subsim.data_types.types import (
    VehicleConfig, FluidProperties, ControlState, KinematicState, ForceContribution,
    InputSample, TelemetryRecord, vehicle_config_from_dict, degrees_to_radians
)
from subsim.exceptions import ConfigurationError, EngineUnavailable
from subsim.physics.hydrodynamics import HydrodynamicForceModel
from subsim.physics.rigid_body import RigidBodyWorld
from subsim.simulation.stepper import SimulationStepper
from subsim.utils.logging_config import get_logger

logger = get_logger()


class SimulationContext:
    """
    One vehicle in one world.

    Build with ``from_config`` for the usual YAML-driven setup, or pass the
    pieces directly.
    """

    def __init__(self, vehicle: VehicleConfig, fluid: FluidProperties, engine, body,
                 integrator: ControlStateIntegrator, stepper: SimulationStepper,
                 config: Optional[Dict[str, Any]] = None):
        self.vehicle = vehicle
        self.fluid = fluid
        self.engine = engine
        self.body = body
        self.integrator = integrator
        self.stepper = stepper
        self.config = config or {}

    @classmethod
    def from_config(cls, config: Dict[str, Any], vehicle_name: Optional[str] = None,
                    engine=None, telemetry=None) -> 'SimulationContext':
        """
        Build a context from a configuration dictionary.

        Args:
            config: Parsed YAML configuration
            vehicle_name: Variant under ``vehicles`` (``simulation.vehicle`` if None)
            engine: Empty rigid-body engine to use (a new RigidBodyWorld if None)
            telemetry: Optional telemetry sink passed to the stepper

        Returns:
            Ready-to-run SimulationContext (paused)

        Raises:
            ConfigurationError: Unknown vehicle, invalid parameters or an engine already in use
            EngineUnavailable: Engine could not be created or refused the body
        """
        sim_cfg = config.get('simulation', {})
        vehicles_cfg = config.get('vehicles', {})

        if vehicle_name is None:
            vehicle_name = sim_cfg.get('vehicle')
        if vehicle_name not in vehicles_cfg:
            raise ConfigurationError(f"Unknown vehicle '{vehicle_name}', "
                                     f"available: {sorted(vehicles_cfg)}")

        vehicle = vehicle_config_from_dict(vehicle_name, vehicles_cfg[vehicle_name])
        fluid = FluidProperties(density=float(config.get('environment', {}).get('fluid_density', 1000.0)))

        if engine is None:
            try:
                engine = RigidBodyWorld(gravity=(0.0, 0.0))
            except Exception as e:
                raise EngineUnavailable(f"Failed to initialize rigid-body world: {e}") from e
        elif getattr(engine, 'bodies', None):
            # One vehicle per world
            raise ConfigurationError("Rigid-body engine already holds a body; "
                                     "each context needs its own world")

        body = cls._create_vehicle_body(engine, vehicle)

        control_cfg = config.get('control', {})
        integrator = ControlStateIntegrator(
            limits=vehicle.limits,
            mode=InputMode.from_config(control_cfg.get('input_mode', 'discrete')),
            step_size=float(control_cfg.get('step_size', 1.0))
        )

        force_model = HydrodynamicForceModel(vehicle.hull, vehicle.fins, fluid)

        stepper = SimulationStepper(
            engine, body, force_model, integrator,
            fixed_timestep=float(sim_cfg.get('fixed_timestep', 0.01)),
            velocity_iterations=int(sim_cfg.get('velocity_iterations', 6)),
            position_iterations=int(sim_cfg.get('position_iterations', 2)),
            telemetry=telemetry
        )

        logger.info(f"Vehicle '{vehicle.name}' ready: mass={vehicle.hull.mass}kg, "
                    f"speed={vehicle.initial_speed}m/s, heading={vehicle.initial_heading}°")

        return cls(vehicle, fluid, engine, body, integrator, stepper, config)

    @staticmethod
    def _create_vehicle_body(engine, vehicle: VehicleConfig):
        """Create the hull box in the engine and give it its initial velocity."""
        if not callable(getattr(engine, 'create_body', None)):
            raise EngineUnavailable("Rigid-body engine cannot create bodies")

        hull = vehicle.hull
        heading = degrees_to_radians(vehicle.initial_heading)

        body = engine.create_body(
            position=vehicle.initial_position,
            orientation=heading,
            shape_dimensions=(hull.width, hull.height),
            density=hull.density,
            friction=0.0,
            restitution=0.0
        )
        if body is None:
            raise EngineUnavailable("Rigid-body engine returned no body")

        velocity = vehicle.initial_speed * np.array([np.cos(heading), np.sin(heading)])
        if hasattr(engine, 'set_linear_velocity'):
            engine.set_linear_velocity(body, velocity)
        elif vehicle.initial_speed != 0.0:
            logger.warning("Engine cannot set velocities; initial speed ignored")

        return body

    # === CORE INTERFACE ===

    @property
    def control_state(self) -> ControlState:
        return self.integrator.state

    @property
    def paused(self) -> bool:
        return self.stepper.paused

    def kinematic_state(self) -> KinematicState:
        return self.stepper.read_kinematic_state()

    def update_controls(self, sample: InputSample) -> ControlState:
        return self.stepper.update_controls(sample)

    def compute_forces(self) -> List[ForceContribution]:
        return self.stepper.compute_forces()

    def tick(self, running: Optional[bool] = None,
             sample: Optional[InputSample] = None) -> Optional[TelemetryRecord]:
        return self.stepper.tick(running, sample)

    def toggle_pause(self) -> bool:
        return self.stepper.toggle_pause()
