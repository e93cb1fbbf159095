"""
Simulation Stepper
==================

Advances one vehicle by one fixed timestep per tick:

    input → control update → force model → apply to body → engine step → telemetry

The stepper has two states. While paused, controls can still be pre-staged
and forces are computed for display, but nothing is applied, the engine is
not stepped, no telemetry is emitted and the tick counter stays put. While
running, every tick applies the forces, steps the engine once and emits one
TelemetryRecord with time = tick_count · dt.
"""

import numpy as np
from typing import List, Optional

from subsim.control.control_state import ControlStateIntegrator
from subsim.data_types.types import (
    KinematicState, ControlState, ForceContribution, InputSample, TelemetryRecord,
    radians_to_degrees
)
from subsim.exceptions import ConfigurationError, EngineUnavailable
from subsim.physics.hydrodynamics import HydrodynamicForceModel, wrap_angle
from subsim.utils.logging_config import get_logger

logger = get_logger()

ENGINE_METHODS = (
    'get_linear_velocity', 'get_angular_velocity', 'get_angle', 'get_world_center',
    'get_world_point', 'apply_force', 'apply_force_to_center', 'apply_torque', 'step'
)


class SimulationStepper:
    """
    Fixed-step orchestrator for one vehicle.

    Attributes:
        tick_count: Number of running ticks completed
        paused: Current state (True initially)
        last_contributions: Forces computed in the most recent tick (display only)
    """

    def __init__(self, engine, body, force_model: HydrodynamicForceModel,
                 integrator: ControlStateIntegrator,
                 fixed_timestep: float = 1.0 / 100.0,
                 velocity_iterations: int = 6,
                 position_iterations: int = 2,
                 telemetry=None):
        """
        Initialize stepper.

        Args:
            engine: Rigid-body engine (see physics.rigid_body.RigidBodyEngine)
            body: Handle of the vehicle body in that engine
            force_model: Hydrodynamic force model for the vehicle
            integrator: Control integrator owning the vehicle's ControlState
            fixed_timestep: Engine timestep [s]
            velocity_iterations: Passed through to the engine
            position_iterations: Passed through to the engine
            telemetry: Optional sink with a ``log(record)`` method

        Raises:
            ConfigurationError: Non-positive fixed timestep
            EngineUnavailable: Engine or body missing, or engine lacks part of the interface
        """
        if engine is None:
            raise EngineUnavailable("No rigid-body engine provided")
        missing = [name for name in ENGINE_METHODS if not callable(getattr(engine, name, None))]
        if missing:
            raise EngineUnavailable(f"Rigid-body engine is missing {missing}")
        if body is None:
            raise EngineUnavailable("Rigid-body engine did not provide a vehicle body")
        if fixed_timestep <= 0:
            raise ConfigurationError(f"Fixed timestep must be positive, got {fixed_timestep}")

        self.engine = engine
        self.body = body
        self.force_model = force_model
        self.integrator = integrator
        self.fixed_timestep = fixed_timestep
        self.velocity_iterations = velocity_iterations
        self.position_iterations = position_iterations
        self.telemetry = telemetry

        self.paused = True
        self.tick_count = 0
        self.last_contributions: List[ForceContribution] = []

        logger.info(f"Stepper initialized: dt={fixed_timestep}s, "
                    f"iterations=({velocity_iterations}, {position_iterations})")

    @property
    def control_state(self) -> ControlState:
        return self.integrator.state

    @property
    def elapsed_time(self) -> float:
        return self.tick_count * self.fixed_timestep

    def toggle_pause(self) -> bool:
        """Switch between paused and running; returns the new paused flag."""
        self.paused = not self.paused
        logger.info(f"Simulation {'paused' if self.paused else 'running'} at t={self.elapsed_time:.2f}s")
        return self.paused

    def read_kinematic_state(self) -> KinematicState:
        """Fresh snapshot of the vehicle body (valid for the current tick only)."""
        return KinematicState(
            position=np.array(self.engine.get_world_center(self.body), dtype=float),
            linear_velocity=np.array(self.engine.get_linear_velocity(self.body), dtype=float),
            angular_velocity=float(self.engine.get_angular_velocity(self.body)),
            orientation=wrap_angle(float(self.engine.get_angle(self.body)))
        )

    def update_controls(self, sample: InputSample) -> ControlState:
        """Feed one tick of pilot input."""
        return self.integrator.update(sample)

    def compute_forces(self, state: KinematicState = None,
                       controls: ControlState = None) -> List[ForceContribution]:
        """
        Compute force contributions without applying them.

        Args:
            state: Kinematic snapshot (read from the engine if None)
            controls: Control state (current integrator state if None)
        """
        if state is None:
            state = self.read_kinematic_state()
        if controls is None:
            controls = self.integrator.state
        return self.force_model.compute_forces(state, controls)

    def apply_forces(self, contributions: List[ForceContribution]) -> None:
        """Apply force contributions to the vehicle body."""
        for contribution in contributions:
            if contribution.is_torque:
                self.engine.apply_torque(self.body, contribution.torque, True)
            elif contribution.at_center_of_mass:
                self.engine.apply_force_to_center(self.body, contribution.force, True)
            else:
                world_point = self.engine.get_world_point(self.body, contribution.application_point)
                self.engine.apply_force(self.body, contribution.force, world_point, True)

    def tick(self, running: Optional[bool] = None,
             sample: Optional[InputSample] = None) -> Optional[TelemetryRecord]:
        """
        Advance one frame.

        Args:
            running: Run (True) or hold (False) this tick; uses the pause state if None
            sample: Pilot input for this tick (controls unchanged if None)

        Returns:
            The emitted TelemetryRecord, or None while paused
        """
        if running is None:
            running = not self.paused

        if sample is not None:
            self.update_controls(sample)

        contributions = self.compute_forces()
        self.last_contributions = contributions

        if not running:
            return None

        self.apply_forces(contributions)
        self.engine.step(self.fixed_timestep, self.velocity_iterations, self.position_iterations)

        center = self.engine.get_world_center(self.body)
        record = TelemetryRecord(
            time=self.tick_count * self.fixed_timestep,
            x=float(center[0]),
            y=float(center[1]),
            angle=float(radians_to_degrees(self.engine.get_angle(self.body)))
        )

        if self.telemetry is not None:
            self.telemetry.log(record)

        self.tick_count += 1
        return record

    def get_state_summary(self) -> str:
        """Concise state summary string for logging."""
        state = self.read_kinematic_state()
        controls = self.integrator.state
        return (f"Pos: ({state.position[0]:7.2f}, {state.position[1]:7.2f})m | "
                f"Speed: {state.speed:5.2f}m/s | Heading: {np.degrees(state.orientation):6.1f}° | "
                f"Rudder: {controls.rudder_angle:5.1f}° | Throttle: {controls.throttle:5.1f}N")
