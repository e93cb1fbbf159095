"""
Submarine Simulation Runner
===========================

This module provides the main simulation runner that ties the components
together:
- Vehicle force model and rigid-body world
- Pilot input and control integration
- Telemetry logging and run metadata
- Scenario execution and optional plotting

The runner owns the per-run output folder and drives the fixed-step loop.
"""

import numpy as np
import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional
from datetime import datetime

from subsim.control.scripted_pilot import ScriptedPilot, PilotCommand
from subsim.simulation.context import SimulationContext
from subsim.utils.logging_config import TelemetryLogger, setup_logging

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


class SubmarineSimulation:
    """
    Main submarine simulation class that coordinates all subsystems.

    This class manages:
    - Component initialization from configuration
    - Main simulation loop with pause handling
    - Telemetry and metadata output
    - Scenario execution
    """

    def __init__(self, config_file: str = "config/config.yaml", scenario_name: str = "simulation",
                 vehicle_name: Optional[str] = None, results_root: Optional[Path] = None,
                 input_mode: Optional[str] = None):
        """
        Initialize submarine simulation.

        Args:
            config_file: Path to YAML configuration file (absolute or project-relative)
            scenario_name: Name of the scenario for output folder naming
            vehicle_name: Vehicle variant (``simulation.vehicle`` from config if None)
            results_root: Override for the results directory
            input_mode: Override for ``control.input_mode`` (discrete | continuous)
        """
        # Load configuration
        self.config = self._load_config(config_file)
        if input_mode is not None:
            self.config.setdefault('control', {})['input_mode'] = input_mode

        # Prepare per-run directories under results/
        if results_root is None:
            results_root = PROJECT_ROOT / self.config['paths']['results_dir']
        results_root = Path(results_root)
        results_root.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        # Sanitize scenario name for filesystem use
        safe_scenario_name = "".join(c for c in scenario_name if c.isalnum() or c in ('_', '-')).rstrip()
        self.run_id = f"{timestamp}_{safe_scenario_name}"
        self.run_dir = results_root / self.run_id
        (self.run_dir / "logs").mkdir(parents=True, exist_ok=True)
        (self.run_dir / "plots").mkdir(parents=True, exist_ok=True)

        # Setup logging to per-run logs directory
        logging_cfg = self.config['scenarios']['logging']
        self.logger = setup_logging(
            log_level=logging_cfg['log_level'],
            console_output=logging_cfg.get('console_output', True),
            log_dir=self.run_dir / "logs"
        )

        # Vehicle, world and stepper
        self.logger.info("Initializing simulation components...")
        self.context = SimulationContext.from_config(self.config, vehicle_name=vehicle_name)
        self.stepper = self.context.stepper
        self.frame_count = 0

        # Telemetry stream, opened only once the vehicle exists
        self.telemetry = TelemetryLogger(log_dir=self.run_dir / "logs")
        self.stepper.telemetry = self.telemetry

        self.logger.info("Submarine simulation initialized successfully")

    def _load_config(self, config_file: str) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        config_path = Path(config_file)
        if not config_path.is_absolute():
            config_path = PROJECT_ROOT / config_path

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)

        print(f"Configuration loaded from: {config_path}")
        return config

    def run_scenario(self, pilot: ScriptedPilot, duration: float = None,
                     pause_schedule: Optional[List[int]] = None):
        """
        Run a complete simulation scenario.

        Args:
            pilot: Source of per-tick pilot input
            duration: Running (unpaused) simulated time [s] (config default if None)
            pause_schedule: Frame indices at which pause is toggled. The
                simulation starts paused; the default [0] starts running
                immediately.

        Returns:
            (final KinematicState, scenario info dict)
        """
        if duration is None:
            duration = self.config['scenarios']['test_duration']
        if pause_schedule is None:
            pause_schedule = [0]

        toggles = sorted(pause_schedule)
        last_toggle = toggles[-1] if toggles else -1
        log_every = int(self.config['scenarios']['logging'].get('progress_interval', 100))

        self.logger.info(f"Starting simulation scenario: duration={duration}s, "
                         f"vehicle={self.context.vehicle.name}")

        try:
            self._run_loop(pilot, duration, toggles, last_toggle, log_every)

            # === SIMULATION COMPLETE ===
            final_state = self.context.kinematic_state()
            self.logger.info(f"Simulation completed: {self.stepper.tick_count} ticks, "
                             f"{self.stepper.elapsed_time:.2f}s simulated, {self.frame_count} frames")

            controls = self.context.control_state
            scenario_info = {
                "duration": duration,
                "ticks": self.stepper.tick_count,
                "frames": self.frame_count,
                "fixed_timestep": self.stepper.fixed_timestep,
                "vehicle": self.context.vehicle.name,
                "final_position": final_state.position.tolist(),
                "final_heading_deg": float(np.degrees(final_state.orientation)),
                "final_speed": final_state.speed,
                "final_rudder_angle": controls.rudder_angle,
                "final_throttle": controls.throttle
            }
            self.telemetry.save_metadata(self.config, scenario_info)
        except Exception:
            self.logger.error(f"Simulation aborted at frame {self.frame_count}, "
                              f"tick {self.stepper.tick_count}")
            raise
        finally:
            self.telemetry.close()

        self.logger.log_performance_summary(self.stepper.fixed_timestep)

        if self.config['scenarios']['logging'].get('save_plots', False):
            self._generate_plots()

        return final_state, scenario_info

    def _run_loop(self, pilot: ScriptedPilot, duration: float, toggles: List[int],
                  last_toggle: int, log_every: int) -> None:
        """Main fixed-step loop: pause toggles, pilot input, one tick per frame."""
        while self.stepper.elapsed_time < duration - 1e-9:
            self.logger.start_timer("simulation_step")

            while toggles and toggles[0] <= self.frame_count:
                self.context.toggle_pause()
                toggles.pop(0)

            if self.stepper.paused and self.frame_count > last_toggle:
                self.logger.warning("Simulation left paused with no further resume scheduled; stopping")
                self.logger.end_timer("simulation_step")
                break

            sample = pilot.sample(self.stepper.elapsed_time)
            record = self.context.tick(sample=sample)

            if record is None:
                self.logger.increment_counter("paused_frames")
            else:
                self.logger.increment_counter("running_ticks")
                if self.stepper.tick_count % log_every == 0:
                    self.logger.log_progress(
                        self.stepper.tick_count, record.time, self.stepper.get_state_summary()
                    )

            self.frame_count += 1
            self.logger.end_timer("simulation_step")

    def _generate_plots(self):
        """Generate telemetry plots for the completed run."""
        try:
            import sys
            sys.path.append(str(PROJECT_ROOT / "visualization"))
            from plot_results import TelemetryPlotter

            self.logger.info("Generating visualization plots...")
            plotter = TelemetryPlotter(str(self.telemetry.csv_file),
                                       str(self.telemetry.json_metadata))
            plotter.create_all_plots(show=False)
            self.logger.info(f"Plots saved to: {plotter.output_dir}")
        except (ImportError, OSError, ValueError) as e:
            self.logger.error(f"Failed to generate plots: {e}")

    def get_simulation_summary(self) -> Dict[str, Any]:
        """Get simulation status summary."""
        state = self.context.kinematic_state()
        return {
            'elapsed_time': self.stepper.elapsed_time,
            'tick_count': self.stepper.tick_count,
            'paused': self.stepper.paused,
            'vehicle_state': {
                'position': state.position.tolist(),
                'velocity': state.linear_velocity.tolist(),
                'heading_deg': float(np.degrees(state.orientation)),
                'angular_velocity_deg': float(np.degrees(state.angular_velocity))
            },
            'control_status': self.context.integrator.get_status(),
            'fluid_density': self.context.fluid.density
        }


def run_basic_simulation():
    """
    Run a basic simulation: cruise, then a held left rudder turn.
    """
    sim = SubmarineSimulation(scenario_name="basic_simulation")

    pilot = ScriptedPilot([
        PilotCommand(0.0, held=('throttle_up',)),
        PilotCommand(1.5, held=()),
        PilotCommand(3.0, held=('rudder_left',)),
        PilotCommand(3.2, held=()),
    ])

    final_state, info = sim.run_scenario(pilot, duration=10.0)

    print("\n" + "="*50)
    print("SIMULATION RESULTS")
    print("="*50)
    print(f"Final position: {final_state.position}")
    print(f"Final heading: {np.degrees(final_state.orientation):.1f} degrees")
    print(f"Final velocity: {final_state.linear_velocity} m/s")
    print(f"Simulation ticks: {info['ticks']}")
    print(f"Telemetry file: {sim.telemetry.csv_file}")

    return sim, final_state, info


if __name__ == "__main__":
    run_basic_simulation()
