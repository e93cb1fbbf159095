"""
Basic Submarine Test Scenario
=============================

This scenario exercises the keyboard (discrete) control path:
- Pre-staging throttle while paused
- Straight run at cruise thrust
- Held left rudder turn
- Rudder centering and throttle reduction

It serves as an end-to-end check of the force model, control integration
and telemetry output.
"""

import sys
from pathlib import Path
import numpy as np

# Add src to path for imports
sys.path.append(str(Path(__file__).parent.parent / "src"))

from subsim.control.scripted_pilot import PilotCommand, ScriptedPilot
from subsim.simulation_runner import SubmarineSimulation


def create_basic_test_commands():
    """
    Pilot schedule for the basic test.

    Profile:
    1. Throttle up (also while paused, so thrust is pre-staged)
    2. Straight run for a few seconds
    3. Hold left rudder until fully deflected, then hold the turn
    4. Center the rudder again and back off the throttle

    Returns:
        List of PilotCommand
    """
    return [
        # Phase 0: throttle up from zero (1 N per tick)
        PilotCommand(timestamp=0.0, held=('throttle_up',)),

        # Phase 1: cruise
        PilotCommand(timestamp=1.0, held=()),

        # Phase 2: full left rudder (20 ticks to reach +20°)
        PilotCommand(timestamp=4.0, held=('rudder_left',)),
        PilotCommand(timestamp=4.5, held=()),

        # Phase 3: center rudder
        PilotCommand(timestamp=10.0, held=('rudder_right',)),
        PilotCommand(timestamp=10.2, held=()),

        # Phase 4: reduce thrust
        PilotCommand(timestamp=14.0, held=('throttle_down',)),
        PilotCommand(timestamp=14.5, held=()),
    ]


def run_basic_test(duration: float = 20.0, paused_frames: int = 50):
    """
    Execute the basic test scenario.

    Args:
        duration: Running time to simulate [s]
        paused_frames: Frames spent paused before the run starts
    """
    print("="*60)
    print("SUBMARINE BASIC TEST SCENARIO (DISCRETE CONTROL)")
    print("="*60)

    sim = SubmarineSimulation(scenario_name="basic_test")
    pilot = ScriptedPilot(create_basic_test_commands())

    # Paused for the first frames, then running
    final_state, info = sim.run_scenario(pilot, duration=duration,
                                         pause_schedule=[paused_frames])

    print("\n" + "="*60)
    print("BASIC TEST RESULTS")
    print("="*60)
    print(f"Vehicle: {info['vehicle']}")
    print(f"Running ticks: {info['ticks']} ({info['frames']} frames incl. paused)")
    print(f"Final position: ({final_state.position[0]:.2f}, {final_state.position[1]:.2f}) m")
    print(f"Final heading: {np.degrees(final_state.orientation):.1f}°")
    print(f"Final speed: {final_state.speed:.2f} m/s")
    print(f"Final controls: rudder={info['final_rudder_angle']:.1f}°, "
          f"throttle={info['final_throttle']:.1f}N")
    print(f"Telemetry: {sim.telemetry.csv_file}")

    return sim, final_state, info


if __name__ == "__main__":
    run_basic_test()
