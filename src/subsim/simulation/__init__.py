"""
Submarine Simulation Loop
=========================

Fixed-step stepper and the context object that owns one simulated vehicle.
"""

from .stepper import SimulationStepper
from .context import SimulationContext

__all__ = ['SimulationStepper', 'SimulationContext']
