"""
Submarine Simulation
====================

2D simulation of a rudder-and-throttle controlled submarine: hydrodynamic
force model, pilot control integration and a fixed-step simulation loop.
"""

__version__ = "0.1.0"
