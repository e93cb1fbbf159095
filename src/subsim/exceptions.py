"""
Submarine Simulation Exceptions
===============================

Error kinds raised by the simulation core.

- ConfigurationError: invalid hull, fin, fluid or control parameters.
  Raised at construction time and treated as fatal.
- EngineUnavailable: the rigid-body engine could not be initialized or is
  missing part of the required interface. Fatal, never retried.
- DegenerateVelocity: a zero-length velocity was normalized while computing
  a drag or lift direction. Handled inside the force model, which falls back
  to a zero contribution.
"""


class SubmarineSimError(Exception):
    """Base class for all simulation errors."""


class ConfigurationError(SubmarineSimError, ValueError):
    """Invalid vehicle, fluid or simulation configuration."""


class EngineUnavailable(SubmarineSimError, RuntimeError):
    """The rigid-body engine is missing or failed to initialize."""


class DegenerateVelocity(SubmarineSimError, ArithmeticError):
    """Velocity vector too short to define a direction."""
