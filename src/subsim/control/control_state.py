"""
Submarine Pilot Control Integration
===================================

This module turns per-tick pilot input into the persistent control state
(rudder angle and throttle) that drives the force model.

Two input modes are supported, chosen once at configuration time:
- Discrete: held direction keys nudge the controls by a fixed step per tick
  (rudder left +1°, right -1°, throttle up +1 N, down -1 N). The step is per
  tick, not per second; callers wanting rate independence scale it by dt.
- Continuous: analog axes in [-1, 1] overwrite the controls directly
  (rudder = axis · 20°, throttle = (1 - axis) · max_thrust / 2).

Clamping to the allowed ranges is always the last operation of a tick.
"""

from enum import Enum
import numpy as np

from subsim.data_types.types import ControlState, ControlLimits, InputSample
from subsim.exceptions import ConfigurationError
from subsim.utils.logging_config import get_logger

logger = get_logger()


class InputMode(Enum):
    """Pilot input mode."""
    DISCRETE = "discrete"
    CONTINUOUS = "continuous"

    @classmethod
    def from_config(cls, value) -> 'InputMode':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ConfigurationError(
                f"Unknown input mode '{value}' (expected 'discrete' or 'continuous')") from None


class ControlStateIntegrator:
    """
    Per-tick integrator for the pilot's rudder and throttle.

    The integrator owns the ControlState for one vehicle. ``update`` mutates
    it in place and returns it.
    """

    def __init__(self, limits: ControlLimits, mode: InputMode = InputMode.DISCRETE,
                 step_size: float = 1.0):
        """
        Initialize control integrator.

        Args:
            limits: Rudder/throttle ranges
            mode: Input mode (fixed for the lifetime of the integrator)
            step_size: Discrete increment per tick [deg for rudder, N for throttle]
        """
        self.limits = limits
        self.mode = InputMode.from_config(mode)
        self.step_size = float(step_size)
        self.state = ControlState()

        if not np.isfinite(self.step_size) or self.step_size <= 0:
            raise ConfigurationError(f"Control step size must be positive, got {step_size}")

        logger.info(f"Control integrator initialized: mode={self.mode.value}, "
                    f"max_rudder={limits.max_rudder_angle}°, max_thrust={limits.max_thrust}N")

    def update(self, sample: InputSample) -> ControlState:
        """
        Apply one tick of pilot input.

        Args:
            sample: Input collected for this tick

        Returns:
            The updated (clamped) control state
        """
        if self.mode is InputMode.DISCRETE:
            self._apply_discrete(sample)
        else:
            self._apply_continuous(sample)

        return self.state.clamp(self.limits)

    def _apply_discrete(self, sample: InputSample) -> None:
        if sample.rudder_left:
            self.state.rudder_angle += self.step_size
        if sample.rudder_right:
            self.state.rudder_angle -= self.step_size
        if sample.throttle_up:
            self.state.throttle += self.step_size
        if sample.throttle_down:
            self.state.throttle -= self.step_size

    def _apply_continuous(self, sample: InputSample) -> None:
        # Axes that did not move this tick leave the control unchanged
        if sample.rudder_axis is not None:
            self.state.rudder_angle = sample.rudder_axis * self.limits.max_rudder_angle
        if sample.throttle_axis is not None:
            self.state.throttle = (1.0 - sample.throttle_axis) * self.limits.max_thrust / 2.0

    def reset(self) -> None:
        """Return to the creation state (rudder 0°, throttle 0 N)."""
        self.state = ControlState()
        logger.debug("Control state reset")

    def get_status(self) -> dict:
        return {
            'mode': self.mode.value,
            'rudder_angle': self.state.rudder_angle,     # [deg]
            'throttle': self.state.throttle,             # [N]
            'max_rudder_angle': self.limits.max_rudder_angle,
            'max_thrust': self.limits.max_thrust
        }
