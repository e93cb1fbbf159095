"""
Pilot Input Adapter
===================

Bridges event-style input devices (keyboard, gamepad) to the per-tick
InputSample consumed by the control integrator. The simulation core never
polls devices itself; a device layer calls the listener methods below and the
simulation loop collects one sample per tick.
"""

from typing import Dict, Optional, Protocol, runtime_checkable
import numpy as np

from subsim.data_types.types import InputSample
from subsim.utils.logging_config import get_logger

logger = get_logger()

# Gamepad axis codes of the reference controller mapping
RUDDER_AXIS = 2
THROTTLE_AXIS = 4

BUTTONS = ('rudder_left', 'rudder_right', 'throttle_up', 'throttle_down')


@runtime_checkable
class ControlListener(Protocol):
    """Capability a device layer needs from whatever receives its events."""

    def on_axis_changed(self, axis_code: int, value: float) -> None: ...

    def on_button_changed(self, button: str, pressed: bool) -> None: ...


class InputSampleCollector:
    """
    Collects device events between ticks and emits one InputSample per tick.

    Held buttons stay active until released. Axis movements are reported in
    the next sample only, then cleared.
    """

    def __init__(self, rudder_axis: int = RUDDER_AXIS, throttle_axis: int = THROTTLE_AXIS):
        self.rudder_axis_code = rudder_axis
        self.throttle_axis_code = throttle_axis
        self.held: Dict[str, bool] = {name: False for name in BUTTONS}
        self._rudder_axis: Optional[float] = None
        self._throttle_axis: Optional[float] = None

    def on_axis_changed(self, axis_code: int, value: float) -> None:
        value = float(np.clip(value, -1.0, 1.0))
        if axis_code == self.rudder_axis_code:
            self._rudder_axis = value
        elif axis_code == self.throttle_axis_code:
            self._throttle_axis = value
        else:
            logger.debug(f"Ignoring unmapped axis {axis_code}")

    def on_button_changed(self, button: str, pressed: bool) -> None:
        if button not in self.held:
            logger.debug(f"Ignoring unmapped button '{button}'")
            return
        self.held[button] = bool(pressed)

    def sample(self) -> InputSample:
        """Build this tick's InputSample and clear one-shot axis values."""
        sample = InputSample(
            rudder_left=self.held['rudder_left'],
            rudder_right=self.held['rudder_right'],
            throttle_up=self.held['throttle_up'],
            throttle_down=self.held['throttle_down'],
            rudder_axis=self._rudder_axis,
            throttle_axis=self._throttle_axis
        )
        self._rudder_axis = None
        self._throttle_axis = None
        return sample

    def release_all(self) -> None:
        for name in self.held:
            self.held[name] = False
