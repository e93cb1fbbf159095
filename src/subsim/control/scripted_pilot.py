"""
Scripted Pilot
==============

Replays a time-ordered list of pilot commands through the input adapter, so
scenarios and tests can drive the simulation without a keyboard or gamepad.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from subsim.control.input_adapter import InputSampleCollector, BUTTONS
from subsim.data_types.types import InputSample
from subsim.exceptions import ConfigurationError
from subsim.utils.logging_config import get_logger

logger = get_logger()


@dataclass(frozen=True)
class PilotCommand:
    """
    Pilot action starting at a given simulated time.

    Attributes:
        timestamp: Time the command becomes active [s]
        held: Buttons held from this time on (all others released)
        rudder_axis: Rudder axis position in [-1, 1] (None = untouched)
        throttle_axis: Throttle axis position in [-1, 1] (None = untouched)
    """
    timestamp: float
    held: Tuple[str, ...] = ()
    rudder_axis: Optional[float] = None
    throttle_axis: Optional[float] = None


class ScriptedPilot:
    """Feeds PilotCommands into an InputSampleCollector as time advances."""

    def __init__(self, commands: List[PilotCommand], collector: InputSampleCollector = None):
        for command in commands:
            unknown = set(command.held) - set(BUTTONS)
            if unknown:
                raise ConfigurationError(f"Unknown pilot buttons: {sorted(unknown)}")

        self.commands = sorted(commands, key=lambda c: c.timestamp)
        self.collector = collector if collector is not None else InputSampleCollector()
        self._next_index = 0

    def sample(self, current_time: float) -> InputSample:
        """
        Input for the tick starting at ``current_time``.

        Every command whose timestamp has been reached is replayed, in order,
        before the sample is taken.
        """
        while (self._next_index < len(self.commands)
               and current_time >= self.commands[self._next_index].timestamp):
            command = self.commands[self._next_index]
            self._replay(command)
            self._next_index += 1
            logger.info(f"Pilot command at t={current_time:.2f}s: held={list(command.held)}, "
                        f"rudder_axis={command.rudder_axis}, throttle_axis={command.throttle_axis}")

        return self.collector.sample()

    def _replay(self, command: PilotCommand) -> None:
        for button in BUTTONS:
            self.collector.on_button_changed(button, button in command.held)
        if command.rudder_axis is not None:
            self.collector.on_axis_changed(self.collector.rudder_axis_code, command.rudder_axis)
        if command.throttle_axis is not None:
            self.collector.on_axis_changed(self.collector.throttle_axis_code, command.throttle_axis)

    def reset(self) -> None:
        self._next_index = 0
        self.collector.release_all()
