"""
Submarine Pilot Control
=======================

Control state integration and pilot input adapters.
"""

from .control_state import ControlStateIntegrator, InputMode
from .input_adapter import ControlListener, InputSampleCollector
from .scripted_pilot import PilotCommand, ScriptedPilot

__all__ = ['ControlStateIntegrator', 'InputMode', 'ControlListener',
           'InputSampleCollector', 'PilotCommand', 'ScriptedPilot']
