"""
Submarine Simulation Data Types
===============================

Shared data structures for kinematic state, controls, vehicle parameters,
force contributions and telemetry.
"""

from .types import (
    KinematicState, ControlState, ControlLimits, HullParameters, FinParameters,
    FluidProperties, ForceContribution, InputSample, TelemetryRecord, VehicleConfig,
    vehicle_config_from_dict
)

__all__ = [
    'KinematicState', 'ControlState', 'ControlLimits', 'HullParameters', 'FinParameters',
    'FluidProperties', 'ForceContribution', 'InputSample', 'TelemetryRecord', 'VehicleConfig',
    'vehicle_config_from_dict'
]
