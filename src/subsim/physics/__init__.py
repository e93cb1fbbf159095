"""
Submarine Physics
=================

Hydrodynamic force model and the planar rigid-body world it drives.
"""

from .hydrodynamics import HydrodynamicForceModel, wrap_angle, angle_of_attack
from .rigid_body import RigidBodyEngine, RigidBodyWorld, BodyHandle

__all__ = ['HydrodynamicForceModel', 'wrap_angle', 'angle_of_attack',
           'RigidBodyEngine', 'RigidBodyWorld', 'BodyHandle']
