"""
Topology Layer
==============

Substations with fixed MW capacity, tracked usage and an online flag
controlled by the maintenance subsystem.
"""

from .substation import Substation

__all__ = ["Substation"]
