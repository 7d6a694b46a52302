"""
Maintenance Layer
=================

Time-windowed maintenance jobs that force substations offline.
"""

from .job import MaintenanceJob, MaintenanceState

__all__ = ["MaintenanceJob", "MaintenanceState"]
