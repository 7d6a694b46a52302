"""
Smart Grid Demand-Response Coordinator
======================================

Single-process simulation of demand-response load balancing:
- Consumers submit power requests tagged by priority class
- A controller allocates them first-fit across a fixed set of substations
- Demand that does not fit is shed
- Substations go offline during scheduled maintenance windows

Architecture:
- resources/: Demand requests and priority ordering
- topology/: Substation capacity model
- maintenance/: Time-windowed maintenance state machine
- scheduling/: Allocation pass and status snapshots
- scenario/: JSON scenario runner (CLI)
"""

from .errors import (
    GridError,
    InvalidAmount,
    InvalidClass,
    UnknownSubstation,
    DuplicateSubstationID,
)
from .resources import DemandRequest, PriorityClass, RequestState
from .topology import Substation
from .maintenance import MaintenanceJob, MaintenanceState
from .scheduling import GridScheduler, StatusView, create_default_grid

__version__ = "1.0.0"

__all__ = [
    "GridError",
    "InvalidAmount",
    "InvalidClass",
    "UnknownSubstation",
    "DuplicateSubstationID",
    "DemandRequest",
    "PriorityClass",
    "RequestState",
    "Substation",
    "MaintenanceJob",
    "MaintenanceState",
    "GridScheduler",
    "StatusView",
    "create_default_grid",
]
