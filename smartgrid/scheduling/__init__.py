"""
Scheduling Layer
================

Greedy demand-response controller:
- Priority-ordered draining of pending requests
- First-fit allocation against substation headroom
- Shedding of demand that does not fit
- Maintenance-driven substation availability
"""

from .scheduler import GridScheduler, create_default_grid
from .status import (
    StatusView,
    SubstationStatus,
    PendingRequestStatus,
    MaintenanceStatus,
    PassSummary,
    RequestOutcome,
    MaintenanceTransition,
)

__all__ = [
    "GridScheduler",
    "create_default_grid",
    "StatusView",
    "SubstationStatus",
    "PendingRequestStatus",
    "MaintenanceStatus",
    "PassSummary",
    "RequestOutcome",
    "MaintenanceTransition",
]
