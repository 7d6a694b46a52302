"""
Maintenance Job
===============

A maintenance window [start, end) against one substation. The job state
is driven only by comparing a supplied instant with the window bounds.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Tuple


class MaintenanceState(Enum):
    """Maintenance lifecycle states."""
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    DONE = "done"


@dataclass
class MaintenanceJob:
    """
    Scheduled maintenance for a substation.

    The job refers to its substation by id only; the scheduler owns
    the substations.

    Attributes:
        substation_id: Target substation identifier
        start: Window start (inclusive)
        end: Window end (exclusive)
        state: Lifecycle state
    """
    substation_id: str
    start: datetime
    end: datetime
    state: MaintenanceState = MaintenanceState.SCHEDULED

    def __post_init__(self):
        """Validate window bounds."""
        if self.end <= self.start:
            raise ValueError("maintenance end must be after start")

    @property
    def in_progress(self) -> bool:
        return self.state == MaintenanceState.IN_PROGRESS

    def advance(self, now: datetime) -> List[Tuple[MaintenanceState, MaintenanceState]]:
        """
        Move the job forward to the state due at ``now``.

        Both checks run in one call, so a window that fully elapsed since
        the last call passes through IN_PROGRESS to DONE. Calling again
        with the same instant changes nothing.

        Returns:
            List of (from, to) transitions taken, empty if none
        """
        transitions = []
        if self.state == MaintenanceState.SCHEDULED and now >= self.start:
            transitions.append((self.state, MaintenanceState.IN_PROGRESS))
            self.state = MaintenanceState.IN_PROGRESS
        if self.state == MaintenanceState.IN_PROGRESS and now >= self.end:
            transitions.append((self.state, MaintenanceState.DONE))
            self.state = MaintenanceState.DONE
        return transitions
