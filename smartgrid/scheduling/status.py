"""
Status Snapshots
================

Read-only views of the grid: substation loading, pending demand and
maintenance jobs, plus the outcome summary of a scheduling pass.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd

from ..maintenance.job import MaintenanceState
from ..resources.request import PriorityClass, RequestState


@dataclass(frozen=True)
class SubstationStatus:
    """Loading of one substation."""
    substation_id: str
    used_mw: float
    capacity_mw: float
    online: bool

    @property
    def available_mw(self) -> float:
        return self.capacity_mw - self.used_mw if self.online else 0.0


@dataclass(frozen=True)
class PendingRequestStatus:
    """A request still waiting in the pending collection."""
    consumer_id: str
    megawatts: float
    priority_class: PriorityClass

    @property
    def priority(self) -> int:
        return self.priority_class.value


@dataclass(frozen=True)
class MaintenanceStatus:
    """A maintenance job and its current state."""
    substation_id: str
    state: MaintenanceState
    start: datetime
    end: datetime


@dataclass(frozen=True)
class StatusView:
    """
    Point-in-time snapshot of the grid.

    Pending requests are listed in the order the next pass would serve
    them. Building a view never changes scheduler state.
    """
    substations: Tuple[SubstationStatus, ...] = ()
    pending: Tuple[PendingRequestStatus, ...] = ()
    maintenance: Tuple[MaintenanceStatus, ...] = ()

    @property
    def total_capacity_mw(self) -> float:
        return float(np.sum([s.capacity_mw for s in self.substations]))

    @property
    def total_used_mw(self) -> float:
        return float(np.sum([s.used_mw for s in self.substations]))

    @property
    def total_available_mw(self) -> float:
        return float(np.sum([s.available_mw for s in self.substations]))

    @property
    def pending_mw(self) -> float:
        return float(np.sum([r.megawatts for r in self.pending]))

    @property
    def utilization(self) -> float:
        """Grid-wide used / capacity fraction (0 for an empty grid)."""
        capacity = self.total_capacity_mw
        return self.total_used_mw / capacity if capacity > 0 else 0.0

    def get_substation(self, substation_id: str) -> Optional[SubstationStatus]:
        """Get a substation row by id."""
        for sub in self.substations:
            if sub.substation_id == substation_id:
                return sub
        return None

    def to_dict(self) -> dict:
        """Convert to a JSON-ready dictionary."""
        return {
            "substations": [
                {
                    "substation_id": s.substation_id,
                    "used_mw": s.used_mw,
                    "capacity_mw": s.capacity_mw,
                    "available_mw": s.available_mw,
                    "online": s.online,
                }
                for s in self.substations
            ],
            "pending": [
                {
                    "consumer_id": r.consumer_id,
                    "megawatts": r.megawatts,
                    "priority_class": r.priority_class.name.lower(),
                    "priority": r.priority,
                }
                for r in self.pending
            ],
            "maintenance": [
                {
                    "substation_id": m.substation_id,
                    "state": m.state.value,
                    "start": m.start.isoformat(),
                    "end": m.end.isoformat(),
                }
                for m in self.maintenance
            ],
            "summary": {
                "total_capacity_mw": self.total_capacity_mw,
                "total_used_mw": self.total_used_mw,
                "total_available_mw": self.total_available_mw,
                "pending_mw": self.pending_mw,
                "utilization": self.utilization,
            },
        }

    def to_frame(self) -> pd.DataFrame:
        """Substation loading as a DataFrame indexed by substation id."""
        df = pd.DataFrame(
            {
                "used_mw": [s.used_mw for s in self.substations],
                "capacity_mw": [s.capacity_mw for s in self.substations],
                "available_mw": [s.available_mw for s in self.substations],
                "online": [s.online for s in self.substations],
            },
            index=pd.Index([s.substation_id for s in self.substations], name="substation_id"),
        )
        df["loading_pct"] = (df["used_mw"] / df["capacity_mw"]) * 100
        return df

    def render(self) -> str:
        """Plain-text status report."""
        lines = ["--- Grid Status ---", "Substations:"]
        for s in self.substations:
            flag = "ONLINE" if s.online else "OFFLINE"
            lines.append(f"  {s.substation_id}: {s.used_mw:g}/{s.capacity_mw:g} MW ({flag})")
        lines.append("Pending Demands:")
        for r in self.pending:
            lines.append(f"  {r.consumer_id} ({r.megawatts:g}MW, pr={r.priority})")
        lines.append("Maintenance Jobs:")
        for m in self.maintenance:
            lines.append(f"  {m.substation_id} [{m.state.name}]")
        return "\n".join(lines)


@dataclass(frozen=True)
class RequestOutcome:
    """Decision made for one request during a pass."""
    consumer_id: str
    priority_class: PriorityClass
    megawatts: float
    state: RequestState
    substation_id: Optional[str] = None


@dataclass(frozen=True)
class MaintenanceTransition:
    """A maintenance job state change observed during a pass."""
    substation_id: str
    from_state: MaintenanceState
    to_state: MaintenanceState


@dataclass(frozen=True)
class PassSummary:
    """Outcome of one scheduling pass, in service order."""
    now: datetime
    outcomes: Tuple[RequestOutcome, ...] = ()
    transitions: Tuple[MaintenanceTransition, ...] = ()
    offline_substations: Tuple[str, ...] = ()

    @property
    def allocated(self) -> List[RequestOutcome]:
        return [o for o in self.outcomes if o.state == RequestState.ALLOCATED]

    @property
    def shed(self) -> List[RequestOutcome]:
        return [o for o in self.outcomes if o.state == RequestState.SHED]

    @property
    def allocated_mw(self) -> float:
        return float(np.sum([o.megawatts for o in self.allocated]))

    @property
    def shed_mw(self) -> float:
        return float(np.sum([o.megawatts for o in self.shed]))

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "now": self.now.isoformat(),
            "allocated": [
                {"consumer_id": o.consumer_id, "megawatts": o.megawatts, "substation_id": o.substation_id}
                for o in self.allocated
            ],
            "shed": [
                {"consumer_id": o.consumer_id, "megawatts": o.megawatts}
                for o in self.shed
            ],
            "allocated_mw": self.allocated_mw,
            "shed_mw": self.shed_mw,
            "maintenance_transitions": [
                {
                    "substation_id": t.substation_id,
                    "from": t.from_state.value,
                    "to": t.to_state.value,
                }
                for t in self.transitions
            ],
            "offline_substations": list(self.offline_substations),
        }
