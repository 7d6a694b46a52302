"""
Demand Request Model
====================

A consumer's request for power, tagged with a priority class.
Requests are ordered by class (Industrial first) and then by age.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple, Union
import itertools

from ..errors import InvalidAmount, InvalidClass
from ..utils.validation import is_finite_number, is_number


class PriorityClass(Enum):
    """Consumer priority classes; the value is the priority weight."""
    RESIDENTIAL = 1
    COMMERCIAL = 2
    INDUSTRIAL = 3

    @property
    def token(self) -> str:
        """Short command token ("res", "com", "ind")."""
        return _TOKENS_BY_CLASS[self]

    @classmethod
    def parse(cls, value: Union["PriorityClass", int, str]) -> "PriorityClass":
        """
        Resolve a priority class from a member, weight, name or token.

        Raises:
            InvalidClass: if the value names no known class
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            for member in cls:
                if member.value == value:
                    return member
        elif isinstance(value, str):
            key = value.strip().lower()
            if key in _CLASSES_BY_TOKEN:
                return _CLASSES_BY_TOKEN[key]
            for member in cls:
                if member.name.lower() == key:
                    return member
        raise InvalidClass(f"Unknown priority class: {value!r}")


_TOKENS_BY_CLASS = {
    PriorityClass.RESIDENTIAL: "res",
    PriorityClass.COMMERCIAL: "com",
    PriorityClass.INDUSTRIAL: "ind",
}
_CLASSES_BY_TOKEN = {token: cls for cls, token in _TOKENS_BY_CLASS.items()}


class RequestState(Enum):
    """Request lifecycle states."""
    CREATED = "created"
    QUEUED = "queued"
    ALLOCATED = "allocated"
    SHED = "shed"


# Allowed forward moves; anything else is a programming error
_TRANSITIONS = {
    RequestState.CREATED: {RequestState.QUEUED},
    RequestState.QUEUED: {RequestState.ALLOCATED, RequestState.SHED},
    RequestState.ALLOCATED: set(),
    RequestState.SHED: set(),
}

# Breaks ties between requests created at the same instant
_sequence = itertools.count()


@dataclass
class DemandRequest:
    """
    Power demand from a single consumer.

    Identity fields are fixed at creation; only the lifecycle state
    (and the outcome fields set with it) change afterwards.

    Attributes:
        consumer_id: Consumer identifier
        priority_class: Residential, Commercial or Industrial
        megawatts: Requested power (MW), strictly positive
        created_at: Instant the request was created
        state: Lifecycle state
        substation_id: Substation serving the request once allocated
        decided_at: Instant of the pass that allocated or shed it
        sequence: Creation order, used as the final ordering tie-break
    """
    consumer_id: str
    priority_class: PriorityClass
    megawatts: float
    created_at: datetime
    state: RequestState = RequestState.CREATED
    substation_id: Optional[str] = None
    decided_at: Optional[datetime] = None
    sequence: int = field(default_factory=lambda: next(_sequence))

    def __post_init__(self):
        """Validate request parameters."""
        self.priority_class = PriorityClass.parse(self.priority_class)
        if not is_number(self.megawatts):
            raise InvalidAmount(f"megawatts must be a number, got {self.megawatts!r}")
        if not is_finite_number(self.megawatts) or self.megawatts <= 0:
            raise InvalidAmount(f"megawatts must be positive, got {self.megawatts}")
        self.megawatts = float(self.megawatts)

    @property
    def priority(self) -> int:
        """Priority weight: higher is more critical."""
        return self.priority_class.value

    def _transition(self, new_state: RequestState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise RuntimeError(
                f"Illegal request transition {self.state.value} -> {new_state.value} "
                f"for {self.consumer_id}"
            )
        self.state = new_state

    def mark_queued(self) -> None:
        """Accept the request into the pending collection."""
        self._transition(RequestState.QUEUED)

    def mark_allocated(self, substation_id: str, now: datetime) -> None:
        """Record a successful allocation to a substation."""
        self._transition(RequestState.ALLOCATED)
        self.substation_id = substation_id
        self.decided_at = now

    def mark_shed(self, now: datetime) -> None:
        """Record that no substation could serve the request."""
        self._transition(RequestState.SHED)
        self.decided_at = now

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "consumer_id": self.consumer_id,
            "priority_class": self.priority_class.name.lower(),
            "priority": self.priority,
            "megawatts": self.megawatts,
            "created_at": self.created_at.isoformat(),
            "state": self.state.value,
            "substation_id": self.substation_id,
            "decided_at": self.decided_at.isoformat() if self.decided_at else None,
        }


def priority_key(request: DemandRequest) -> Tuple[int, datetime, int]:
    """
    Sort key for pending requests.

    Higher class first, then earlier creation time, then creation order,
    so the ordering is total and identical for every sort in a pass.
    """
    return (-request.priority, request.created_at, request.sequence)
