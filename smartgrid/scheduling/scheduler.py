"""
Grid Scheduler
==============

Owns the substations, pending requests and maintenance jobs, and runs
the scheduling pass that allocates or sheds demand.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Union
import threading

from loguru import logger

from ..config import settings
from ..errors import DuplicateSubstationID, InvalidAmount, UnknownSubstation
from ..maintenance.job import MaintenanceJob
from ..resources.request import DemandRequest, PriorityClass, RequestState, priority_key
from ..topology.substation import Substation
from ..utils.validation import is_finite_number
from .status import (
    MaintenanceStatus,
    MaintenanceTransition,
    PassSummary,
    PendingRequestStatus,
    RequestOutcome,
    StatusView,
    SubstationStatus,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(instant: datetime) -> datetime:
    """Naive instants are taken to be UTC; aware ones are converted to UTC."""
    if instant.tzinfo is None or instant.utcoffset() is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


class GridScheduler:
    """
    Demand-response controller for a fixed set of substations.

    All state is owned here and mutated only through the public
    operations, each of which runs under a single lock.

    Each scheduling pass:
    1. Advances every maintenance job and recomputes substation online flags
    2. Serves pending requests in priority order, first-fit over substations
    3. Sheds requests no substation can hold; shed requests are not retried
    """

    def __init__(
        self,
        maintenance_window: Optional[timedelta] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize an empty grid.

        Args:
            maintenance_window: Length of every maintenance window
                (default from settings, 3600 s)
            clock: Source of "now" for request timestamps and maintenance
                scheduling (default: UTC wall clock)
        """
        if maintenance_window is None:
            maintenance_window = timedelta(seconds=settings.maintenance_window_seconds)
        if maintenance_window <= timedelta(0):
            raise ValueError("maintenance_window must be positive")

        self.maintenance_window = maintenance_window
        self._clock = clock or _utcnow
        self._lock = threading.RLock()

        self._substations: List[Substation] = []
        self._pending: List[DemandRequest] = []
        self._maintenance: List[MaintenanceJob] = []
        self._last_pass: Optional[PassSummary] = None

    # ------------------------------------------------------------------
    # Setup and submission
    # ------------------------------------------------------------------

    def add_substation(self, substation_id: str, capacity_mw: float) -> None:
        """
        Register a substation. Iteration order for allocation is the
        order in which substations are added.

        Raises:
            DuplicateSubstationID: if the id is already registered
            InvalidAmount: if capacity is not positive
        """
        with self._lock:
            if self._find_substation(substation_id) is not None:
                logger.warning(f"Rejected duplicate substation id {substation_id}")
                raise DuplicateSubstationID(f"Substation {substation_id} already exists")
            try:
                substation = Substation(substation_id, capacity_mw)
            except InvalidAmount:
                logger.warning(f"Rejected substation {substation_id}: capacity {capacity_mw}")
                raise
            self._substations.append(substation)
            logger.info(f"Added substation {substation_id} ({substation.capacity_mw:g} MW)")

    def submit_request(
        self,
        consumer_id: str,
        priority_class: Union[PriorityClass, int, str],
        megawatts: float,
    ) -> DemandRequest:
        """
        Accept a demand request into the pending collection.

        Args:
            consumer_id: Consumer identifier
            priority_class: Class member, weight, name or res/com/ind token
            megawatts: Requested power (MW)

        Returns:
            The queued request; its state reflects later pass outcomes

        Raises:
            InvalidAmount: if megawatts is not a positive finite number
            InvalidClass: if the priority class is not recognized
        """
        with self._lock:
            if not consumer_id:
                raise ValueError("consumer_id must be non-empty")
            try:
                request = DemandRequest(
                    consumer_id=consumer_id,
                    priority_class=priority_class,
                    megawatts=megawatts,
                    created_at=self._now(),
                )
            except ValueError as e:
                logger.warning(f"Rejected demand from {consumer_id}: {e}")
                raise
            request.mark_queued()
            self._pending.append(request)
            logger.info(
                f"Demand recorded for {consumer_id}: {request.megawatts:g} MW "
                f"({request.priority_class.name.lower()})"
            )
            return request

    def schedule_maintenance(self, substation_id: str, start_delay_seconds: int) -> MaintenanceJob:
        """
        Schedule a maintenance window starting ``start_delay_seconds``
        from now and lasting ``maintenance_window``.

        Raises:
            UnknownSubstation: if no substation has the given id
            ValueError: if the delay is negative or not an integer
        """
        with self._lock:
            if isinstance(start_delay_seconds, bool) or not isinstance(start_delay_seconds, int):
                raise ValueError("start_delay_seconds must be an integer")
            if start_delay_seconds < 0:
                raise ValueError("start_delay_seconds must be non-negative")
            if self._find_substation(substation_id) is None:
                logger.warning(f"Rejected maintenance for unknown substation {substation_id}")
                raise UnknownSubstation(f"No substation with id {substation_id}")

            start = self._now() + timedelta(seconds=start_delay_seconds)
            job = MaintenanceJob(substation_id, start, start + self.maintenance_window)
            self._maintenance.append(job)
            logger.info(
                f"Maintenance scheduled for {substation_id} starting in {start_delay_seconds} seconds"
            )
            return job

    def release(self, substation_id: str, megawatts: float) -> None:
        """
        Return load to a substation (usage is floored at zero).

        Raises:
            UnknownSubstation: if no substation has the given id
            InvalidAmount: if megawatts is negative or not finite
        """
        with self._lock:
            substation = self._find_substation(substation_id)
            if substation is None:
                raise UnknownSubstation(f"No substation with id {substation_id}")
            if not is_finite_number(megawatts) or megawatts < 0:
                raise InvalidAmount(f"release amount must be non-negative, got {megawatts}")
            substation.release(megawatts)
            logger.debug(f"Released {megawatts:g} MW on {substation_id} -> {substation.used_mw:g} MW used")

    # ------------------------------------------------------------------
    # Scheduling pass
    # ------------------------------------------------------------------

    def run_scheduling_pass(self, now: Optional[datetime] = None) -> None:
        """
        Run one scheduling pass at instant ``now`` (default: clock).
        Naive instants are treated as UTC.

        Never raises for lack of capacity; shedding is the outcome.
        The summary is available afterwards via ``last_pass``.
        """
        with self._lock:
            now = self._now() if now is None else _as_utc(now)

            transitions = self._advance_maintenance(now)
            offline = self._refresh_online_flags()

            # Drain in priority order
            batch = sorted(self._pending, key=priority_key)
            self._pending = []
            outcomes = []

            for request in batch:
                substation = self._first_fit(request.megawatts)
                if substation is not None:
                    request.mark_allocated(substation.substation_id, now)
                    logger.debug(
                        f"Allocated {request.consumer_id} ({request.megawatts:g} MW, "
                        f"pr={request.priority}) to {substation.substation_id}"
                    )
                else:
                    request.mark_shed(now)
                    logger.warning(
                        f"Shed {request.consumer_id} ({request.megawatts:g} MW, "
                        f"pr={request.priority}): no substation with enough capacity"
                    )
                outcomes.append(
                    RequestOutcome(
                        consumer_id=request.consumer_id,
                        priority_class=request.priority_class,
                        megawatts=request.megawatts,
                        state=request.state,
                        substation_id=request.substation_id,
                    )
                )

            # Re-queue anything still waiting; terminal requests leave the queue
            self._pending = [r for r in batch if r.state == RequestState.QUEUED]

            self._last_pass = PassSummary(
                now=now,
                outcomes=tuple(outcomes),
                transitions=tuple(transitions),
                offline_substations=tuple(offline),
            )
            logger.info(
                f"Load balancing complete: {len(self._last_pass.allocated)} allocated, "
                f"{len(self._last_pass.shed)} shed"
            )

    def _advance_maintenance(self, now: datetime) -> List[MaintenanceTransition]:
        transitions = []
        for job in self._maintenance:
            for from_state, to_state in job.advance(now):
                logger.debug(
                    f"Maintenance on {job.substation_id}: {from_state.value} -> {to_state.value}"
                )
                transitions.append(MaintenanceTransition(job.substation_id, from_state, to_state))
        return transitions

    def _refresh_online_flags(self) -> List[str]:
        """
        Recompute every online flag from scratch: a substation is offline
        iff at least one of its jobs is in progress.

        Returns:
            Ids of offline substations, in substation order
        """
        busy = {job.substation_id for job in self._maintenance if job.in_progress}
        offline = []
        for substation in self._substations:
            online = substation.substation_id not in busy
            if substation.online and not online:
                logger.warning(f"Substation {substation.substation_id} offline for maintenance")
            elif online and not substation.online:
                logger.info(f"Substation {substation.substation_id} back online")
            substation.online = online
            if not online:
                offline.append(substation.substation_id)
        return offline

    def _first_fit(self, megawatts: float) -> Optional[Substation]:
        for substation in self._substations:
            if substation.try_allocate(megawatts):
                return substation
        return None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def snapshot_status(self) -> StatusView:
        """Read-only view of substations, pending demand and maintenance."""
        with self._lock:
            return StatusView(
                substations=tuple(
                    SubstationStatus(s.substation_id, s.used_mw, s.capacity_mw, s.online)
                    for s in self._substations
                ),
                pending=tuple(
                    PendingRequestStatus(r.consumer_id, r.megawatts, r.priority_class)
                    for r in sorted(self._pending, key=priority_key)
                ),
                maintenance=tuple(
                    MaintenanceStatus(m.substation_id, m.state, m.start, m.end)
                    for m in self._maintenance
                ),
            )

    @property
    def last_pass(self) -> Optional[PassSummary]:
        """Summary of the most recent scheduling pass, if any."""
        with self._lock:
            return self._last_pass

    @property
    def substation_ids(self) -> List[str]:
        with self._lock:
            return [s.substation_id for s in self._substations]

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def _now(self) -> datetime:
        return _as_utc(self._clock())

    def _find_substation(self, substation_id: str) -> Optional[Substation]:
        for substation in self._substations:
            if substation.substation_id == substation_id:
                return substation
        return None


def create_default_grid(
    substations: Optional[Dict[str, float]] = None,
    **kwargs,
) -> GridScheduler:
    """
    Create a scheduler pre-populated with substations.

    Args:
        substations: Dict of {substation_id: capacity_mw}
            (default: settings.default_substations)
        **kwargs: Passed to GridScheduler

    Returns:
        Configured GridScheduler
    """
    grid = GridScheduler(**kwargs)
    if substations is None:
        substations = settings.default_substations
    for substation_id, capacity_mw in substations.items():
        grid.add_substation(substation_id, capacity_mw)
    return grid
