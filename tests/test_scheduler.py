from datetime import datetime, timedelta
import threading

import pytest

from smartgrid.errors import DuplicateSubstationID, InvalidAmount, InvalidClass, UnknownSubstation
from smartgrid.maintenance.job import MaintenanceState
from smartgrid.resources.request import PriorityClass, RequestState
from smartgrid.scheduling.scheduler import GridScheduler, create_default_grid


def test_example_scenario_both_allocated(grid, clock) -> None:
    c1 = grid.submit_request("C1", PriorityClass.INDUSTRIAL, 45.0)
    c2 = grid.submit_request("C2", PriorityClass.RESIDENTIAL, 10.0)

    grid.run_scheduling_pass(clock())

    assert c1.state == RequestState.ALLOCATED
    assert c1.substation_id == "S01"
    assert c2.state == RequestState.ALLOCATED
    assert c2.substation_id == "S02"
    assert grid.last_pass.shed == []
    assert grid.pending_count == 0


def test_shed_when_no_substation_fits(clock) -> None:
    grid = GridScheduler(clock=clock)
    grid.add_substation("S01", 10.0)
    c3 = grid.submit_request("C3", "com", 15.0)

    grid.run_scheduling_pass(clock())

    assert c3.state == RequestState.SHED
    assert c3.substation_id is None
    assert grid.snapshot_status().get_substation("S01").used_mw == 0.0


def test_priority_order_when_capacity_binds(clock) -> None:
    grid = GridScheduler(clock=clock)
    grid.add_substation("S01", 20.0)
    res = grid.submit_request("R", "res", 10.0)
    clock.tick(1)
    com = grid.submit_request("C", "com", 10.0)
    clock.tick(1)
    ind = grid.submit_request("I", "ind", 10.0)

    grid.run_scheduling_pass(clock())

    assert ind.state == RequestState.ALLOCATED
    assert com.state == RequestState.ALLOCATED
    assert res.state == RequestState.SHED
    assert [o.consumer_id for o in grid.last_pass.outcomes] == ["I", "C", "R"]


def test_earlier_request_wins_tie(clock) -> None:
    grid = GridScheduler(clock=clock)
    grid.add_substation("S01", 10.0)
    first = grid.submit_request("I1", "ind", 10.0)
    clock.tick(1)
    second = grid.submit_request("I2", "ind", 10.0)

    grid.run_scheduling_pass(clock())

    assert first.state == RequestState.ALLOCATED
    assert second.state == RequestState.SHED


def test_first_fit_not_best_fit(clock) -> None:
    grid = GridScheduler(clock=clock)
    grid.add_substation("BIG", 100.0)
    grid.add_substation("SMALL", 10.0)
    req = grid.submit_request("C1", "res", 10.0)

    grid.run_scheduling_pass(clock())

    assert req.substation_id == "BIG"


def test_offline_substation_sheds_request(grid, clock) -> None:
    grid.schedule_maintenance("S02", 0)
    # Fits only S02's capacity
    big = grid.submit_request("C1", "ind", 45.0)
    req = grid.submit_request("C2", "com", 30.0)

    grid.run_scheduling_pass(clock())

    status = grid.snapshot_status()
    assert big.substation_id == "S01"
    assert req.state == RequestState.SHED
    assert status.get_substation("S02").online is False
    assert status.get_substation("S02").used_mw == 0.0
    assert grid.last_pass.offline_substations == ("S02",)


def test_substation_back_online_after_window(grid, clock) -> None:
    grid.schedule_maintenance("S02", 0)
    grid.run_scheduling_pass(clock())
    assert not grid.snapshot_status().get_substation("S02").online

    grid.run_scheduling_pass(clock.tick(3600))

    status = grid.snapshot_status()
    assert status.get_substation("S02").online
    assert status.maintenance[0].state == MaintenanceState.DONE


def test_overlapping_jobs_keep_substation_offline(grid, clock) -> None:
    grid.schedule_maintenance("S02", 0)
    clock.tick(1800)
    grid.schedule_maintenance("S02", 0)

    # First window done, second still in progress
    grid.run_scheduling_pass(clock.tick(1800))

    status = grid.snapshot_status()
    assert [m.state for m in status.maintenance] == [
        MaintenanceState.DONE,
        MaintenanceState.IN_PROGRESS,
    ]
    assert status.get_substation("S02").online is False


def test_maintenance_window_timing(grid, clock) -> None:
    job = grid.schedule_maintenance("S01", 300)

    assert job.start == clock() + timedelta(seconds=300)
    assert job.end == job.start + timedelta(seconds=3600)

    grid.run_scheduling_pass(clock.tick(299))
    assert job.state == MaintenanceState.SCHEDULED
    grid.run_scheduling_pass(clock.tick(1))
    assert job.state == MaintenanceState.IN_PROGRESS


def test_custom_maintenance_window(clock) -> None:
    grid = GridScheduler(maintenance_window=timedelta(minutes=10), clock=clock)
    grid.add_substation("S01", 10.0)
    job = grid.schedule_maintenance("S01", 0)
    assert job.end - job.start == timedelta(minutes=10)


def test_shed_requests_are_not_retried(grid, clock) -> None:
    grid.schedule_maintenance("S01", 0)
    grid.schedule_maintenance("S02", 0)
    req = grid.submit_request("C1", "ind", 5.0)
    grid.run_scheduling_pass(clock())
    assert req.state == RequestState.SHED

    grid.run_scheduling_pass(clock.tick(7200))

    assert req.state == RequestState.SHED
    assert grid.last_pass.outcomes == ()
    assert grid.snapshot_status().total_used_mw == 0.0


def test_allocated_load_persists_across_passes(grid, clock) -> None:
    grid.submit_request("C1", "ind", 45.0)
    grid.run_scheduling_pass(clock())
    grid.submit_request("C2", "ind", 10.0)
    grid.run_scheduling_pass(clock.tick(60))

    status = grid.snapshot_status()
    assert status.get_substation("S01").used_mw == pytest.approx(45.0)
    assert status.get_substation("S02").used_mw == pytest.approx(10.0)


def test_release_frees_capacity(grid, clock) -> None:
    grid.submit_request("C1", "ind", 45.0)
    grid.run_scheduling_pass(clock())

    grid.release("S01", 45.0)
    req = grid.submit_request("C2", "res", 48.0)
    grid.run_scheduling_pass(clock())

    assert req.substation_id == "S01"


def test_release_unknown_substation(grid) -> None:
    with pytest.raises(UnknownSubstation):
        grid.release("S99", 1.0)


def test_duplicate_substation(grid) -> None:
    with pytest.raises(DuplicateSubstationID):
        grid.add_substation("S01", 10.0)
    assert grid.substation_ids == ["S01", "S02"]


def test_add_substation_rejects_bad_capacity(grid) -> None:
    with pytest.raises(InvalidAmount):
        grid.add_substation("S03", 0.0)


@pytest.mark.parametrize("mw", [0, -1.0])
def test_submit_rejects_non_positive_amount(grid, mw) -> None:
    with pytest.raises(InvalidAmount):
        grid.submit_request("C1", "res", mw)
    assert grid.pending_count == 0


def test_submit_rejects_unknown_class(grid) -> None:
    with pytest.raises(InvalidClass):
        grid.submit_request("C1", "gov", 5.0)
    assert grid.pending_count == 0


def test_schedule_maintenance_unknown_substation(grid) -> None:
    with pytest.raises(UnknownSubstation):
        grid.schedule_maintenance("S99", 0)


def test_schedule_maintenance_negative_delay(grid) -> None:
    with pytest.raises(ValueError):
        grid.schedule_maintenance("S01", -1)


def test_pass_without_now_uses_clock(grid, clock) -> None:
    grid.run_scheduling_pass()
    assert grid.last_pass.now == clock()


def test_create_default_grid(clock) -> None:
    grid = create_default_grid(clock=clock)
    assert grid.substation_ids == ["S01", "S02", "S03"]
    assert grid.snapshot_status().total_capacity_mw == pytest.approx(150.0)


def test_concurrent_submissions_are_all_served(clock) -> None:
    grid = GridScheduler(clock=clock)
    grid.add_substation("S01", 1000.0)

    def submit(prefix: str) -> None:
        for i in range(50):
            grid.submit_request(f"{prefix}{i}", "res", 1.0)

    threads = [threading.Thread(target=submit, args=(p,)) for p in "ABCD"]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    grid.run_scheduling_pass(clock())

    assert len(grid.last_pass.allocated) == 200
    assert grid.snapshot_status().get_substation("S01").used_mw == pytest.approx(200.0)


def test_naive_now_is_treated_as_utc(grid, clock) -> None:
    job = grid.schedule_maintenance("S02", 0)
    req = grid.submit_request("C1", "com", 45.0)

    grid.run_scheduling_pass(clock().replace(tzinfo=None))

    assert job.state == MaintenanceState.IN_PROGRESS
    assert req.substation_id == "S01"
    assert grid.last_pass.now == clock()

    grid.run_scheduling_pass(datetime.now())


def test_naive_clock_mixes_with_aware_now(clock) -> None:
    naive = clock().replace(tzinfo=None)
    grid = GridScheduler(clock=lambda: naive)
    grid.add_substation("S01", 10.0)
    job = grid.schedule_maintenance("S01", 60)

    grid.run_scheduling_pass(clock() + timedelta(seconds=60))

    assert job.state == MaintenanceState.IN_PROGRESS
    assert grid.snapshot_status().get_substation("S01").online is False


@pytest.mark.parametrize("mw", ["5", None, float("nan"), -1.0])
def test_release_rejects_invalid_amount(grid, mw) -> None:
    with pytest.raises(InvalidAmount):
        grid.release("S01", mw)


def test_add_substation_rejects_non_numeric_capacity(grid) -> None:
    with pytest.raises(InvalidAmount):
        grid.add_substation("S03", "60")
