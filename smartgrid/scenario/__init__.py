"""
Scenario runner.

Replays a JSON scenario (substations, demand requests, maintenance
windows and scheduling pass times) against a GridScheduler and reports
the resulting grid status.
"""

from .models import ScenarioSpec
from .runner import ScenarioResult, run_scenario
