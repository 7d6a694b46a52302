"""
Demand Resources
================

Consumer power requests and their priority ordering:
- Residential, Commercial, Industrial priority classes
- Request lifecycle (created, queued, allocated, shed)
"""

from .request import DemandRequest, PriorityClass, RequestState, priority_key

__all__ = ["DemandRequest", "PriorityClass", "RequestState", "priority_key"]
