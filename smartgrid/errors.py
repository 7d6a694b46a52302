"""
Grid Errors
===========

Validation failures raised at the scheduler boundary. Shedding and
maintenance-driven unavailability are normal outcomes, not errors.
"""


class GridError(Exception):
    """Base class for all grid validation failures."""


class InvalidAmount(GridError, ValueError):
    """Requested or rated megawatts are not a positive, finite number."""


class InvalidClass(GridError, ValueError):
    """Priority class is not one of Residential, Commercial, Industrial."""


class UnknownSubstation(GridError, LookupError):
    """No substation with the given identifier exists."""


class DuplicateSubstationID(GridError, ValueError):
    """A substation with the given identifier is already registered."""
