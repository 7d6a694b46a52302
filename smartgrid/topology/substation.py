"""
Substation Model
================

Models a grid substation with a MW capacity rating.
Enforces 0 <= used <= capacity and reports zero headroom while offline.
"""

from dataclasses import dataclass

from ..errors import InvalidAmount
from ..utils.validation import is_finite_number, is_number


@dataclass
class Substation:
    """
    Grid substation serving allocated demand.

    Attributes:
        substation_id: Substation identifier (unique within the grid)
        capacity_mw: Nameplate capacity (MW)
        used_mw: Currently allocated load (MW)
        online: False while a maintenance window is in progress
    """
    substation_id: str
    capacity_mw: float
    used_mw: float = 0.0
    online: bool = True

    def __post_init__(self):
        """Validate substation parameters."""
        if not self.substation_id:
            raise ValueError("substation_id must be non-empty")
        if not is_finite_number(self.capacity_mw) or self.capacity_mw <= 0:
            raise InvalidAmount(f"capacity_mw must be positive, got {self.capacity_mw}")
        if not (0 <= self.used_mw <= self.capacity_mw):
            raise ValueError("used_mw must be between 0 and capacity_mw")
        self.capacity_mw = float(self.capacity_mw)
        self.used_mw = float(self.used_mw)

    def available(self) -> float:
        """Headroom (MW); zero while offline."""
        if not self.online:
            return 0.0
        return self.capacity_mw - self.used_mw

    def try_allocate(self, amount_mw: float) -> bool:
        """
        Allocate load if it fits in the available headroom.

        Args:
            amount_mw: Load to allocate (MW)

        Returns:
            True if allocated, False if it does not fit (nothing changes)
        """
        # NaN fails both comparisons
        if not is_number(amount_mw) or not (0 < amount_mw <= self.available()):
            return False
        # Clamp against float drift so used never exceeds capacity
        self.used_mw = min(self.capacity_mw, self.used_mw + amount_mw)
        return True

    def release(self, amount_mw: float) -> None:
        """Return load to the substation; usage is floored at zero."""
        self.used_mw = max(0.0, self.used_mw - amount_mw)
