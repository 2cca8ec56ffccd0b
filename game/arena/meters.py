"""
Resource meters (health, energy) with clamped mutation
"""

from __future__ import annotations

from typing import Optional

from .utils import clamp

LOW_BAND = 0.3
MID_BAND = 0.6


class ResourceMeter:
    """A value that always stays within [0, maximum]"""

    def __init__(self, maximum: float, value: Optional[float] = None):
        self.maximum = float(maximum)
        self.value = clamp(self.maximum if value is None else float(value), 0.0, self.maximum)

    def adjust(self, delta: float) -> float:
        """Apply delta, clamp, and return the new value"""
        self.value = clamp(self.value + delta, 0.0, self.maximum)
        return self.value

    def refill(self) -> float:
        self.value = self.maximum
        return self.value

    def percentage(self) -> float:
        return self.value / self.maximum

    def is_empty(self) -> bool:
        return self.value <= 0.0

    def is_full(self) -> bool:
        return self.value >= self.maximum

    def at_least(self, amount: float) -> bool:
        return self.value >= amount

    def band(self) -> str:
        """HUD colour band: 'low' under 30%, 'mid' under 60%, else 'high'"""
        pct = self.percentage()
        if pct < LOW_BAND:
            return "low"
        if pct < MID_BAND:
            return "mid"
        return "high"

    def __repr__(self) -> str:
        return f"ResourceMeter({self.value:.1f}/{self.maximum:.0f})"
