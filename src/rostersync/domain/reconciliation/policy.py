"""Thresholds and windows that govern classification and commit."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta


@dataclass(frozen=True, slots=True, kw_only=True)
class ReconciliationPolicy:
    """Tunable limits for a reconciliation run.

    ``mass_removal_ratio`` and ``mass_removal_min_active`` drive the sanity guard:
    a classification aborts when the removal rate reaches the ratio while the region
    holds more than ``mass_removal_min_active`` active members.
    """

    mass_removal_ratio: float = 0.95
    mass_removal_min_active: int = 10
    auto_return_window: timedelta = timedelta(hours=24)
    anomaly_preview_limit: int = 5
    auto_resolver: str = "system:auto-return"

    def removal_is_implausible(self, *, removed: int, active: int) -> bool:
        if active <= self.mass_removal_min_active:
            return False
        return removed / active >= self.mass_removal_ratio
