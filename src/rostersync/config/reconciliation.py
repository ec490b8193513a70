"""Reconciliation thresholds sourced from the environment."""

from __future__ import annotations

from rostersync.domain.reconciliation.policy import ReconciliationPolicy

from .env import optional_float, optional_int
from .errors import ConfigurationError


def get_reconciliation_policy() -> ReconciliationPolicy:
    """Return the default policy, applying ``ROSTERSYNC_MASS_REMOVAL_*`` overrides."""

    defaults = ReconciliationPolicy()
    ratio = optional_float("ROSTERSYNC_MASS_REMOVAL_RATIO")
    min_active = optional_int("ROSTERSYNC_MASS_REMOVAL_MIN_ACTIVE")

    if ratio is not None and not 0 < ratio <= 1:
        raise ConfigurationError("ROSTERSYNC_MASS_REMOVAL_RATIO must be within (0, 1]")
    if min_active is not None and min_active < 0:
        raise ConfigurationError("ROSTERSYNC_MASS_REMOVAL_MIN_ACTIVE must be non-negative")

    return ReconciliationPolicy(
        mass_removal_ratio=ratio if ratio is not None else defaults.mass_removal_ratio,
        mass_removal_min_active=(
            min_active if min_active is not None else defaults.mass_removal_min_active
        ),
    )
