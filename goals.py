"""Progress toward the monthly income goal."""

from __future__ import annotations

import math
from typing import Optional

import config
from exceptions import InvalidConfiguration


def resolve_goal_target(
    stored: Optional[float],
    minimum: Optional[float] = config.MIN_GOAL_TARGET,
    default: float = config.DEFAULT_GOAL_TARGET,
) -> float:
    """
    Pick the target to track against.

    Falls back to ``default`` when nothing is stored, the value is not a
    number, or it is below ``minimum``.  A falsy ``minimum`` only rejects
    non-positive values.
    """
    try:
        value = float(stored)
    except (TypeError, ValueError):
        return default
    if math.isnan(value) or value <= 0:
        return default
    if minimum and value < minimum:
        return default
    return value


def _check_target(target) -> float:
    if target is None:
        raise InvalidConfiguration("Goal target is not set")
    target = float(target)
    if target <= 0 or math.isnan(target):
        raise InvalidConfiguration(f"Goal target must be positive, got {target}")
    return target


def goal_progress(projected_income: float, target: float) -> int:
    """Percentage of the target covered, clamped to [0, 100] and rounded half up."""
    target = _check_target(target)
    pct = min(max(projected_income / target * 100, 0), 100)
    return int(math.floor(pct + 0.5))


def shortfall(target: float, projected_income: float) -> float:
    target = _check_target(target)
    return max(target - projected_income, 0.0)


def clients_needed(missing: float, avg_fee: float = config.AVG_FEE_PER_CLIENT) -> int:
    """Rough count of extra clients at ``avg_fee`` each to close ``missing``."""
    if missing <= 0:
        return 0
    if not avg_fee or avg_fee <= 0:
        raise InvalidConfiguration(f"Average fee per client must be positive, got {avg_fee}")
    return math.ceil(missing / avg_fee)


def track_goal(projected_income: float, target: float, avg_fee: float = config.AVG_FEE_PER_CLIENT) -> dict:
    missing = shortfall(target, projected_income)
    return {
        "target": float(target),
        "progress": goal_progress(projected_income, target),
        "missing": missing,
        "clients_needed": clients_needed(missing, avg_fee),
    }
