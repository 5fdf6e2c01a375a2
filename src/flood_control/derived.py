"""
Per-project derived metrics.

Both are pure functions of immutable record fields: recomputing them always
yields the same value, and a missing input propagates as a missing output.
"""
from __future__ import annotations

from datetime import date
from typing import Optional


def cost_savings(approved_budget: float, contract_cost: float) -> float:
    """Approved budget minus contract cost. Negative means a cost overrun."""
    return approved_budget - contract_cost


def completion_delay_days(start: Optional[date], completion: Optional[date]) -> Optional[int]:
    """Whole days from start to actual completion, or None if either date is missing."""
    if start is None or completion is None:
        return None
    return (completion - start).days
