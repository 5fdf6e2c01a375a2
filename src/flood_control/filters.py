from __future__ import annotations

from typing import Iterable, Tuple

from .models import ProjectRecord


def filter_by_year(records: Iterable[ProjectRecord], low_year: int, high_year: int) -> Tuple[ProjectRecord, ...]:
    """
    Keep records whose funding year is present and within [low_year, high_year].
    Returns a new tuple; the input is not modified.
    """
    return tuple(
        r for r in records
        if r.funding_year is not None and low_year <= r.funding_year <= high_year
    )
