from __future__ import annotations

import math
import re
from datetime import date, datetime
from typing import Any, Iterable, List, Optional, Sequence

import pandas as pd

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_INT_RE = re.compile(r"^[+-]?\d+$")


def normalize_text(value: object) -> str:
    """
    Normalize free text from the dataset for consistent grouping.
    Collapses whitespace (including NBSP) and strips zero-width markers.
    """
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    s = str(value)
    s = s.replace("\u200b", "").replace("\ufeff", "")
    s = s.replace("\u00a0", " ")
    s = re.sub(r"\s+", " ", s).strip()
    return s


def text_or_default(value: object, default: str) -> str:
    s = normalize_text(value)
    return s if s else default


def round_half_up(value: Any, ndigits: int = 0) -> Optional[float]:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return None
    try:
        x = float(value)
    except (TypeError, ValueError):
        return None
    factor = 10 ** ndigits
    return math.floor(x * factor + 0.5) / factor


def parse_amount(value: object) -> Optional[float]:
    """
    Parse a monetary amount like "1,234,567.89".
    Returns None for blank, non-numeric or non-finite text.
    """
    s = normalize_text(value).replace(",", "")
    if not s:
        return None
    try:
        x = float(s)
    except ValueError:
        return None
    if not math.isfinite(x):
        return None
    return x


def parse_iso_date(value: object, fmt: str = "%Y-%m-%d") -> Optional[date]:
    # Only the zero-padded YYYY-MM-DD layout is accepted; strptime alone
    # would also take "2021-1-5".
    s = normalize_text(value)
    if not s or not _ISO_DATE_RE.match(s):
        return None
    try:
        return datetime.strptime(s, fmt).date()
    except ValueError:
        return None


def parse_year(value: object) -> Optional[int]:
    s = normalize_text(value)
    if not s or not _INT_RE.match(s):
        return None
    return int(s)


# =============================================================================
# Statistics
# =============================================================================

def median(values: Iterable[float]) -> float:
    """Median of values; 0.0 for an empty input."""
    ordered: List[float] = sorted(values)
    n = len(ordered)
    if n == 0:
        return 0.0
    mid = n // 2
    if n % 2 == 1:
        return float(ordered[mid])
    return (ordered[mid - 1] + ordered[mid]) / 2.0


def mean(values: Sequence[float]) -> Optional[float]:
    """Arithmetic mean; None for an empty input (undefined, never NaN)."""
    if len(values) == 0:
        return None
    return float(sum(values)) / len(values)


def pct(part: int, whole: int) -> float:
    return (part / whole) * 100.0 if whole > 0 else 0.0


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def truncate_label(s: str, width: int) -> str:
    """Shorten long labels for console tables, marking the cut with '..'."""
    s = "" if s is None else str(s)
    if width <= 2 or len(s) <= width:
        return s
    return s[: width - 2] + ".."
