"""
Helper Functions

This module contains utility functions used throughout the application.
"""

import json
from datetime import datetime, timezone
from typing import Any, List, Optional, Sequence, Union

from dateutil import parser as dtparser

Number = Union[int, float]


def utc_now_iso() -> str:
    """Current instant as ISO-8601 with millisecond precision and a Z suffix"""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_ts(x: Any) -> Optional[datetime]:
    """Parse timestamp from various formats"""
    if not x:
        return None
    try:
        dt = dtparser.isoparse(str(x))
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None


def safe_int(x: Any, default: Optional[int] = None) -> Optional[int]:
    """Safely convert to int"""
    try:
        return int(x) if x is not None else default
    except (TypeError, ValueError):
        return default


def median(values: Sequence[Number]) -> Optional[Number]:
    """Middle value; mean of the two middle values for even counts. None when empty."""
    ordered = sorted(values)
    n = len(ordered)
    if n == 0:
        return None
    mid = n // 2
    if n % 2:
        return ordered[mid]
    return (ordered[mid - 1] + ordered[mid]) / 2


def average(values: Sequence[Number]) -> float:
    if not values:
        return 0
    return sum(values) / len(values)


def quantile(sorted_vals: List[Number], q: float) -> Optional[float]:
    """Calculate percentile from sorted values"""
    n = len(sorted_vals)
    if n == 0:
        return None
    if n == 1:
        return float(sorted_vals[0])
    pos = (n - 1) * q
    lo = int(pos)
    hi = min(lo + 1, n - 1)
    frac = pos - lo
    return float(sorted_vals[lo] * (1 - frac) + sorted_vals[hi] * frac)


def json_size(payload: Any) -> int:
    """
    Byte length of the compact JSON form of payload.
    Empty payloads (None, "", 0, False) count as 0; lone surrogates are kept as-is.
    """
    if payload is None or payload == "":
        return 0
    if isinstance(payload, (bool, int, float)) and not payload:
        return 0
    text = json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=str)
    return len(text.encode("utf-8", errors="surrogatepass"))
