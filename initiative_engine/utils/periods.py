# initiative_engine/utils/periods.py
"""
Scheduling-window helpers.

Windows are stored as free text on the initiative:
- discovery: "YYYY-MM-DD → YYYY-MM-DD" (end may be the placeholder "...")
- delivery:  "YYYY-MM-DD" (target/end date only)

Values are not validated as real dates; parsing only splits the text.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

PERIOD_SEPARATOR = "→"
OPEN_END = "..."


@dataclass(frozen=True)
class PeriodWindow:
    """Start/end as written by the user; empty string when absent."""
    start: str
    end: str

    @property
    def has_start(self) -> bool:
        return bool(self.start)

    @property
    def has_end(self) -> bool:
        return bool(self.end) and self.end != OPEN_END


def parse_period_value(period_value: Optional[str]) -> PeriodWindow:
    """
    Split a stored window into its start and end parts.

    A value without the separator is a single date; it is returned as the
    start part (callers that store delivery targets read it via `target_date`).
    """
    if not period_value:
        return PeriodWindow(start="", end="")
    parts = [p.strip() for p in period_value.split(PERIOD_SEPARATOR)]
    start = parts[0] if parts else ""
    end = parts[1] if len(parts) > 1 else ""
    return PeriodWindow(start=start, end=end)


def build_period_value(start: Optional[str], end: Optional[str]) -> str:
    """Render a discovery window; a missing end becomes the open placeholder."""
    start = (start or "").strip()
    end = (end or "").strip()
    return f"{start} {PERIOD_SEPARATOR} {end or OPEN_END}"


def target_date(period_value: Optional[str]) -> str:
    """Delivery target: the end part of a window, or the single stored date."""
    window = parse_period_value(period_value)
    if window.has_end:
        return window.end
    if period_value and PERIOD_SEPARATOR not in period_value:
        return window.start
    return ""


def _parse_iso(value: str) -> Optional[date]:
    try:
        return date.fromisoformat(value.strip())
    except (ValueError, AttributeError):
        return None


def default_window_end(start: Optional[str], days: int) -> Optional[str]:
    """Start + `days` as ISO text, or None when start is not an ISO date."""
    parsed = _parse_iso(start or "")
    if parsed is None:
        return None
    return (parsed + timedelta(days=days)).isoformat()


def period_duration_days(period_value: Optional[str]) -> Optional[int]:
    """Whole days between start and end; None when either side is not a date."""
    window = parse_period_value(period_value)
    start = _parse_iso(window.start)
    end = _parse_iso(window.end)
    if start is None or end is None:
        return None
    return (end - start).days
