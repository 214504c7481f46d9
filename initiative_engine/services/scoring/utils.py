# product_lifecycle_engine/initiative_engine/services/scoring/utils.py

from __future__ import annotations

from typing import Optional


def effective_effort(effort: Optional[int]) -> int:
    """Effort used as a denominator. None, zero and negatives count as 1."""
    if effort is None:
        return 1
    return max(int(effort), 1)


def in_range(value: Optional[int], min_value: int, max_value: int) -> bool:
    """True when value is an int (not bool) inside [min_value, max_value]."""
    if value is None or isinstance(value, bool) or not isinstance(value, int):
        return False
    return min_value <= value <= max_value


__all__ = ["effective_effort", "in_range"]
