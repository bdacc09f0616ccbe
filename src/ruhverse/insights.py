from __future__ import annotations

from datetime import date
from typing import Sequence, TypeVar

from .data.insights import INSIGHTS, Insight

T = TypeVar("T")

DAILY_INSIGHT_COUNT = 5
_STRIDE = 7


def date_seed(day: date) -> int:
    return day.year * 10000 + day.month * 100 + day.day


def daily_selection(day: date, pool: Sequence[T], count: int = DAILY_INSIGHT_COUNT) -> list[T]:
    """Pick ``count`` entries for ``day``; the same date always gives the same picks.

    Each pick removes its entry from the remaining pool, so the modulus
    shrinks as the selection grows.
    """
    remaining = list(pool)
    seed = date_seed(day)
    picks: list[T] = []
    for i in range(min(count, len(remaining))):
        picks.append(remaining.pop((seed + i * _STRIDE) % len(remaining)))
    return picks


def daily_insights(day: date, count: int = DAILY_INSIGHT_COUNT) -> list[Insight]:
    return daily_selection(day, INSIGHTS, count)
