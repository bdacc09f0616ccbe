from __future__ import annotations

from datetime import date

from ruhverse.data.insights import INSIGHTS
from ruhverse.insights import daily_insights, daily_selection, date_seed


def test_date_seed() -> None:
    assert date_seed(date(2026, 10, 19)) == 20261019


def test_daily_selection_is_deterministic() -> None:
    picks = daily_selection(date(2026, 10, 19), "abcdefghij")
    assert picks == ["j", "b", "c", "e", "d"]
    assert daily_selection(date(2026, 10, 19), "abcdefghij") == picks


def test_daily_selection_small_pool() -> None:
    assert sorted(daily_selection(date(2026, 1, 1), ["x", "y"])) == ["x", "y"]
    assert daily_selection(date(2026, 1, 1), []) == []


def test_daily_insights_are_distinct() -> None:
    today = daily_insights(date(2026, 10, 19))
    assert len(today) == 5
    assert len(set(today)) == 5
    assert all(item in INSIGHTS for item in today)
    tomorrow = daily_insights(date(2026, 10, 20))
    assert today != tomorrow
