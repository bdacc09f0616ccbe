from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Mapping

from .models import MalformedResponseError

PRAYER_NAMES = ("Fajr", "Dhuhr", "Asr", "Maghrib", "Isha")

_TIME_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})")


@dataclass(slots=True, frozen=True)
class NextPrayer:
    name: str
    at: datetime
    remaining: timedelta

    def as_payload(self) -> dict[str, object]:
        return {
            "name": self.name,
            "time": self.at.isoformat(timespec="minutes"),
            "remainingSeconds": int(self.remaining.total_seconds()),
        }


def parse_time(value: str) -> tuple[int, int]:
    """``"05:12"`` or ``"05:12 (IST)"`` -> ``(5, 12)``."""
    match = _TIME_RE.match(value or "")
    if not match:
        raise MalformedResponseError(f"Unrecognised prayer time: {value!r}")
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise MalformedResponseError(f"Unrecognised prayer time: {value!r}")
    return hour, minute


def format_12h(value: str) -> str:
    if not value:
        return ""
    hour, minute = parse_time(value)
    suffix = "PM" if hour >= 12 else "AM"
    return f"{hour % 12 or 12:02d}:{minute:02d} {suffix}"


def _at(value: str, now: datetime) -> datetime:
    hour, minute = parse_time(value)
    return now.replace(hour=hour, minute=minute, second=0, microsecond=0)


def prayer_schedule(timings: Mapping[str, str]) -> dict[str, str]:
    missing = [name for name in PRAYER_NAMES if not timings.get(name)]
    if missing:
        raise MalformedResponseError(f"Timings missing: {', '.join(missing)}")
    return {name: timings[name] for name in PRAYER_NAMES}


def next_prayer(timings: Mapping[str, str], now: datetime) -> NextPrayer:
    schedule = prayer_schedule(timings)
    for name in PRAYER_NAMES:
        at = _at(schedule[name], now)
        if at > now:
            return NextPrayer(name=name, at=at, remaining=at - now)
    # Every prayer has passed: Fajr tomorrow.
    at = _at(schedule["Fajr"], now) + timedelta(days=1)
    return NextPrayer(name="Fajr", at=at, remaining=at - now)


def active_prayer(timings: Mapping[str, str], now: datetime) -> str | None:
    """The most recent prayer whose time has come, or None before Fajr."""
    schedule = prayer_schedule(timings)
    active: str | None = None
    for name in PRAYER_NAMES:
        if _at(schedule[name], now) <= now:
            active = name
    return active


def format_countdown(remaining: timedelta) -> str:
    total = max(0, int(remaining.total_seconds()))
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
