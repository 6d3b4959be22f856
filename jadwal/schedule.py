"""Daily prayer schedule: canonical order, snapshot record and next-prayer logic.

A schedule is a plain dict mapping each of the five canonical prayer names to
an "HH:MM" time-of-day string in local wall-clock time. Everything here is
pure; the clock is always passed in.
"""

import datetime
import re
from dataclasses import dataclass

from jadwal.errors import MalformedTimeError

# Fixed daily order. Used for display and for resolving the next prayer.
PRAYER_NAMES = ("Subuh", "Zuhur", "Asar", "Magrib", "Isya")

# Provider (western) name -> canonical name
PROVIDER_NAMES = {
    "Fajr": "Subuh",
    "Dhuhr": "Zuhur",
    "Asr": "Asar",
    "Maghrib": "Magrib",
    "Isha": "Isya",
}

PLACEHOLDER = "--:--:--"
ZERO_COUNTDOWN = "00:00:00"

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def parse_time_of_day(time_str: str) -> tuple:
    """Parse "HH:MM" into an (hour, minute) tuple.

    Raises MalformedTimeError for anything else, including out-of-range
    values such as "24:00" or "12:60".
    """
    if not isinstance(time_str, str):
        raise MalformedTimeError(f"time-of-day must be a string, got {time_str!r}")
    m = _TIME_RE.match(time_str.strip())
    if not m:
        raise MalformedTimeError(f"malformed time-of-day {time_str!r}")
    hour, minute = int(m.group(1)), int(m.group(2))
    if hour > 23 or minute > 59:
        raise MalformedTimeError(f"time-of-day out of range {time_str!r}")
    return hour, minute


def validate_timings(timings: dict) -> dict:
    """Return a copy of `timings` holding exactly the five canonical entries."""
    if not isinstance(timings, dict):
        raise MalformedTimeError(f"timings must be a mapping, got {type(timings).__name__}")
    missing = [name for name in PRAYER_NAMES if name not in timings]
    if missing:
        raise MalformedTimeError(f"timings missing {', '.join(missing)}")
    for name in PRAYER_NAMES:
        parse_time_of_day(timings[name])
    return {name: timings[name].strip() for name in PRAYER_NAMES}


def minute_of_day(time_str: str) -> int:
    hour, minute = parse_time_of_day(time_str)
    return hour * 60 + minute


@dataclass(frozen=True)
class Snapshot:
    """The last successfully fetched schedule, as persisted.

    `date` is already formatted for display and is never parsed back.
    """

    city: str
    date: str
    timings: dict

    def __post_init__(self):
        object.__setattr__(self, "timings", validate_timings(self.timings))

    def to_dict(self) -> dict:
        return {
            "city": self.city,
            "date": self.date,
            "timings": {name: self.timings[name] for name in PRAYER_NAMES},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Snapshot":
        """Build a snapshot from its stored form.

        Raises MalformedTimeError, KeyError or TypeError on a bad payload.
        """
        if not isinstance(data, dict):
            raise TypeError(f"snapshot must be an object, got {type(data).__name__}")
        city, date = data["city"], data["date"]
        if not isinstance(city, str) or not isinstance(date, str):
            raise TypeError("snapshot city and date must be strings")
        return cls(city=city, date=date, timings=data["timings"])


def resolve_next_prayer(timings: dict, now: datetime.datetime) -> str:
    """Return the name of the next prayer after `now`.

    The first prayer, in canonical order, whose minute-of-day is strictly
    later than now's wins; a prayer at exactly the current minute counts as
    passed. After the last prayer of the day this wraps to the first one
    (tomorrow's Subuh).
    """
    current = now.hour * 60 + now.minute
    for name in PRAYER_NAMES:
        if minute_of_day(timings[name]) > current:
            return name
    return PRAYER_NAMES[0]


def next_occurrence(time_str: str, now: datetime.datetime) -> datetime.datetime:
    """Next wall-clock instant at `time_str`: today, or tomorrow if already past."""
    hour, minute = parse_time_of_day(time_str)
    target = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if target < now:
        target += datetime.timedelta(days=1)
    return target


def format_countdown(remaining: datetime.timedelta) -> str:
    """Format a remaining duration as HH:MM:SS, hours wrapping at 24."""
    seconds = int(remaining.total_seconds())
    if seconds <= 0:
        return ZERO_COUNTDOWN
    h = (seconds // 3600) % 24
    m = (seconds % 3600) // 60
    s = seconds % 60
    return f"{h:02d}:{m:02d}:{s:02d}"
