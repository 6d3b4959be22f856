"""Ties location, provider, store, reminders and countdown together.

A refresh is split in two so a GUI can run the network half on a worker
thread and apply the result on its own thread:

    snapshot = service.fetch_snapshot()   # blocking, raises FetchError
    service.apply(snapshot)               # store, reminders, countdown
"""

import datetime
import logging

import pytz

from jadwal.config import Config
from jadwal.countdown import CountdownEngine
from jadwal.errors import FetchError
from jadwal.location import get_location
from jadwal.notifier import ReminderScheduler
from jadwal.prayer_api import fetch_prayer_times
from jadwal.schedule import Snapshot
from jadwal.store import ScheduleStore

log = logging.getLogger(__name__)


def location_timezone(name):
    """pytz timezone for `name`, or None when empty or unknown."""
    if not name:
        return None
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        log.warning("Unknown timezone %r, using device local time", name)
        return None


class PrayerService:
    def __init__(
        self,
        store: ScheduleStore = None,
        engine: CountdownEngine = None,
        reminders: ReminderScheduler = None,
        locate=get_location,
        fetch=fetch_prayer_times,
        notifications_enabled: bool = None,
    ):
        self.store = store if store is not None else ScheduleStore()
        self.engine = engine if engine is not None else CountdownEngine(now_provider=self.now)
        self.reminders = reminders if reminders is not None else ReminderScheduler()
        self.locate = locate
        self.fetch = fetch
        if notifications_enabled is None:
            notifications_enabled = Config.NOTIFICATIONS_ENABLED
        self.notifications_enabled = notifications_enabled

        self.snapshot = None

    @property
    def has_schedule(self) -> bool:
        return self.snapshot is not None

    def now(self) -> datetime.datetime:
        """Current device-local wall-clock time, naive."""
        return datetime.datetime.now()

    def restore(self):
        """Show the stored schedule, if any. Returns it or None."""
        snapshot = self.store.load()
        if snapshot is not None:
            self.snapshot = snapshot
            self.engine.start(snapshot.timings)
        return snapshot

    def fetch_snapshot(self) -> Snapshot:
        """Locate the device and fetch today's schedule. Raises FetchError.

        Nothing is changed on failure, so a previously shown schedule stays.
        """
        try:
            location = self.locate()
            tz = location_timezone(location.get("timezone"))
            # The provider picks the day by the located clock; the countdown stays device-local.
            when = datetime.datetime.now(tz) if tz else datetime.datetime.now()
            result = self.fetch(location["lat"], location["lon"], when)
        except FetchError as exc:
            log.error("Fetching prayer schedule failed: %s", exc)
            raise
        return Snapshot(city=location["city"], date=result["date"], timings=result["timings"])

    def apply(self, snapshot: Snapshot) -> None:
        """Make `snapshot` the current schedule."""
        self.snapshot = snapshot
        # The fresh data is shown even if it cannot be persisted.
        self.store.save(snapshot)
        self.reminders.clear_all()
        if self.notifications_enabled:
            self.reminders.schedule_day(snapshot.timings, self.now())
        self.engine.start(snapshot.timings)

    def refresh(self) -> Snapshot:
        snapshot = self.fetch_snapshot()
        self.apply(snapshot)
        return snapshot

    def set_notifications(self, enabled: bool) -> None:
        self.notifications_enabled = enabled
        self.reminders.clear_all()
        if enabled and self.snapshot is not None:
            self.reminders.schedule_day(self.snapshot.timings, self.now())

    def clear(self) -> None:
        """Drop the current schedule and stop the countdown."""
        self.snapshot = None
        self.engine.stop()
        self.reminders.clear_all()
