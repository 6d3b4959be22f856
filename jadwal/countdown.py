"""Live countdown to the next prayer.

`CountdownEngine` ticks once per interval while a schedule is loaded. Each
tick formats the time left until the resolved prayer; when that reaches zero
the engine shows "00:00:00" for the tick and resolves the following prayer
from the same schedule, so it walks through the day and across midnight on
its own.

Ticks are driven by a scheduler: any object with
`call_later(delay_seconds, callback) -> handle`, where `handle.cancel()`
prevents the callback from running.
"""

import datetime
import logging
import threading

from jadwal.config import Config
from jadwal.schedule import (
    PLACEHOLDER,
    ZERO_COUNTDOWN,
    format_countdown,
    next_occurrence,
    resolve_next_prayer,
    validate_timings,
)

log = logging.getLogger(__name__)

IDLE = "idle"
RUNNING = "running"


class ThreadTimerScheduler:
    """Runs each callback on a daemon `threading.Timer`."""

    def call_later(self, delay: float, callback):
        t = threading.Timer(delay, callback)
        t.daemon = True
        t.start()
        return t


class CountdownEngine:
    """Idle/Running state machine around one recurring tick.

    on_tick(display, prayer_name) is called after every tick, and
    on_resolve(prayer_name, target) whenever a new next prayer is armed.
    """

    def __init__(
        self,
        scheduler=None,
        now_provider=datetime.datetime.now,
        on_tick=None,
        on_resolve=None,
        interval: float = None,
    ):
        self.scheduler = scheduler if scheduler is not None else ThreadTimerScheduler()
        self.now_provider = now_provider
        self.on_tick = on_tick
        self.on_resolve = on_resolve
        self.interval = Config.TICK_SECONDS if interval is None else interval

        self.timings = None
        self.next_prayer = None
        self.target = None
        self.display = PLACEHOLDER

        self._handle = None
        self._generation = 0
        self._lock = threading.RLock()

    @property
    def state(self) -> str:
        return RUNNING if self.timings is not None else IDLE

    def start(self, timings: dict) -> str:
        """Load `timings` and start ticking. Restarts if already running.

        Returns the display of the first tick, which runs immediately.
        """
        timings = validate_timings(timings)
        with self._lock:
            self._cancel()
            self.timings = timings
            self._resolve(self.now_provider())
            log.info("Countdown started, next prayer %s at %s", self.next_prayer, self.target)
            display = self.tick()
            self._arm()
            return display

    def stop(self) -> None:
        """Cancel the recurring tick and return to Idle. Safe to call twice."""
        with self._lock:
            was_running = self.timings is not None
            self._cancel()
            self.timings = None
            self.next_prayer = None
            self.target = None
            self.display = PLACEHOLDER
        if was_running:
            log.info("Countdown stopped")

    def tick(self, now: datetime.datetime = None) -> str:
        """Advance the countdown by one tick and return the new display."""
        display = self._tick(now)
        return PLACEHOLDER if display is None else display

    def _tick(self, now=None, generation=None):
        # Returns None, without ticking, when idle or when `generation` is stale.
        with self._lock:
            if self.timings is None:
                return None
            if generation is not None and generation != self._generation:
                return None
            if now is None:
                now = self.now_provider()
            remaining = self.target - now
            if remaining > datetime.timedelta(0):
                self.display = format_countdown(remaining)
            else:
                self.display = ZERO_COUNTDOWN
                log.info("%s has arrived", self.next_prayer)
                self._resolve(now)
            display, prayer = self.display, self.next_prayer
        if self.on_tick:
            self.on_tick(display, prayer)
        return display

    def _resolve(self, now: datetime.datetime) -> None:
        self.next_prayer = resolve_next_prayer(self.timings, now)
        self.target = next_occurrence(self.timings[self.next_prayer], now)
        log.debug("Resolved next prayer %s at %s", self.next_prayer, self.target)
        if self.on_resolve:
            self.on_resolve(self.next_prayer, self.target)

    def _arm(self) -> None:
        generation = self._generation

        def fire():
            # A timer armed before a stop/restart must not tick.
            if self._tick(generation=generation) is None:
                return
            with self._lock:
                if generation == self._generation and self.timings is not None:
                    self._arm()

        self._handle = self.scheduler.call_later(self.interval, fire)

    def _cancel(self) -> None:
        self._generation += 1
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
