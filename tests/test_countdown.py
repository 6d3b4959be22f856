"""Tests for the countdown module."""

import datetime
import unittest
from unittest.mock import MagicMock, patch

from jadwal.countdown import IDLE, RUNNING, CountdownEngine, ThreadTimerScheduler
from jadwal.errors import MalformedTimeError
from jadwal.schedule import PLACEHOLDER, PRAYER_NAMES

TIMINGS = {"Subuh": "05:00", "Zuhur": "12:15", "Asar": "15:45", "Magrib": "18:10", "Isya": "19:25"}


class Clock:
    def __init__(self, start):
        self.current = start

    def now(self):
        return self.current

    def advance(self, seconds=1):
        self.current += datetime.timedelta(seconds=seconds)


class Handle:
    def __init__(self, callback):
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """Collects callbacks; `fire()` runs the ones due."""

    def __init__(self):
        self.handles = []

    def call_later(self, delay, callback):
        handle = Handle(callback)
        self.handles.append(handle)
        return handle

    @property
    def pending(self):
        return [h for h in self.handles if not h.cancelled]

    def fire(self):
        due, self.handles = self.pending, []
        for handle in due:
            handle.callback()


class EngineTestCase(unittest.TestCase):
    def make_engine(self, start):
        self.clock = Clock(start)
        self.scheduler = ManualScheduler()
        self.ticks = []
        self.resolved = []
        return CountdownEngine(
            scheduler=self.scheduler,
            now_provider=self.clock.now,
            on_tick=lambda display, name: self.ticks.append((display, name)),
            on_resolve=lambda name, target: self.resolved.append((name, target)),
            interval=1,
        )

    def step(self, seconds=1):
        self.clock.advance(seconds)
        self.scheduler.fire()


class TestEngineStates(EngineTestCase):
    def test_idle_until_started(self):
        engine = self.make_engine(datetime.datetime(2025, 3, 1, 8, 0))
        self.assertEqual(engine.state, IDLE)
        self.assertEqual(engine.display, PLACEHOLDER)
        self.assertEqual(engine.tick(), PLACEHOLDER)
        self.assertEqual(self.scheduler.pending, [])

    def test_start_ticks_immediately_and_arms_one_timer(self):
        engine = self.make_engine(datetime.datetime(2025, 3, 1, 8, 0))
        display = engine.start(TIMINGS)
        self.assertEqual(engine.state, RUNNING)
        self.assertEqual(engine.next_prayer, "Zuhur")
        self.assertEqual(display, "04:15:00")
        self.assertEqual(len(self.scheduler.pending), 1)

    def test_restart_cancels_previous_timer(self):
        engine = self.make_engine(datetime.datetime(2025, 3, 1, 8, 0))
        engine.start(TIMINGS)
        first = self.scheduler.pending[0]
        engine.start(dict(TIMINGS, Zuhur="12:00"))
        self.assertTrue(first.cancelled)
        self.assertEqual(len(self.scheduler.pending), 1)
        self.assertEqual(engine.display, "04:00:00")

    def test_stop_twice_is_idle_with_no_more_ticks(self):
        engine = self.make_engine(datetime.datetime(2025, 3, 1, 8, 0))
        engine.start(TIMINGS)
        self.step()
        engine.stop()
        engine.stop()
        count = len(self.ticks)

        self.assertEqual(engine.state, IDLE)
        self.assertEqual(engine.display, PLACEHOLDER)
        self.assertIsNone(engine.next_prayer)
        self.assertEqual(self.scheduler.pending, [])
        for _ in range(5):
            self.step()
        self.assertEqual(len(self.ticks), count)

    def test_stale_callback_after_stop_does_nothing(self):
        engine = self.make_engine(datetime.datetime(2025, 3, 1, 8, 0))
        engine.start(TIMINGS)
        stale = self.scheduler.pending[0]
        engine.stop()
        count = len(self.ticks)
        stale.callback()
        self.assertEqual(len(self.ticks), count)
        self.assertEqual(self.scheduler.pending, [])

    def test_stale_callback_after_restart_does_not_tick_new_schedule(self):
        engine = self.make_engine(datetime.datetime(2025, 3, 1, 8, 0))
        engine.start(TIMINGS)
        stale = self.scheduler.pending[0]
        engine.start(dict(TIMINGS, Zuhur="12:00"))
        fresh = self.scheduler.pending[0]
        count = len(self.ticks)

        self.clock.advance()
        stale.callback()

        self.assertEqual(len(self.ticks), count)
        self.assertEqual(engine.display, "04:00:00")
        self.assertEqual(self.scheduler.pending, [fresh])

    def test_stop_on_fresh_engine_is_noop(self):
        engine = self.make_engine(datetime.datetime(2025, 3, 1, 8, 0))
        engine.stop()
        self.assertEqual(engine.state, IDLE)

    def test_malformed_schedule_rejected_and_engine_stays_idle(self):
        engine = self.make_engine(datetime.datetime(2025, 3, 1, 8, 0))
        with self.assertRaises(MalformedTimeError):
            engine.start(dict(TIMINGS, Asar="15.45"))
        self.assertEqual(engine.state, IDLE)
        self.assertEqual(self.scheduler.pending, [])


class TestEngineCountdown(EngineTestCase):
    def test_magrib_scenario(self):
        engine = self.make_engine(datetime.datetime(2025, 3, 1, 18, 9, 50))
        self.assertEqual(engine.start(TIMINGS), "00:00:10")
        self.assertEqual(engine.next_prayer, "Magrib")

        for expected in ("00:00:09", "00:00:08", "00:00:07", "00:00:06", "00:00:05",
                         "00:00:04", "00:00:03", "00:00:02", "00:00:01"):
            self.step()
            self.assertEqual(self.ticks[-1], (expected, "Magrib"))

        self.step()
        self.assertEqual(self.ticks[-1], ("00:00:00", "Isya"))
        self.assertEqual(engine.target, datetime.datetime(2025, 3, 1, 19, 25))

        self.step()
        self.assertEqual(self.ticks[-1], ("01:14:59", "Isya"))

    def test_after_isya_targets_tomorrow_subuh(self):
        engine = self.make_engine(datetime.datetime(2025, 3, 31, 21, 0))
        self.assertEqual(engine.start(TIMINGS), "08:00:00")
        self.assertEqual(engine.next_prayer, "Subuh")
        self.assertEqual(engine.target, datetime.datetime(2025, 4, 1, 5, 0))

    def test_start_on_exact_prayer_minute_resolves_following_prayer(self):
        engine = self.make_engine(datetime.datetime(2025, 3, 1, 12, 15, 30))
        engine.start(TIMINGS)
        self.assertEqual(engine.next_prayer, "Asar")

    def test_late_tick_still_advances(self):
        engine = self.make_engine(datetime.datetime(2025, 3, 1, 12, 14, 58))
        engine.start(TIMINGS)
        # The process was suspended across the prayer time.
        self.step(seconds=90)
        self.assertEqual(self.ticks[-1], ("00:00:00", "Asar"))
        self.step()
        self.assertEqual(engine.next_prayer, "Asar")

    def test_full_day_cycles_through_every_prayer_once(self):
        start = datetime.datetime(2025, 3, 1, 0, 0, 0)
        engine = self.make_engine(start)
        engine.start(TIMINGS)
        self.resolved.clear()
        previous = engine.display

        for _ in range(24 * 60 * 60 - 1):
            self.step()
            display, _name = self.ticks[-1]
            if display != "00:00:00":
                # Zero-padded HH:MM:SS compares like the duration it shows.
                if previous != "00:00:00":
                    self.assertLessEqual(display, previous, self.clock.current)
            previous = display
            self.assertEqual(len(self.scheduler.pending), 1)

        names = [name for name, _target in self.resolved]
        self.assertEqual(names, list(PRAYER_NAMES[1:]) + [PRAYER_NAMES[0]])
        self.assertEqual(sorted(names), sorted(PRAYER_NAMES))
        zero_ticks = [t for t in self.ticks if t[0] == "00:00:00"]
        self.assertEqual(len(zero_ticks), 5)

        targets = [target for _name, target in self.resolved]
        self.assertEqual(targets[0], datetime.datetime(2025, 3, 1, 12, 15))
        self.assertEqual(targets[-1], datetime.datetime(2025, 3, 2, 5, 0))
        self.assertEqual(targets, sorted(targets))


class TestThreadTimerScheduler(unittest.TestCase):
    def test_starts_daemon_timer(self):
        with patch("jadwal.countdown.threading.Timer") as mock_timer_cls:
            mock_timer = MagicMock()
            mock_timer_cls.return_value = mock_timer
            callback = MagicMock()
            handle = ThreadTimerScheduler().call_later(1.0, callback)

        mock_timer_cls.assert_called_once_with(1.0, callback)
        mock_timer.start.assert_called_once()
        self.assertTrue(mock_timer.daemon)
        self.assertIs(handle, mock_timer)


if __name__ == "__main__":
    unittest.main()
