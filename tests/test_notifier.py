"""Tests for the notifier module."""

import datetime
import unittest
from unittest.mock import MagicMock, patch

from jadwal.notifier import ReminderScheduler, notify_prayer_time, notify_reminder

TIMINGS = {"Subuh": "04:30", "Zuhur": "12:00", "Asar": "15:30", "Magrib": "18:15", "Isya": "19:30"}


class TestNotifyReminder(unittest.TestCase):
    @patch("jadwal.notifier._send_plyer")
    def test_calls_send_plyer(self, mock_plyer):
        notify_reminder("Subuh", 10)
        mock_plyer.assert_called_once()
        title = mock_plyer.call_args[0][0]
        self.assertIn("10", title)
        self.assertIn("Subuh", title)

    @patch("jadwal.notifier._send_plyer")
    def test_calls_callback(self, mock_plyer):
        cb = MagicMock()
        notify_reminder("Magrib", 5, callback=cb)
        cb.assert_called_once()


class TestNotifyPrayerTime(unittest.TestCase):
    @patch("jadwal.notifier._send_plyer")
    def test_calls_send_plyer(self, mock_plyer):
        notify_prayer_time("Magrib")
        mock_plyer.assert_called_once()
        self.assertIn("Magrib", mock_plyer.call_args[0][0])


class TestReminderScheduler(unittest.TestCase):
    def test_no_timers_after_last_prayer(self):
        with patch("jadwal.notifier.threading.Timer") as mock_timer_cls:
            scheduler = ReminderScheduler()
            timers = scheduler.schedule_day(TIMINGS, datetime.datetime(2025, 3, 1, 21, 0))
        self.assertEqual(timers, [])
        mock_timer_cls.assert_not_called()

    def test_only_alarm_timer_when_less_than_5_min(self):
        # 200 seconds before Isya, nothing else left today
        now = datetime.datetime(2025, 3, 1, 19, 26, 40)
        with patch("jadwal.notifier.threading.Timer") as mock_timer_cls:
            timers = ReminderScheduler().schedule_day(TIMINGS, now)
        self.assertEqual(len(timers), 1)
        self.assertEqual(mock_timer_cls.call_args[0][0], 200)

    def test_three_timers_per_remaining_prayer(self):
        # Magrib and Isya still ahead, each more than 10 minutes away
        now = datetime.datetime(2025, 3, 1, 17, 0)
        with patch("jadwal.notifier.threading.Timer") as mock_timer_cls:
            mock_timer_cls.return_value = MagicMock()
            timers = ReminderScheduler().schedule_day(TIMINGS, now)
        self.assertEqual(len(timers), 6)
        delays = sorted(c[0][0] for c in mock_timer_cls.call_args_list)
        self.assertEqual(delays[0], 75 * 60 - 600)

    def test_clear_all_cancels_every_timer(self):
        with patch("jadwal.notifier.threading.Timer") as mock_timer_cls:
            mock_timer_cls.side_effect = lambda *a, **kw: MagicMock()
            scheduler = ReminderScheduler()
            timers = scheduler.schedule_day(TIMINGS, datetime.datetime(2025, 3, 1, 4, 0))
        self.assertEqual(len(timers), 5 * 3)

        scheduler.clear_all()
        for t in timers:
            t.cancel.assert_called_once()
        self.assertEqual(scheduler.timers, [])

        scheduler.clear_all()
        for t in timers:
            t.cancel.assert_called_once()


if __name__ == "__main__":
    unittest.main()
