"""Desktop reminders for prayer times."""

import datetime
import logging
import threading

from jadwal.schedule import PRAYER_NAMES, next_occurrence

log = logging.getLogger(__name__)

try:
    from plyer import notification as plyer_notification
    _PLYER_AVAILABLE = True
except ImportError:
    _PLYER_AVAILABLE = False

APP_NAME = "Jadwal Sholat"
REMIND_MINUTES = (10, 5)


def _send_plyer(title: str, message: str, timeout: int = 10) -> None:
    """Send a desktop notification via plyer (cross-platform)."""
    if not _PLYER_AVAILABLE:
        return
    try:
        plyer_notification.notify(
            app_name=APP_NAME,
            title=title,
            message=message,
            timeout=timeout,
        )
    except Exception:
        # Some desktops have no notification backend at all.
        log.debug("Desktop notification failed", exc_info=True)


def notify_reminder(prayer_name: str, minutes: int, callback=None) -> None:
    """Notify that `prayer_name` starts in `minutes` minutes."""
    title = f"{prayer_name} - {minutes} menit lagi"
    message = f"Waktu {prayer_name} tiba dalam {minutes} menit. Bersiaplah untuk sholat."
    _send_plyer(title, message, timeout=15)
    if callback:
        callback(title, message)


def notify_prayer_time(prayer_name: str, callback=None) -> None:
    title = f"Waktunya {prayer_name}!"
    message = f"Telah masuk waktu sholat {prayer_name}."
    _send_plyer(title, message, timeout=30)
    if callback:
        callback(title, message)


class ReminderScheduler:
    """Owns every pending reminder timer so they can be cleared together."""

    def __init__(self, callback=None):
        self.callback = callback
        self.timers = []

    def clear_all(self) -> None:
        """Cancel every scheduled reminder."""
        for t in self.timers:
            t.cancel()
        if self.timers:
            log.info("Cleared %d scheduled reminders", len(self.timers))
        self.timers = []

    def schedule_day(self, timings: dict, now: datetime.datetime) -> list:
        """
        Arm reminders at 10 and 5 minutes before each prayer still ahead
        today, and an alert at the prayer time itself.

        Returns the newly created Timer objects.
        """
        created = []
        for name in PRAYER_NAMES:
            target = next_occurrence(timings[name], now)
            if target.date() != now.date():
                continue  # already passed today
            seconds_until = int((target - now).total_seconds())
            created.extend(self._schedule_prayer(name, seconds_until))
        self.timers.extend(created)
        log.info("Scheduled %d reminders", len(created))
        return created

    def _schedule_prayer(self, prayer_name: str, seconds_until: int) -> list:
        timers = []
        for remind_minutes in REMIND_MINUTES:
            delay = seconds_until - remind_minutes * 60
            if delay > 0:
                timers.append(self._start_timer(delay, notify_reminder, (prayer_name, remind_minutes, self.callback)))
        if seconds_until > 0:
            timers.append(self._start_timer(seconds_until, notify_prayer_time, (prayer_name, self.callback)))
        return timers

    @staticmethod
    def _start_timer(delay, func, args):
        t = threading.Timer(delay, func, args=args)
        t.daemon = True
        t.start()
        return t
