"""Runtime settings for the prayer schedule widget.

Every value is a class attribute of `Config`, read once from a `JADWAL_*`
environment variable with a default suitable for a desktop install.
"""

import os
import re


def _env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable, falling back to default.

    Accepts values like "11" or "11 # Egyptian GAES" and uses the first
    integer found.
    """
    val = os.getenv(name)
    if val is None:
        return default
    m = re.search(r"-?\d+", val.strip().strip('"').strip("'"))
    if not m:
        return default
    return int(m.group(0))


def _env_float(name: str, default: float) -> float:
    val = os.getenv(name)
    if val is None:
        return default
    try:
        return float(val.strip())
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return val.strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Application configuration sourced from environment variables.

    Import it as a namespace of constants (`from jadwal.config import Config`).
    Override a setting by exporting the variable before launching the app.
    """

    # Remote time-table provider
    API_BASE = os.getenv("JADWAL_API_BASE", "https://api.aladhan.com/v1").rstrip("/")
    # 2 = ISNA, 3 = MWL, 4 = Mecca, 5 = Karachi, 11 = Egypt, 15 = Dubai, 20 = Kemenag
    METHOD = _env_int("JADWAL_METHOD", 11)
    HTTP_TIMEOUT = _env_int("JADWAL_HTTP_TIMEOUT", 10)

    # Persistence
    DATA_DIR = os.path.expanduser(os.getenv("JADWAL_DATA_DIR", os.path.join("~", ".jadwalsholat")))
    STORAGE_KEY = os.getenv("JADWAL_STORAGE_KEY", "prayerTimesLast")

    # Countdown
    TICK_SECONDS = _env_float("JADWAL_TICK_SECONDS", 1.0)

    # Reminders
    NOTIFICATIONS_ENABLED = _env_bool("JADWAL_NOTIFICATIONS", True)

    LOG_LEVEL = os.getenv("JADWAL_LOG_LEVEL", "INFO").strip().upper()
