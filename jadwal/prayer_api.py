"""Fetch the day's prayer times from the Aladhan API."""

import datetime
import logging

import requests

from jadwal.config import Config
from jadwal.errors import ProviderError
from jadwal.schedule import PROVIDER_NAMES, validate_timings

log = logging.getLogger(__name__)

HARI = ["Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu", "Minggu"]
BULAN = [
    "Januari", "Februari", "Maret", "April", "Mei", "Juni",
    "Juli", "Agustus", "September", "Oktober", "November", "Desember",
]


def format_date_indo(when: datetime.date) -> str:
    """Format a date the Indonesian way, e.g. "Sabtu, 1 Maret 2025"."""
    return f"{HARI[when.weekday()]}, {when.day} {BULAN[when.month - 1]} {when.year}"


def fetch_prayer_times(
    lat: float,
    lon: float,
    when: datetime.datetime = None,
    method: int = None,
) -> dict:
    """
    Fetch the five daily prayer times for the given coordinates.

    Returns a dict with:
        timings: {canonical_name: "HH:MM"} for Subuh, Zuhur, Asar, Magrib, Isya
        date: the day formatted for display (see format_date_indo)
    Raises ProviderError on network failure or a non-200 provider code.
    """
    if when is None:
        when = datetime.datetime.now()
    if method is None:
        method = Config.METHOD
    timestamp = int(when.timestamp())
    url = f"{Config.API_BASE}/timings/{timestamp}"
    params = {
        "latitude": lat,
        "longitude": lon,
        "method": method,
    }
    log.info("Fetching prayer times for %.4f,%.4f (method %s)", lat, lon, method)
    try:
        resp = requests.get(url, params=params, timeout=Config.HTTP_TIMEOUT)
        resp.raise_for_status()
        body = resp.json()
    except requests.RequestException as exc:
        raise ProviderError(f"Could not reach prayer time server: {exc}") from exc
    except ValueError as exc:
        raise ProviderError("Prayer time server returned invalid JSON") from exc

    if body.get("code") != 200:
        raise ProviderError(f"Aladhan API error: {body.get('status')}", code=body.get("code"))

    try:
        raw_timings = body["data"]["timings"]
        # "04:30 (WIB)" -> "04:30"
        timings = {canonical: raw_timings[western][:5] for western, canonical in PROVIDER_NAMES.items()}
        timings = validate_timings(timings)
    except (KeyError, TypeError, ValueError) as exc:
        raise ProviderError(f"Unexpected prayer time payload: {exc}") from exc

    return {"timings": timings, "date": format_date_indo(when)}
