"""Device location via IP geolocation."""

import logging

import requests

from jadwal.config import Config
from jadwal.errors import LocationError

log = logging.getLogger(__name__)

IPAPI_URL = "http://ip-api.com/json/"

DEFAULT_LABEL = "Lokasi Saya"


def get_location(timeout: int = None) -> dict:
    """
    Detect current location via IP geolocation.

    Returns a dict with: city, lat, lon, timezone. `city` falls back to the
    region name, then to DEFAULT_LABEL; `timezone` may be None.
    Raises LocationError when no coordinates can be obtained.
    """
    if timeout is None:
        timeout = Config.HTTP_TIMEOUT
    try:
        resp = requests.get(
            IPAPI_URL,
            params={"fields": "city,regionName,lat,lon,timezone,status,message"},
            timeout=timeout,
        )
        resp.raise_for_status()
        data = resp.json()
    except (requests.RequestException, ValueError) as exc:
        raise LocationError(f"Could not determine location: {exc}") from exc

    if data.get("status") != "success":
        raise LocationError(f"Location lookup failed: {data.get('message', 'unknown error')}")
    try:
        lat, lon = float(data["lat"]), float(data["lon"])
    except (KeyError, TypeError, ValueError) as exc:
        raise LocationError("Location lookup returned no coordinates") from exc

    city = data.get("city") or data.get("regionName") or DEFAULT_LABEL
    log.info("Located at %s (%.4f,%.4f)", city, lat, lon)
    return {
        "city": city,
        "lat": lat,
        "lon": lon,
        "timezone": data.get("timezone") or None,
    }
