"""Exceptions raised by the schedule core and its collaborators."""


class JadwalError(Exception):
    """Base class for every error raised by this package."""


class FetchError(JadwalError):
    """A schedule could not be obtained. Recoverable; the user may retry."""


class LocationError(FetchError):
    """The device location could not be determined."""


class ProviderError(FetchError):
    """The time-table provider failed or answered with a non-success code."""

    def __init__(self, message: str, code=None):
        super().__init__(message)
        self.code = code


class StorageError(JadwalError):
    """The persistence backend could not read or write a record."""


class MalformedTimeError(JadwalError, ValueError):
    """A time-of-day value is not in "HH:MM" form.

    Schedules are validated by whoever produces them, so this signals a bug
    upstream rather than something to retry.
    """
