# app/client/location.py
"""Last known position fix fed by the device geolocation provider."""

import time
from typing import Optional, Tuple

from app.utils.errors import GeolocationUnavailable


class LastKnownLocation:
    """
    Holds the most recent fix. current() raises GeolocationUnavailable when
    there is no fix yet, the provider reported a failure, or the fix is older
    than max_age_seconds.
    """

    def __init__(self, max_age_seconds: Optional[float] = None):
        self.max_age_seconds = max_age_seconds
        self._fix: Optional[Tuple[float, float]] = None
        self._fixed_at = 0.0
        self._error: Optional[str] = None

    def update(self, latitude: float, longitude: float) -> None:
        self._fix = (latitude, longitude)
        self._fixed_at = time.monotonic()
        self._error = None

    def fail(self, reason: str) -> None:
        """Provider error (permission denied, timeout). Clears the fix."""
        self._fix = None
        self._error = reason

    def clear(self) -> None:
        self._fix = None
        self._error = None

    async def current(self) -> Tuple[float, float]:
        if self._fix is None:
            raise GeolocationUnavailable(self._error or "No position fix yet")
        if self.max_age_seconds is not None and time.monotonic() - self._fixed_at > self.max_age_seconds:
            raise GeolocationUnavailable("Position fix is stale")
        return self._fix
