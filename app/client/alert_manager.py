# app/client/alert_manager.py
"""
Alert Lifecycle Manager — client-side queue of proximity alerts.

    idle → pending → displayed → {dismissed | rerouted | expired | withdrawn} → idle / next pending

Exactly one alert is displayed at a time (front of the queue). Displaying
starts an expiry timer; a user action cancels it. Every alert closes once,
with one outcome, and an incident is never surfaced twice.
"""

import asyncio
from collections import deque
from enum import Enum
from typing import Awaitable, Callable, Deque, List, Optional, Set, Tuple

from app.client.proximity import ProximityAlert
from app.config import settings
from app.schemas.route import AvoidArea
from app.utils.logger import get_logger

logger = get_logger(__name__)

Rerouter = Callable[[AvoidArea], Awaitable[object]]


class AlertState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    DISPLAYED = "displayed"


class AlertOutcome(str, Enum):
    DISMISSED = "dismissed"
    REROUTED = "rerouted"
    EXPIRED = "expired"
    WITHDRAWN = "withdrawn"     # incident closed server-side


class AlertLifecycleManager:
    def __init__(
        self,
        rerouter: Optional[Rerouter] = None,
        timeout_seconds: float = None,
        avoid_radius_meters: float = None,
        on_display: Callable[[ProximityAlert], None] = None,
        on_close: Callable[[ProximityAlert, AlertOutcome], None] = None,
    ):
        self.rerouter = rerouter
        self.timeout_seconds = settings.ALERT_TIMEOUT_SECONDS if timeout_seconds is None else timeout_seconds
        self.avoid_radius_meters = (settings.REROUTE_AVOID_RADIUS_METERS
                                    if avoid_radius_meters is None else avoid_radius_meters)
        self.on_display = on_display
        self.on_close = on_close

        self.current: Optional[ProximityAlert] = None
        self.history: List[Tuple[int, AlertOutcome]] = []
        self._queue: Deque[ProximityAlert] = deque()
        self._seen: Set[int] = set()
        self._timer: Optional[asyncio.Task] = None

    # ── State ────────────────────────────────────────────────────────────────
    @property
    def state(self) -> AlertState:
        if self.current is not None:
            return AlertState.DISPLAYED
        if self._queue:
            return AlertState.PENDING
        return AlertState.IDLE

    @property
    def pending(self) -> List[ProximityAlert]:
        return list(self._queue)

    # ── Transitions ──────────────────────────────────────────────────────────
    def enqueue(self, alert: ProximityAlert) -> bool:
        """Queue an alert. False if this incident was already queued, shown or closed."""
        if alert.incident_id in self._seen:
            return False
        self._seen.add(alert.incident_id)
        self._queue.append(alert)
        self._show_next()
        return True

    def dismiss(self) -> Optional[ProximityAlert]:
        alert = self.current
        if alert is not None:
            self._close(AlertOutcome.DISMISSED)
        return alert

    async def reroute(self) -> Optional[ProximityAlert]:
        """
        Close the displayed alert as rerouted, then ask the rerouter for a route
        avoiding a circle around the incident. A rerouter failure is logged only.
        """
        alert = self.current
        if alert is None:
            return None
        self._close(AlertOutcome.REROUTED)

        if self.rerouter is None:
            logger.warning(f"[ALERT] Reroute requested for incident {alert.incident_id} but no rerouter is set")
            return alert
        area = AvoidArea(latitude=alert.latitude, longitude=alert.longitude,
                         radius_meters=self.avoid_radius_meters)
        try:
            await self.rerouter(area)
        except Exception as e:
            logger.warning(f"[ALERT] Reroute around incident {alert.incident_id} failed: {e}")
        return alert

    def withdraw(self, incident_id: int) -> bool:
        """Drop the alert of an incident that was closed server-side."""
        if self.current is not None and self.current.incident_id == incident_id:
            self._close(AlertOutcome.WITHDRAWN)
            return True
        for alert in self._queue:
            if alert.incident_id == incident_id:
                self._queue.remove(alert)
                return True
        return False

    async def aclose(self) -> None:
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
            try:
                await timer
            except asyncio.CancelledError:
                pass

    # ── Internals ────────────────────────────────────────────────────────────
    def _show_next(self) -> None:
        if self.current is not None or not self._queue:
            return
        alert = self._queue.popleft()
        self.current = alert
        self._timer = asyncio.create_task(self._expire_after(alert), name=f"alert-expiry-{alert.incident_id}")
        logger.info(f"[ALERT] Displaying {alert.type} (incident {alert.incident_id}, {alert.distance:.0f} m)")
        if self.on_display:
            self._notify(self.on_display, alert)

    async def _expire_after(self, alert: ProximityAlert) -> None:
        await asyncio.sleep(self.timeout_seconds)
        if self.current is alert:
            self._timer = None
            self._close(AlertOutcome.EXPIRED)

    def _close(self, outcome: AlertOutcome) -> None:
        alert, self.current = self.current, None
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
        self.history.append((alert.incident_id, outcome))
        logger.info(f"[ALERT] Incident {alert.incident_id} alert {outcome.value}")
        if self.on_close:
            self._notify(self.on_close, alert, outcome)
        self._show_next()

    @staticmethod
    def _notify(callback, *args) -> None:
        try:
            callback(*args)
        except Exception as e:
            logger.error(f"[ALERT] UI callback failed: {e}", exc_info=True)
