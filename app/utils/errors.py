# app/utils/errors.py
"""
Domain exceptions raised by services and the push client.
HTTP mapping lives in app.main (domain_exception_handler).
"""


class WaypointError(Exception):
    """Base class for every domain error."""
    status_code = 500
    detail = "Internal server error"

    def __init__(self, detail: str = None):
        super().__init__(detail or self.detail)
        if detail:
            self.detail = detail


class AuthenticationRequired(WaypointError):
    status_code = 401
    detail = "Authentication required"


class DuplicateVerification(WaypointError):
    status_code = 400
    detail = "You have already verified this incident"


class InvalidStatusTransition(WaypointError):
    status_code = 400
    detail = "Incidents cannot be reopened"


class IncidentNotFound(WaypointError):
    status_code = 404
    detail = "Incident not found"


class RouteNotFound(WaypointError):
    status_code = 404
    detail = "Route not found"


class UserNotFound(WaypointError):
    status_code = 404
    detail = "User not found"


class ConflictError(WaypointError):
    status_code = 400
    detail = "Already exists"


class UpstreamServiceFailure(WaypointError):
    """TomTom (or any outbound HTTP dependency) failed or timed out."""
    status_code = 500
    detail = "Upstream service failure"


class ChannelDeliveryFailure(WaypointError):
    """A push to one channel failed. Logged by the broadcaster, never surfaced."""
    detail = "Push delivery failed"


class GeolocationUnavailable(WaypointError):
    """No usable position fix. Proximity evaluation is skipped."""
    detail = "Geolocation unavailable"
