# Waypoint — Database Models
# Import all models here for SQLAlchemy discovery

from app.models.user import User                                   # noqa
from app.models.incident import Incident                           # noqa
from app.models.incident_verification import IncidentVerification  # noqa
from app.models.route import Route                                 # noqa
