# app/services/incident_service.py
"""
Incident Store — create/read/update incident records.
Routers call these and then hand the result to the broadcaster.
"""

from datetime import datetime
from typing import List, Tuple

from sqlalchemy.orm import Session

from app.models.incident import Incident
from app.models.incident_verification import IncidentVerification
from app.schemas.incident import IncidentAdminUpdate, IncidentCreate
from app.utils.errors import IncidentNotFound, InvalidStatusTransition
from app.utils.geo import haversine_meters
from app.utils.logger import get_logger

logger = get_logger(__name__)


def create_incident(db: Session, data: IncidentCreate, reporter_id: int) -> Incident:
    incident = Incident(
        type=data.type.value,
        latitude=data.latitude,
        longitude=data.longitude,
        comment=data.comment,
        reported_by=reporter_id,
        active=True,
        confirmed=0,
        refuted=0,
        created_at=datetime.utcnow(),
    )
    db.add(incident)
    db.commit()
    db.refresh(incident)
    logger.info(f"[INCIDENT] #{incident.id} {incident.type} at ({incident.latitude}, {incident.longitude}) "
                f"by user {reporter_id}")
    return incident


def list_active_incidents(db: Session) -> List[Incident]:
    return (
        db.query(Incident)
        .filter(Incident.active.is_(True))
        .order_by(Incident.created_at.desc(), Incident.id.desc())
        .all()
    )


def list_all_incidents(db: Session) -> List[Incident]:
    return db.query(Incident).order_by(Incident.created_at.desc(), Incident.id.desc()).all()


def get_incident(db: Session, incident_id: int) -> Incident:
    incident = db.get(Incident, incident_id)
    if incident is None:
        raise IncidentNotFound()
    return incident


def list_incidents_nearby(db: Session, lat: float, lon: float, radius_km: float) -> List[Incident]:
    """Active incidents within radius_km of (lat, lon), nearest first."""
    radius_m = radius_km * 1000
    scored = []
    for incident in list_active_incidents(db):
        try:
            distance = haversine_meters(lat, lon, float(incident.latitude), float(incident.longitude))
        except ValueError:
            logger.warning(f"[INCIDENT] #{incident.id} has unparseable coordinates — skipped")
            continue
        if distance <= radius_m:
            scored.append((distance, incident))
    scored.sort(key=lambda pair: pair[0])
    return [incident for _, incident in scored]


def set_incident_status(db: Session, incident_id: int, active: bool) -> Tuple[Incident, bool]:
    """
    Close (or keep) an incident. Returns (incident, changed).
    Closed incidents are never reopened through this path.
    """
    incident = get_incident(db, incident_id)
    if incident.active == active:
        return incident, False
    if active:
        raise InvalidStatusTransition()

    incident.active = False
    incident.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(incident)
    logger.info(f"[INCIDENT] #{incident.id} closed")
    return incident, True


def update_incident(db: Session, incident_id: int, data: IncidentAdminUpdate) -> Tuple[Incident, bool]:
    """Admin edit. Returns (incident, active_changed). Admins may reopen."""
    incident = get_incident(db, incident_id)
    fields = data.model_dump(exclude_unset=True)
    active_changed = "active" in fields and fields["active"] != incident.active

    if fields.get("type") is not None:
        incident.type = fields["type"].value
    if "comment" in fields:
        incident.comment = fields["comment"]
    if "active" in fields and fields["active"] is not None:
        incident.active = fields["active"]

    incident.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(incident)
    logger.info(f"[ADMIN] Incident #{incident.id} updated: {sorted(fields)}")
    return incident, active_changed


def delete_incident(db: Session, incident_id: int) -> None:
    incident = get_incident(db, incident_id)
    db.query(IncidentVerification).filter(IncidentVerification.incident_id == incident_id).delete()
    db.delete(incident)
    db.commit()
    logger.info(f"[ADMIN] Incident #{incident_id} deleted")
