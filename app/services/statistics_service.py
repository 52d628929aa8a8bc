# app/services/statistics_service.py
"""Read-only aggregates over incidents and routes (statistics page)."""

from datetime import datetime, timedelta

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.incident import Incident
from app.models.route import Route
from app.schemas.incident import IncidentType


def _count_by_type(db: Session, *filters) -> dict:
    rows = db.query(Incident.type, func.count(Incident.id)).filter(*filters).group_by(Incident.type).all()
    counts = {t.value: 0 for t in IncidentType}
    for incident_type, count in rows:
        counts[incident_type] = count
    return counts


def incident_statistics(db: Session) -> dict:
    total = db.query(func.count(Incident.id)).scalar() or 0
    active = db.query(func.count(Incident.id)).filter(Incident.active.is_(True)).scalar() or 0
    avg_confirmed = db.query(func.avg(Incident.confirmed)).scalar() or 0
    avg_refuted = db.query(func.avg(Incident.refuted)).scalar() or 0
    since = datetime.utcnow() - timedelta(hours=24)
    last_24h = db.query(func.count(Incident.id)).filter(Incident.created_at >= since).scalar() or 0

    return {
        "total": total,
        "byType": _count_by_type(db),
        "active": active,
        "resolved": total - active,
        "averageConfirmations": round(float(avg_confirmed), 2),
        "averageRefutations": round(float(avg_refuted), 2),
        "last24Hours": last_24h,
    }


def user_statistics(db: Session, user_id: int) -> dict:
    by_type = _count_by_type(db, Incident.reported_by == user_id)
    routes = db.query(func.count(Route.id)).filter(Route.user_id == user_id).scalar() or 0
    return {
        "totalReported": sum(by_type.values()),
        "byType": by_type,
        "totalRoutes": routes,
    }
