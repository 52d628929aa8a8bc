# app/routers/incidents.py
"""
Incident endpoints — report, list, nearby, verify, close.
Every write is re-broadcast to all open push channels after it commits.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.dependencies import get_broadcaster, get_current_user
from app.models.user import User
from app.schemas.incident import (
    IncidentCreate, IncidentOut, IncidentStatusUpdate, VerificationCreate, VerificationOut,
)
from app.schemas.push import EventType
from app.services import incident_service
from app.services.broadcaster import IncidentBroadcaster
from app.services.verification_service import submit_verification

router = APIRouter()


@router.post("/incidents", response_model=IncidentOut, status_code=201, summary="Report an incident")
async def report_incident(
    body: IncidentCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    broadcaster: IncidentBroadcaster = Depends(get_broadcaster),
):
    incident = incident_service.create_incident(db, body, reporter_id=user.id)
    await broadcaster.broadcast(EventType.NEW_INCIDENT, incident)
    return incident


@router.get("/incidents", response_model=list[IncidentOut], summary="Active incidents")
def list_incidents(db: Session = Depends(get_db)):
    return incident_service.list_active_incidents(db)


@router.get("/incidents/nearby", response_model=list[IncidentOut], summary="Active incidents within a radius")
def list_nearby_incidents(
    lat: Optional[float] = Query(default=None, ge=-90, le=90),
    lon: Optional[float] = Query(default=None, ge=-180, le=180),
    radius: Optional[float] = Query(default=None, gt=0, description="Radius in km (default 5)"),
    db: Session = Depends(get_db),
):
    if lat is None or lon is None:
        raise HTTPException(status_code=400, detail="Latitude and longitude are required")
    radius_km = radius or settings.NEARBY_DEFAULT_RADIUS_KM
    return incident_service.list_incidents_nearby(db, lat, lon, radius_km)


async def _verify(incident_id, body, user, db, broadcaster):
    verification, incident = submit_verification(db, incident_id, user.id, body.is_confirmed)
    await broadcaster.broadcast(EventType.INCIDENT_UPDATE, incident)
    return verification


@router.post("/incidents/{incident_id}/verify", response_model=VerificationOut, status_code=201,
             summary="Confirm or deny an incident")
async def verify_incident(
    incident_id: int,
    body: VerificationCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    broadcaster: IncidentBroadcaster = Depends(get_broadcaster),
):
    """One verification per user and incident; a second attempt returns 400."""
    return await _verify(incident_id, body, user, db, broadcaster)


@router.post("/incidents/{incident_id}/react", response_model=VerificationOut, status_code=201,
             summary="Confirm or deny an incident (legacy path)")
async def react_to_incident(
    incident_id: int,
    body: VerificationCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    broadcaster: IncidentBroadcaster = Depends(get_broadcaster),
):
    return await _verify(incident_id, body, user, db, broadcaster)


@router.put("/incidents/{incident_id}/status", response_model=IncidentOut, summary="Close an incident")
async def update_incident_status(
    incident_id: int,
    body: IncidentStatusUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    broadcaster: IncidentBroadcaster = Depends(get_broadcaster),
):
    incident, changed = incident_service.set_incident_status(db, incident_id, body.active)
    if changed:
        await broadcaster.broadcast(EventType.INCIDENT_STATUS_CHANGE, incident)
    return incident
