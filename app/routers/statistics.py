# app/routers/statistics.py
"""Incident + contribution statistics."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user
from app.models.user import User
from app.services.statistics_service import incident_statistics, user_statistics

router = APIRouter()


@router.get("/statistics/incidents", summary="Incident totals, by type, confirmation averages")
def get_incident_statistics(db: Session = Depends(get_db)):
    return incident_statistics(db)


@router.get("/statistics/user", summary="Current user's contributions")
def get_user_statistics(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return user_statistics(db, user.id)
