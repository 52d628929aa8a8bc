# app/routers/routes.py
"""Saved routes — create with share code, list own routes, fetch by share code."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user
from app.models.user import User
from app.schemas.route import RouteCreate, RouteOut
from app.services import route_service

router = APIRouter()


@router.post("/routes", response_model=RouteOut, status_code=201, summary="Save a route")
def save_route(body: RouteCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return route_service.save_route(db, body, user.id)


@router.get("/routes", response_model=list[RouteOut], summary="My saved routes")
def list_routes(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return route_service.list_user_routes(db, user.id)


@router.get("/routes/recent", response_model=list[RouteOut], summary="My most recent routes")
def recent_routes(limit: int = Query(default=5, ge=1, le=50),
                  user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return route_service.list_user_routes(db, user.id, limit=limit)


@router.get("/routes/share/{code}", response_model=RouteOut, summary="Shared route (no login)")
def shared_route(code: str, db: Session = Depends(get_db)):
    return route_service.get_route_by_share_code(db, code)
