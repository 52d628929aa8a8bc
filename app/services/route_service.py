# app/services/route_service.py
"""Saved routes + share codes."""

import secrets
from datetime import datetime
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.models.route import Route
from app.schemas.route import RouteCreate
from app.utils.errors import RouteNotFound
from app.utils.logger import get_logger

logger = get_logger(__name__)

_SHARE_CODE_ATTEMPTS = 3


def new_share_code() -> str:
    return secrets.token_hex(settings.SHARE_CODE_BYTES)


def save_route(db: Session, data: RouteCreate, user_id: int) -> Route:
    for attempt in range(_SHARE_CODE_ATTEMPTS):
        route = Route(
            user_id=user_id,
            origin=data.origin,
            destination=data.destination,
            route_data=data.route_data.model_dump(mode="json", by_alias=True),
            avoid_tolls=data.avoid_tolls,
            avoid_highways=data.avoid_highways,
            share_code=new_share_code(),
            created_at=datetime.utcnow(),
        )
        db.add(route)
        try:
            db.commit()
        except IntegrityError:
            # share_code collision, draw again
            db.rollback()
            logger.warning(f"[ROUTE] Share code collision (attempt {attempt + 1})")
            continue
        db.refresh(route)
        logger.info(f"[ROUTE] Saved route #{route.id} for user {user_id} share={route.share_code}")
        return route
    raise RuntimeError("Could not allocate a unique share code")


def list_user_routes(db: Session, user_id: int, limit: int = None) -> List[Route]:
    q = db.query(Route).filter(Route.user_id == user_id).order_by(Route.created_at.desc(), Route.id.desc())
    if limit:
        q = q.limit(limit)
    return q.all()


def list_all_routes(db: Session) -> List[Route]:
    return db.query(Route).order_by(Route.created_at.desc(), Route.id.desc()).all()


def get_route_by_share_code(db: Session, share_code: str) -> Route:
    route = db.query(Route).filter(Route.share_code == share_code).first()
    if not route:
        raise RouteNotFound()
    return route
