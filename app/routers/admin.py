# app/routers/admin.py
"""
Admin screens — users, all incidents (active + closed), all routes.
Any authenticated user may call these; there is no role model.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_broadcaster, get_current_user
from app.models.user import User
from app.schemas.incident import IncidentAdminUpdate, IncidentOut
from app.schemas.push import EventType
from app.schemas.route import RouteOut
from app.schemas.user import UserOut, UserUpdate
from app.services import incident_service, route_service
from app.services.broadcaster import IncidentBroadcaster
from app.utils.errors import ConflictError, UserNotFound

router = APIRouter()


@router.get("/users", response_model=list[UserOut], summary="List users")
def list_users(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return db.query(User).order_by(User.id).all()


@router.put("/users/{user_id}", response_model=UserOut, summary="Update a user")
def update_user(user_id: int, body: UserUpdate,
                user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    target = db.get(User, user_id)
    if not target:
        raise UserNotFound()
    fields = body.model_dump(exclude_unset=True, exclude_none=True)
    for column in ("username", "email"):
        if column in fields:
            clash = db.query(User).filter(getattr(User, column) == fields[column], User.id != user_id).first()
            if clash:
                raise ConflictError(f"{column.capitalize()} already exists")
    for key, value in fields.items():
        setattr(target, key, value)
    db.commit()
    db.refresh(target)
    return target


@router.delete("/users/{user_id}", summary="Delete a user")
def delete_user(user_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    target = db.get(User, user_id)
    if not target:
        raise UserNotFound()
    db.delete(target)
    db.commit()
    return {"id": user_id, "status": "deleted"}


@router.get("/admin/incidents", response_model=list[IncidentOut], summary="All incidents")
def list_all_incidents(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return incident_service.list_all_incidents(db)


@router.put("/incidents/{incident_id}", response_model=IncidentOut, summary="Edit an incident")
async def edit_incident(
    incident_id: int,
    body: IncidentAdminUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    broadcaster: IncidentBroadcaster = Depends(get_broadcaster),
):
    incident, active_changed = incident_service.update_incident(db, incident_id, body)
    event = EventType.INCIDENT_STATUS_CHANGE if active_changed else EventType.INCIDENT_UPDATE
    await broadcaster.broadcast(event, incident)
    return incident


@router.delete("/incidents/{incident_id}", summary="Delete an incident")
def delete_incident(incident_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    incident_service.delete_incident(db, incident_id)
    return {"id": incident_id, "status": "deleted"}


@router.get("/admin/routes", response_model=list[RouteOut], summary="All saved routes")
def list_all_routes(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return route_service.list_all_routes(db)
