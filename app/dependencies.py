# app/dependencies.py
"""
Shared FastAPI dependencies: current user and the process-wide push objects
(registry + broadcaster) that main.py attaches to app.state at startup.
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.services.broadcaster import IncidentBroadcaster
from app.services.connection_registry import ConnectionRegistry
from app.utils.errors import AuthenticationRequired
from app.utils.security import decode_access_token

# Does NOT auto-raise; missing credentials become AuthenticationRequired below
_bearer = HTTPBearer(auto_error=False)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    db: Session = Depends(get_db),
) -> Optional[User]:
    if not credentials:
        return None
    user_id = decode_access_token(credentials.credentials)
    if user_id is None:
        return None
    return db.get(User, user_id)


def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    if user is None:
        raise AuthenticationRequired()
    return user


def get_registry(request: Request) -> ConnectionRegistry:
    return request.app.state.registry


def get_broadcaster(request: Request) -> IncidentBroadcaster:
    return request.app.state.broadcaster
