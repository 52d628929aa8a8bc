# app/routers/auth.py
"""
Local account endpoints.
  POST /register — create account, returns {user, token}
  POST /login    — exchange credentials for a bearer token
  POST /logout   — stateless; the client drops its token
  GET  /user     — current user
"""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user
from app.models.user import User
from app.schemas.user import AuthResponse, LoginRequest, UserCreate, UserOut
from app.utils.errors import ConflictError
from app.utils.logger import get_logger
from app.utils.security import create_access_token, hash_password, verify_password

router = APIRouter()
logger = get_logger(__name__)


@router.post("/register", response_model=AuthResponse, status_code=201, summary="Create an account")
def register(body: UserCreate, db: Session = Depends(get_db)):
    if db.query(User).filter(User.username == body.username).first():
        raise ConflictError("Username already exists")
    if db.query(User).filter(User.email == body.email).first():
        raise ConflictError("Email already exists")

    user = User(
        username=body.username,
        email=body.email,
        name=body.name,
        password_hash=hash_password(body.password),
        created_at=datetime.utcnow(),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"[AUTH] Registered user {user.id} ({user.username})")
    return {"user": user, "token": create_access_token(user.id)}


@router.post("/login", response_model=AuthResponse, summary="Log in")
def login(body: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.username == body.username).first()
    if not user or not verify_password(body.password, user.password_hash):
        logger.warning(f"[AUTH] Failed login for {body.username!r}")
        raise HTTPException(status_code=401, detail="Invalid username or password")
    return {"user": user, "token": create_access_token(user.id)}


@router.post("/logout", summary="Log out")
def logout():
    return {"status": "ok"}


@router.get("/user", response_model=UserOut, summary="Current user")
def current_user(user: User = Depends(get_current_user)):
    return user
