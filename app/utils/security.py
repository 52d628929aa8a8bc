# app/utils/security.py
"""
Password hashing and JWT utilities.

  - bcrypt (direct, no passlib) for password hashes
  - python-jose for HS256 access tokens; the `sub` claim is the user id
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import JWTError, jwt

from app.config import settings


def hash_password(plain: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(plain.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain: str, hashed: Optional[str]) -> bool:
    """False for OAuth-only accounts (no local hash)."""
    if not hashed:
        return False
    return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))


def create_access_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    delta = expires_delta or timedelta(hours=settings.JWT_EXPIRY_HOURS)
    expire = datetime.now(tz=timezone.utc) + delta
    payload = {"sub": str(user_id), "exp": expire}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: Optional[str]) -> Optional[int]:
    """
    Return the user id carried by *token*, or None if the token is missing,
    expired, tampered with, or has a non-integer subject.
    """
    if not token:
        return None
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None
    try:
        return int(payload.get("sub"))
    except (TypeError, ValueError):
        return None
