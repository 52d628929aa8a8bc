# app/schemas/user.py
from datetime import datetime
from typing import Optional

from pydantic import Field

from app.schemas.base import CamelModel


class UserCreate(CamelModel):
    username: str = Field(min_length=3, max_length=100)
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", max_length=255)
    password: str = Field(min_length=6, max_length=72)   # bcrypt limit
    name: Optional[str] = Field(default=None, max_length=200)


class LoginRequest(CamelModel):
    username: str
    password: str


class UserUpdate(CamelModel):
    username: Optional[str] = Field(default=None, min_length=3, max_length=100)
    email: Optional[str] = Field(default=None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    name: Optional[str] = Field(default=None, max_length=200)


class UserOut(CamelModel):
    id: int
    username: str
    email: str
    name: Optional[str] = None
    created_at: datetime


class AuthResponse(CamelModel):
    user: UserOut
    token: str
