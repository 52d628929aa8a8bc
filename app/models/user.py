# app/models/user.py
"""
Users table — local accounts (bcrypt hash) and OAuth-provisioned accounts (no hash).
"""

from sqlalchemy import Column, Integer, String, DateTime
from app.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255))       # NULL for OAuth users
    name = Column(String(200))
    created_at = Column(DateTime, nullable=False)

    def __repr__(self):
        return f"<User {self.id} username={self.username}>"
