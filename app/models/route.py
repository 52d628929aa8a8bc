# app/models/route.py
"""
Saved routes. route_data holds a validated RouteData (app.schemas.route) as JSON.
share_code lets anyone fetch the route without logging in.
"""

from sqlalchemy import Column, Integer, String, DateTime, Boolean, JSON
from app.database import Base


class Route(Base):
    __tablename__ = "routes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)
    origin = Column(String(255), nullable=False)
    destination = Column(String(255), nullable=False)
    route_data = Column(JSON, nullable=False)
    avoid_tolls = Column(Boolean, default=False, nullable=False)
    avoid_highways = Column(Boolean, default=False, nullable=False)
    share_code = Column(String(64), unique=True, index=True)
    created_at = Column(DateTime, nullable=False, index=True)

    def __repr__(self):
        return f"<Route {self.id} {self.origin} → {self.destination} share={self.share_code}>"
