# app/models/incident.py
"""
Incidents table — user-reported road conditions.
Counters are only ever incremented by verification_service (single UPDATE).
`active` goes true → false through the status endpoint; only admins reopen or delete.
"""

from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean
from app.database import Base


class Incident(Base):
    __tablename__ = "incidents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(String(50), nullable=False, index=True)
    latitude = Column(String(32), nullable=False)    # decimal string, kept as sent
    longitude = Column(String(32), nullable=False)
    comment = Column(Text)
    reported_by = Column(Integer, nullable=False, index=True)
    active = Column(Boolean, default=True, nullable=False, index=True)
    confirmed = Column(Integer, default=0, nullable=False)
    refuted = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, nullable=False, index=True)
    updated_at = Column(DateTime)

    def __repr__(self):
        return f"<Incident {self.id} type={self.type} active={self.active} +{self.confirmed}/-{self.refuted}>"
