# app/models/incident_verification.py
"""
Incident verifications — one confirm/deny reaction per (incident, user).
The unique constraint is what makes duplicate rejection atomic.
"""

from sqlalchemy import Column, Integer, DateTime, Boolean, ForeignKey, UniqueConstraint
from app.database import Base


class IncidentVerification(Base):
    __tablename__ = "incident_verifications"
    __table_args__ = (
        UniqueConstraint("incident_id", "user_id", name="uq_verification_incident_user"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    incident_id = Column(Integer, ForeignKey("incidents.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, nullable=False)
    is_confirmed = Column(Boolean, nullable=False)   # True = confirmed, False = denied
    created_at = Column(DateTime, nullable=False)

    def __repr__(self):
        return f"<IncidentVerification incident={self.incident_id} user={self.user_id} confirmed={self.is_confirmed}>"
