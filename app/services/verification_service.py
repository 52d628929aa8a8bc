# app/services/verification_service.py
"""
Verification Aggregator — turns a confirm/deny into a counter increment.

The verification insert and the counter UPDATE run in one transaction.
Duplicates are detected by the (incident_id, user_id) unique constraint, so
two concurrent submissions from the same user cannot both succeed, and the
counter is incremented in SQL (confirmed = confirmed + 1), never read-modify-write.
"""

from datetime import datetime
from typing import Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.incident import Incident
from app.models.incident_verification import IncidentVerification
from app.services.incident_service import get_incident
from app.utils.errors import DuplicateVerification
from app.utils.logger import get_logger

logger = get_logger(__name__)


def submit_verification(
    db: Session, incident_id: int, user_id: int, is_confirmed: bool
) -> Tuple[IncidentVerification, Incident]:
    get_incident(db, incident_id)  # 404 before touching anything

    now = datetime.utcnow()
    verification = IncidentVerification(
        incident_id=incident_id, user_id=user_id, is_confirmed=is_confirmed, created_at=now,
    )
    counter = Incident.confirmed if is_confirmed else Incident.refuted

    try:
        db.add(verification)
        db.flush()
        db.query(Incident).filter(Incident.id == incident_id).update(
            {counter: counter + 1, Incident.updated_at: now},
            synchronize_session=False,
        )
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(f"[VERIFY] Duplicate verification rejected: incident={incident_id} user={user_id}")
        raise DuplicateVerification()

    db.refresh(verification)
    incident = get_incident(db, incident_id)
    db.refresh(incident)
    logger.info(
        f"[VERIFY] incident={incident_id} user={user_id} "
        f"{'confirmed' if is_confirmed else 'denied'} → +{incident.confirmed}/-{incident.refuted}"
    )
    return verification, incident
