# tests/test_verification_service.py
"""Unit tests for the verification aggregator (DB-backed)."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import datetime
from app.models.incident import Incident
from app.models.incident_verification import IncidentVerification
from app.models.user import User
from app.services.verification_service import submit_verification
from app.utils.errors import DuplicateVerification, IncidentNotFound


@pytest.fixture()
def users(db):
    rows = [User(username=f"user{i}", email=f"user{i}@example.com", created_at=datetime.utcnow())
            for i in range(6)]
    db.add_all(rows)
    db.commit()
    return [u.id for u in rows]


@pytest.fixture()
def incident(db, users):
    row = Incident(type="accident", latitude="48.8566", longitude="2.3522",
                   reported_by=users[0], active=True, created_at=datetime.utcnow())
    db.add(row)
    db.commit()
    return row.id


class TestSubmitVerification:
    def test_confirm_increments_confirmed(self, db, users, incident):
        verification, updated = submit_verification(db, incident, users[1], True)

        assert verification.is_confirmed is True
        assert (updated.confirmed, updated.refuted) == (1, 0)
        assert updated.updated_at is not None

    def test_counters_match_distinct_users(self, db, users, incident):
        for uid in users[1:4]:
            submit_verification(db, incident, uid, True)
        for uid in users[4:6]:
            submit_verification(db, incident, uid, False)

        row = db.get(Incident, incident)
        db.refresh(row)
        assert (row.confirmed, row.refuted) == (3, 2)

    def test_duplicate_is_rejected_and_not_counted(self, db, users, incident):
        submit_verification(db, incident, users[1], True)

        with pytest.raises(DuplicateVerification):
            submit_verification(db, incident, users[1], False)

        rows = db.query(IncidentVerification).filter_by(incident_id=incident, user_id=users[1]).all()
        assert len(rows) == 1
        row = db.get(Incident, incident)
        db.refresh(row)
        assert (row.confirmed, row.refuted) == (1, 0)

    def test_unknown_incident(self, db, users):
        with pytest.raises(IncidentNotFound):
            submit_verification(db, 999, users[1], True)
