"""
Unit tests for the application snapshot model.
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError
from models.application import Application, IntentType, SideEffectIntent

ROW = {
    "id": 3,
    "job_id": 9,
    "candidate_name": "Ana Torres",
    "candidate_email": "ana@example.com",
    "candidate_phone": None,
    "candidate_id": 77,
    "status": "reviewing",
    "recruiter_id": 10,
    "specialist_id": None,
    "recruiter_notes": None,
    "specialist_notes": None,
    "notes": None,
    "reviewed_at": "",
    "created_at": "2026-01-01T00:00:00.000Z",
    "updated_at": "2026-01-02T10:30:00.250Z",
}


class TestApplication:
    """Tests for Application."""

    def test_from_row(self):
        application = Application.from_row(ROW)

        assert application.candidate.name == "Ana Torres"
        assert application.candidate.candidate_id == 77
        assert application.reviewed_at is None
        assert application.updated_at == datetime(2026, 1, 2, 10, 30, 0, 250000, tzinfo=timezone.utc)

    def test_to_record_formats_timestamps(self):
        record = Application.from_row(ROW).to_record()
        assert record["updated_at"] == "2026-01-02T10:30:00.250Z"
        assert record["reviewed_at"] is None
        assert record["candidate"]["email"] == "ana@example.com"

    def test_unknown_status_is_kept_verbatim(self):
        application = Application.from_row({**ROW, "status": "legacy"})
        assert application.status == "legacy"

    def test_snapshots_are_frozen(self):
        application = Application.from_row(ROW)
        with pytest.raises(ValidationError):
            application.status = "discarded"


class TestSideEffectIntent:
    """Tests for SideEffectIntent."""

    def test_json_dump(self):
        intent = SideEffectIntent(type=IntentType.CLOSE_JOB, payload={"job_id": 9})
        assert intent.model_dump(mode="json") == {
            "type": "close_job",
            "payload": {"job_id": 9},
        }
