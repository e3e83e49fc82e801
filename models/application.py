"""
Application snapshot and side-effect intent models.

``Application`` is the pipeline-bearing entity. Snapshots are frozen: every
accepted transition produces a new snapshot through ``model_copy`` and the
original is left untouched. ``status`` is kept as the raw stored string so a
corrupt row can still be loaded and reported as UNKNOWN_STATUS by the engine.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from utils.validation import format_timestamp, parse_timestamp


class CandidateRef(BaseModel):
    """Candidate snapshot joined in from the candidate records."""

    model_config = ConfigDict(frozen=True)

    name: str
    email: str
    phone: Optional[str] = None
    candidate_id: Optional[int] = None


class Application(BaseModel):
    """A candidate's application to one job."""

    model_config = ConfigDict(frozen=True)

    id: int
    job_id: int
    candidate: CandidateRef
    status: str
    recruiter_id: Optional[int] = None
    specialist_id: Optional[int] = None
    recruiter_notes: Optional[str] = None
    specialist_notes: Optional[str] = None
    notes: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @field_validator("reviewed_at", "created_at", "updated_at", mode="before")
    @classmethod
    def parse_stored_timestamp(cls, value: Any) -> Any:
        """Accept stored ISO strings with a ``Z`` suffix."""
        return parse_timestamp(value)

    @field_serializer("reviewed_at", "created_at", "updated_at")
    def serialize_timestamp(self, value: Optional[datetime]) -> Optional[str]:
        return format_timestamp(value)

    @classmethod
    def from_row(cls, row: Any) -> "Application":
        """Build a snapshot from an ``applications`` table row."""
        data = dict(row)
        return cls(
            id=data["id"],
            job_id=data["job_id"],
            candidate=CandidateRef(
                name=data["candidate_name"],
                email=data["candidate_email"],
                phone=data.get("candidate_phone"),
                candidate_id=data.get("candidate_id"),
            ),
            status=data["status"],
            recruiter_id=data.get("recruiter_id"),
            specialist_id=data.get("specialist_id"),
            recruiter_notes=data.get("recruiter_notes"),
            specialist_notes=data.get("specialist_notes"),
            notes=data.get("notes"),
            reviewed_at=data.get("reviewed_at"),
            created_at=data["created_at"],
            updated_at=data["updated_at"],
        )

    def to_record(self) -> Dict[str, Any]:
        """JSON-ready representation used in tool responses."""
        return self.model_dump(mode="json")


class IntentType(str, Enum):
    """Side effects the engine asks its collaborators to perform."""

    RECOMPUTE_PIPELINE_STATS = "recompute_pipeline_stats"
    SYNC_ASSIGNMENT_STATUS = "sync_assignment_status"
    NOTIFY_SPECIALIST = "notify_specialist"
    NOTIFY_COMPANY = "notify_company"
    NOTIFY_ADMINS = "notify_admins"
    SCHEDULE_FOLLOW_UP = "schedule_follow_up"
    APPEND_DISCARD_NOTE = "append_discard_note"
    CLOSE_JOB = "close_job"


class SideEffectIntent(BaseModel):
    """Declarative instruction emitted alongside an accepted transition."""

    model_config = ConfigDict(frozen=True)

    type: IntentType
    payload: Dict[str, Any] = Field(default_factory=dict)


class TransitionOutcome(BaseModel):
    """Result of an accepted (or no-op) transition."""

    model_config = ConfigDict(frozen=True)

    application: Application
    previous_status: str
    is_noop: bool = False
    intents: List[SideEffectIntent] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
