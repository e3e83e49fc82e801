"""Pydantic schemas for assign_candidates and assign_pipeline_staff tools."""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import field_validator, model_validator

from schemas.common import (
    ActorMixin,
    DbPathMixin,
    StrictIgnoreRequest,
    StrictResponse,
    validate_optional_positive_id,
)


class AssignCandidatesRequest(ActorMixin, DbPathMixin, StrictIgnoreRequest):
    """Request schema for assign_candidates.

    ``candidates`` items are validated one by one by the tool so a single bad
    item is reported per item instead of failing the whole request.
    """

    job_id: int
    candidates: list[Any]
    initial_status: str = "injected_by_admin"
    recruiter_id: Optional[int] = None
    specialist_id: Optional[int] = None

    @field_validator("job_id")
    @classmethod
    def validate_job_id(cls, value: int) -> int:
        if value <= 0:
            raise ValueError(f"Invalid job_id: {value} must be positive")
        return value

    @field_validator("recruiter_id", "specialist_id")
    @classmethod
    def validate_staff_id(cls, value: Optional[int], info) -> Optional[int]:
        return validate_optional_positive_id(value, info.field_name)


class CandidateInput(StrictIgnoreRequest):
    """One candidate to attach to the job."""

    name: str
    email: str
    phone: Optional[str] = None
    candidate_id: Optional[int] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Invalid name: cannot be empty")
        return value.strip()


class AssignCandidateResult(StrictResponse):
    """Per-item result schema for assign_candidates."""

    index: int
    email: Optional[str] = None
    success: bool
    application_id: Optional[int] = None
    error: Optional[str] = None


class AssignCandidatesResponse(StrictResponse):
    """Response schema for assign_candidates."""

    job_id: int
    created_count: int
    skipped_count: int
    failed_count: int = 0
    results: list[AssignCandidateResult]


class AssignPipelineStaffRequest(ActorMixin, DbPathMixin, StrictIgnoreRequest):
    """Request schema for assign_pipeline_staff."""

    job_id: int
    recruiter_id: Optional[int] = None
    specialist_id: Optional[int] = None
    clear_recruiter: bool = False
    clear_specialist: bool = False

    @field_validator("job_id")
    @classmethod
    def validate_job_id(cls, value: int) -> int:
        if value <= 0:
            raise ValueError(f"Invalid job_id: {value} must be positive")
        return value

    @field_validator("recruiter_id", "specialist_id")
    @classmethod
    def validate_staff_id(cls, value: Optional[int], info) -> Optional[int]:
        return validate_optional_positive_id(value, info.field_name)

    @model_validator(mode="after")
    def require_one_assignment(self) -> "AssignPipelineStaffRequest":
        if self.clear_recruiter and self.recruiter_id is not None:
            raise ValueError("recruiter_id cannot be combined with clear_recruiter")
        if self.clear_specialist and self.specialist_id is not None:
            raise ValueError("specialist_id cannot be combined with clear_specialist")
        if (
            self.recruiter_id is None
            and self.specialist_id is None
            and not self.clear_recruiter
            and not self.clear_specialist
        ):
            raise ValueError(
                "At least one of recruiter_id, specialist_id, clear_recruiter "
                "or clear_specialist is required"
            )
        return self


class AssignPipelineStaffResponse(StrictResponse):
    """Response schema for assign_pipeline_staff."""

    job_id: int
    updated_count: int
    recruiter_id: Optional[int] = None
    specialist_id: Optional[int] = None
    cleared: Optional[List[str]] = None
