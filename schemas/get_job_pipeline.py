"""Pydantic schemas for get_job_pipeline tool."""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import Field, field_validator

from schemas.common import DbPathMixin, StrictIgnoreRequest, StrictResponse


class GetJobPipelineRequest(DbPathMixin, StrictIgnoreRequest):
    """Request schema for get_job_pipeline."""

    job_id: int
    include_applications: Optional[bool] = None

    @field_validator("job_id")
    @classmethod
    def validate_job_id(cls, value: int) -> int:
        if value <= 0:
            raise ValueError(f"Invalid job_id: {value} must be positive")
        return value


class RecruiterStageCounts(StrictResponse):
    """Recruiter-stage breakdown (pending includes injected_by_admin)."""

    pending: int = 0
    reviewing: int = 0
    sent_to_specialist: int = 0
    discarded: int = 0


class SpecialistStageCounts(StrictResponse):
    """Specialist-stage breakdown."""

    evaluating: int = 0
    sent_to_company: int = 0


class CompanyStageCounts(StrictResponse):
    """Company-stage breakdown with synonyms folded together."""

    interested: int = 0
    interviewed: int = 0
    rejected: int = 0
    accepted: int = 0


class StageBreakdown(StrictResponse):
    recruiter: RecruiterStageCounts = Field(default_factory=RecruiterStageCounts)
    specialist: SpecialistStageCounts = Field(default_factory=SpecialistStageCounts)
    company: CompanyStageCounts = Field(default_factory=CompanyStageCounts)


class StageTotals(StrictResponse):
    recruiter: int = 0
    specialist: int = 0
    company: int = 0


class PipelineStats(StrictResponse):
    """Per-job pipeline projection.

    ``sum(counts_by_status.values()) == total`` and
    ``recruiter + specialist + company + unstaged == total`` always hold.
    """

    job_id: Optional[int] = None
    total: int
    counts_by_status: Dict[str, int]
    stages: StageBreakdown
    stage_totals: StageTotals
    unstaged: int = 0


class GetJobPipelineResponse(StrictResponse):
    """Success response schema for get_job_pipeline."""

    job_id: int
    stats: PipelineStats
    applications: Optional[list[Dict[str, Any]]] = None
