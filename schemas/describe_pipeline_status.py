"""Pydantic schemas for describe_pipeline_status tool."""

from __future__ import annotations

from typing import Optional

from schemas.common import StrictIgnoreRequest, StrictResponse


class DescribePipelineStatusRequest(StrictIgnoreRequest):
    """Request schema for describe_pipeline_status.

    Omitting ``status`` describes the whole vocabulary.
    """

    status: Optional[str] = None


class StatusDescription(StrictResponse):
    """Classification of one status plus the moves each role may make."""

    status: str
    canonical: str
    stage: Optional[str] = None
    is_initial: bool
    is_terminal: bool
    is_reactivatable: bool
    label: str
    allowed_targets: dict[str, list[str]]


class DescribePipelineStatusResponse(StrictResponse):
    """Response schema for describe_pipeline_status."""

    statuses: list[StatusDescription]
