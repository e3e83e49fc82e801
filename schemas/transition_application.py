"""Pydantic schemas for transition_application tool."""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import field_validator

from schemas.common import ActorMixin, DbPathMixin, StrictIgnoreRequest, StrictResponse


class TransitionApplicationRequest(ActorMixin, DbPathMixin, StrictIgnoreRequest):
    """Request schema for transition_application."""

    application_id: int
    target_status: str
    reason: Optional[str] = None
    close_job: bool = False
    dry_run: bool = False

    @field_validator("application_id")
    @classmethod
    def validate_application_id(cls, value: int) -> int:
        if value <= 0:
            raise ValueError(f"Invalid application_id: {value} must be positive")
        return value

    @field_validator("target_status")
    @classmethod
    def validate_target_status(cls, value: str) -> str:
        if not value:
            raise ValueError("Invalid target_status: cannot be empty")
        if value != value.strip():
            raise ValueError(
                f"Invalid target_status: '{value}' contains leading or trailing whitespace"
            )
        return value


class IntentRecord(StrictResponse):
    """Side-effect intent as returned to the caller."""

    type: str
    payload: Dict[str, Any]


class TransitionApplicationResponse(StrictResponse):
    """Success/blocked response schema for transition_application."""

    application_id: int
    previous_status: str
    target_status: str
    action: str
    success: bool
    dry_run: bool
    application: Optional[Dict[str, Any]] = None
    intents: list[IntentRecord] = []
    warnings: list[str] = []
    event_id: Optional[int] = None
    error_code: Optional[str] = None
    error: Optional[str] = None
