"""Shared schema primitives for pipeline tool request/response models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


def validate_optional_non_empty_str(value: Optional[str], field_name: str) -> Optional[str]:
    """Validate optional string fields that cannot be empty/whitespace."""
    if value is None:
        return None
    if not value.strip():
        raise ValueError(f"Invalid {field_name}: cannot be empty")
    return value


def validate_optional_positive_id(value: Optional[int], field_name: str) -> Optional[int]:
    """Validate optional identifiers that must be positive when present."""
    if value is None:
        return None
    if value <= 0:
        raise ValueError(f"Invalid {field_name}: {value} must be positive")
    return value


class StrictIgnoreRequest(BaseModel):
    """Request base with strict typing and ignored unknown fields."""

    model_config = ConfigDict(extra="ignore", strict=True)


class StrictResponse(BaseModel):
    """Response/result base with strict typing and forbidden unknown fields."""

    model_config = ConfigDict(extra="forbid")


class DbPathMixin(BaseModel):
    """Reusable db_path field validation."""

    db_path: Optional[str] = None

    @field_validator("db_path")
    @classmethod
    def validate_db_path(cls, value: Optional[str]) -> Optional[str]:
        return validate_optional_non_empty_str(value, "db_path")


class ActorMixin(BaseModel):
    """Requesting actor, already resolved by the caller's auth layer."""

    actor_role: str
    actor_id: Optional[int] = None

    @field_validator("actor_role")
    @classmethod
    def validate_actor_role(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Invalid actor_role: cannot be empty")
        return value

    @field_validator("actor_id")
    @classmethod
    def validate_actor_id(cls, value: Optional[int]) -> Optional[int]:
        return validate_optional_positive_id(value, "actor_id")
