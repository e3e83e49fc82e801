"""
Centralized, type-safe status definitions for the candidate pipeline.

This module is the single source of truth for every status value an
application can carry, the roles that move applications between them, and
the stage each status belongs to. Dashboards and tools read labels and
classification from here instead of keeping their own maps.

All Enums inherit from ``(str, Enum)`` so that members compare equal to
plain strings and serialize naturally to JSON at API boundaries.
"""

from enum import Enum
from typing import Any, Dict, NamedTuple, Optional

from models.errors import create_unknown_status_error, create_validation_error


class ApplicationStatus(str, Enum):
    """Enum for statuses stored in the ``applications`` table.

    Canonical flow:
        pending | injected_by_admin  ->  reviewing  ->  sent_to_specialist
        sent_to_specialist  ->  evaluating  ->  sent_to_company
        sent_to_company  ->  company_interested -> interviewed -> accepted
        any active stage  ->  discarded | rejected  (reactivatable)
    """

    # Recruiter stage
    PENDING = "pending"
    INJECTED_BY_ADMIN = "injected_by_admin"
    REVIEWING = "reviewing"
    SENT_TO_SPECIALIST = "sent_to_specialist"
    DISCARDED = "discarded"

    # Specialist stage
    EVALUATING = "evaluating"
    SENT_TO_COMPANY = "sent_to_company"

    # Company stage
    COMPANY_INTERESTED = "company_interested"
    INTERESTED = "interested"
    INTERVIEWED = "interviewed"
    REJECTED = "rejected"
    COMPANY_REJECTED = "company_rejected"
    ACCEPTED = "accepted"
    HIRED = "hired"

    # Outside every stage, admin only
    ARCHIVED = "archived"


class ActorRole(str, Enum):
    """Roles allowed to request a pipeline transition."""

    ADMIN = "admin"
    RECRUITER = "recruiter"
    SPECIALIST = "specialist"
    COMPANY = "company"


class PipelineStage(str, Enum):
    """The three dashboards an application passes through."""

    RECRUITER = "recruiter"
    SPECIALIST = "specialist"
    COMPANY = "company"


# Alternate spellings used by different dashboards for the same concept.
STATUS_SYNONYMS: Dict[ApplicationStatus, ApplicationStatus] = {
    ApplicationStatus.INTERESTED: ApplicationStatus.COMPANY_INTERESTED,
    ApplicationStatus.COMPANY_REJECTED: ApplicationStatus.REJECTED,
    ApplicationStatus.HIRED: ApplicationStatus.ACCEPTED,
}

INITIAL_STATUSES = frozenset({ApplicationStatus.PENDING, ApplicationStatus.INJECTED_BY_ADMIN})

TERMINAL_STATUSES = frozenset({ApplicationStatus.ACCEPTED, ApplicationStatus.HIRED})

REACTIVATABLE_STATUSES = frozenset(
    {
        ApplicationStatus.DISCARDED,
        ApplicationStatus.REJECTED,
        ApplicationStatus.COMPANY_REJECTED,
        ApplicationStatus.ARCHIVED,
    }
)

STATUS_STAGES: Dict[ApplicationStatus, Optional[PipelineStage]] = {
    ApplicationStatus.PENDING: PipelineStage.RECRUITER,
    ApplicationStatus.INJECTED_BY_ADMIN: PipelineStage.RECRUITER,
    ApplicationStatus.REVIEWING: PipelineStage.RECRUITER,
    ApplicationStatus.SENT_TO_SPECIALIST: PipelineStage.RECRUITER,
    ApplicationStatus.DISCARDED: PipelineStage.RECRUITER,
    ApplicationStatus.EVALUATING: PipelineStage.SPECIALIST,
    ApplicationStatus.SENT_TO_COMPANY: PipelineStage.SPECIALIST,
    ApplicationStatus.COMPANY_INTERESTED: PipelineStage.COMPANY,
    ApplicationStatus.INTERESTED: PipelineStage.COMPANY,
    ApplicationStatus.INTERVIEWED: PipelineStage.COMPANY,
    ApplicationStatus.REJECTED: PipelineStage.COMPANY,
    ApplicationStatus.COMPANY_REJECTED: PipelineStage.COMPANY,
    ApplicationStatus.ACCEPTED: PipelineStage.COMPANY,
    ApplicationStatus.HIRED: PipelineStage.COMPANY,
    ApplicationStatus.ARCHIVED: None,
}

STATUS_LABELS: Dict[ApplicationStatus, str] = {
    ApplicationStatus.PENDING: "Pending review",
    ApplicationStatus.INJECTED_BY_ADMIN: "Assigned by admin",
    ApplicationStatus.REVIEWING: "In review",
    ApplicationStatus.SENT_TO_SPECIALIST: "Sent to specialist",
    ApplicationStatus.DISCARDED: "Discarded",
    ApplicationStatus.EVALUATING: "In evaluation",
    ApplicationStatus.SENT_TO_COMPANY: "Sent to company",
    ApplicationStatus.COMPANY_INTERESTED: "Company interested",
    ApplicationStatus.INTERESTED: "Company interested",
    ApplicationStatus.INTERVIEWED: "Interviewed",
    ApplicationStatus.REJECTED: "Rejected by company",
    ApplicationStatus.COMPANY_REJECTED: "Rejected by company",
    ApplicationStatus.ACCEPTED: "In hiring process",
    ApplicationStatus.HIRED: "In hiring process",
    ApplicationStatus.ARCHIVED: "Archived",
}


class StatusInfo(NamedTuple):
    """Classification of a single status value."""

    status: ApplicationStatus
    canonical: ApplicationStatus
    stage: Optional[PipelineStage]
    is_initial: bool
    is_terminal: bool
    is_reactivatable: bool
    label: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert classification to a JSON-ready dictionary."""
        return {
            "status": self.status.value,
            "canonical": self.canonical.value,
            "stage": self.stage.value if self.stage else None,
            "is_initial": self.is_initial,
            "is_terminal": self.is_terminal,
            "is_reactivatable": self.is_reactivatable,
            "label": self.label,
        }


def parse_status(value: Any) -> ApplicationStatus:
    """
    Convert a raw value into a vocabulary member.

    Args:
        value: Status string (or ApplicationStatus member)

    Returns:
        The matching ApplicationStatus

    Raises:
        ToolError: UNKNOWN_STATUS if the value is not part of the vocabulary
    """
    if isinstance(value, ApplicationStatus):
        return value
    try:
        return ApplicationStatus(value)
    except ValueError:
        raise create_unknown_status_error(value) from None


def parse_role(value: Any) -> ActorRole:
    """
    Convert a raw value into an actor role.

    Raises:
        ToolError: VALIDATION_ERROR if the role is not recognized
    """
    if isinstance(value, ActorRole):
        return value
    try:
        return ActorRole(value)
    except ValueError:
        allowed = ", ".join(role.value for role in ActorRole)
        raise create_validation_error(
            f"Invalid actor_role value: '{value}'. Allowed values are: {allowed}"
        ) from None


def canonical_status(status: ApplicationStatus) -> ApplicationStatus:
    """Fold a synonym onto its canonical spelling."""
    return STATUS_SYNONYMS.get(status, status)


def classify_status(value: Any) -> StatusInfo:
    """
    Classify a status into stage, lifecycle flags and display label.

    Examples:
        >>> info = classify_status("hired")
        >>> info.stage.value, info.is_terminal, info.canonical.value
        ('company', True, 'accepted')

        >>> classify_status("archived").stage is None
        True
    """
    status = parse_status(value)
    return StatusInfo(
        status=status,
        canonical=canonical_status(status),
        stage=STATUS_STAGES[status],
        is_initial=status in INITIAL_STATUSES,
        is_terminal=status in TERMINAL_STATUSES,
        is_reactivatable=status in REACTIVATABLE_STATUSES,
        label=STATUS_LABELS[status],
    )
