"""
Pipeline engine for application status transitions.

This module enforces the transition rules and builds the updated snapshot:
- Noop when target equals current status
- Table lookup for (current status, role, target status)
- Assignment guards for recruiter and specialist actors
- Admin override with warning when no staff role could make the move
- Declarative side-effect intents, never executed here

The engine performs no I/O. Persisting the snapshot and delivering intents
belong to the caller.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from models.application import Application, IntentType, SideEffectIntent, TransitionOutcome
from models.errors import (
    ErrorCode,
    create_invalid_transition_error,
    create_not_found_error,
    create_unknown_status_error,
)
from models.status import (
    ActorRole,
    ApplicationStatus,
    PipelineStage,
    STATUS_STAGES,
    canonical_status,
    parse_role,
)
from utils.transition_table import (
    OVERRIDE_ROLES,
    allowed_targets,
    can_transition,
    is_listed_transition,
)
from utils.validation import format_timestamp, next_timestamp

logger = logging.getLogger(__name__)

# Days until the staffing team follows up on candidates sent to a company
DEFAULT_FOLLOW_UP_DAYS = 45

# Targets that record a review decision (sets reviewed_at)
REVIEW_STATUSES = frozenset(
    {
        ApplicationStatus.REVIEWING,
        ApplicationStatus.COMPANY_INTERESTED,
        ApplicationStatus.INTERVIEWED,
        ApplicationStatus.REJECTED,
        ApplicationStatus.ACCEPTED,
    }
)

DISCARD_STATUSES = frozenset({ApplicationStatus.DISCARDED, ApplicationStatus.REJECTED})

# Notes field each role's discard reason is appended to
NOTES_FIELD_BY_ROLE = {
    ActorRole.RECRUITER: "recruiter_notes",
    ActorRole.SPECIALIST: "specialist_notes",
    ActorRole.COMPANY: "notes",
    ActorRole.ADMIN: "notes",
}


class TransitionResult:
    """Result of a transition policy check."""

    def __init__(
        self,
        allowed: bool,
        is_noop: bool = False,
        error_code: Optional[ErrorCode] = None,
        error_message: Optional[str] = None,
        warnings: Optional[List[str]] = None,
    ):
        """
        Initialize a transition result.

        Args:
            allowed: Whether the transition is allowed
            is_noop: Whether this is a no-op (target == current)
            error_code: Error code if transition is blocked
            error_message: Error message if transition is blocked
            warnings: List of warning messages (e.g., for admin override)
        """
        self.allowed = allowed
        self.is_noop = is_noop
        self.error_code = error_code
        self.error_message = error_message
        self.warnings = warnings or []

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary format."""
        result = {"allowed": self.allowed, "is_noop": self.is_noop}
        if self.error_code:
            result["error_code"] = self.error_code.value
        if self.error_message:
            result["error_message"] = self.error_message
        if self.warnings:
            result["warnings"] = self.warnings
        return result


def _blocked(message: str) -> TransitionResult:
    return TransitionResult(
        allowed=False, error_code=ErrorCode.INVALID_TRANSITION, error_message=message
    )


def _check_status(value: Any, field: str) -> ApplicationStatus:
    try:
        return ApplicationStatus(value)
    except ValueError:
        raise create_unknown_status_error(value, field) from None


def evaluate_transition(
    current_status: Any,
    actor_role: Any,
    target_status: Any,
    application: Optional[Application] = None,
    actor_id: Optional[int] = None,
) -> TransitionResult:
    """
    Validate a status transition according to the table and guards.

    Policy rules:
    1. If target_status == current_status, return success with is_noop=True
    2. Override roles (admin) may make any move; moves no staff role could
       make carry a warning
    3. Otherwise the triple must be present in the transition table
    4. Recruiters may only send to a specialist once one is assigned
    5. When actor_id is given, recruiters/specialists must be the assigned one

    Args:
        current_status: The application's stored status
        actor_role: The requesting role, already resolved by the caller
        target_status: The desired target status
        application: Snapshot used by the assignment guards
        actor_id: Identity of the requesting staff member, if known

    Returns:
        TransitionResult indicating whether the transition is allowed

    Raises:
        ToolError: UNKNOWN_STATUS for statuses outside the vocabulary,
            VALIDATION_ERROR for an unknown role

    Examples:
        >>> evaluate_transition("pending", "recruiter", "reviewing").allowed
        True
        >>> evaluate_transition("reviewing", "recruiter", "reviewing").is_noop
        True
        >>> result = evaluate_transition("pending", "specialist", "sent_to_company")
        >>> result.allowed, result.error_code.value
        (False, 'INVALID_TRANSITION')
    """
    current = _check_status(current_status, "status")
    target = _check_status(target_status, "target_status")
    role = parse_role(actor_role)

    # Rule 1: Noop
    if target == current:
        return TransitionResult(allowed=True, is_noop=True)

    # Rule 2: Override roles
    if role in OVERRIDE_ROLES:
        warnings = []
        if not is_listed_transition(current, target):
            warnings.append(
                f"Admin override: no staff role may move '{current.value}' to "
                f"'{target.value}'; allowed because actor_role is '{role.value}'"
            )
        return TransitionResult(allowed=True, warnings=warnings)

    # Rule 3: Table lookup
    if not can_transition(current, role, target):
        allowed = allowed_targets(current, role)
        if allowed:
            options = ", ".join(f"'{s.value}'" for s in sorted(allowed, key=lambda s: s.value))
            hint = f"Allowed targets for role '{role.value}' from '{current.value}': {options}"
        else:
            hint = f"Role '{role.value}' cannot act on applications in '{current.value}'"
        return _blocked(
            f"Role '{role.value}' cannot move application from '{current.value}' "
            f"to '{target.value}'. {hint}"
        )

    if application is None:
        return TransitionResult(allowed=True)

    # Rule 4: Specialist must be assigned before a recruiter hands over
    if (
        role == ActorRole.RECRUITER
        and target == ApplicationStatus.SENT_TO_SPECIALIST
        and application.specialist_id is None
    ):
        return _blocked(
            f"Role 'recruiter' cannot move application {application.id} to "
            "'sent_to_specialist': no specialist is assigned to this application"
        )

    # Rule 5: Only the assigned staff member may act
    if actor_id is not None:
        assigned = None
        if role == ActorRole.RECRUITER:
            assigned = application.recruiter_id
        elif role == ActorRole.SPECIALIST:
            assigned = application.specialist_id
        if assigned is not None and assigned != actor_id:
            return _blocked(
                f"Role '{role.value}' user {actor_id} is not assigned to application "
                f"{application.id} (assigned: {assigned})"
            )

    return TransitionResult(allowed=True)


def build_intents(
    application: Application,
    updated: Application,
    role: ActorRole,
    target: ApplicationStatus,
    reason: Optional[str] = None,
    close_job: bool = False,
    follow_up_days: int = DEFAULT_FOLLOW_UP_DAYS,
) -> List[SideEffectIntent]:
    """
    Derive the side-effect intents for an accepted transition.

    Every accepted change asks for the job's pipeline stats to be recomputed.
    Hand-offs between stages ask for notifications; company decisions notify
    admins; discards with a reason append a note for the acting role.
    """
    canonical = canonical_status(target)
    base = {"application_id": application.id, "job_id": application.job_id}
    intents = [
        SideEffectIntent(
            type=IntentType.RECOMPUTE_PIPELINE_STATS, payload={"job_id": application.job_id}
        )
    ]

    # Assignment sync and hand-off notices need a specialist on the application
    if canonical == ApplicationStatus.SENT_TO_SPECIALIST and application.specialist_id is not None:
        intents.append(
            SideEffectIntent(
                type=IntentType.SYNC_ASSIGNMENT_STATUS,
                payload={
                    "job_id": application.job_id,
                    "specialist_id": application.specialist_id,
                    "recruiter_status": ApplicationStatus.SENT_TO_SPECIALIST.value,
                    "specialist_status": ApplicationStatus.PENDING.value,
                },
            )
        )
        intents.append(
            SideEffectIntent(
                type=IntentType.NOTIFY_SPECIALIST,
                payload={**base, "specialist_id": application.specialist_id},
            )
        )

    if canonical == ApplicationStatus.SENT_TO_COMPANY:
        follow_up_at = updated.updated_at + timedelta(days=follow_up_days)
        intents.append(
            SideEffectIntent(
                type=IntentType.SCHEDULE_FOLLOW_UP,
                payload={
                    "job_id": application.job_id,
                    "follow_up_at": format_timestamp(follow_up_at),
                },
            )
        )
        intents.append(
            SideEffectIntent(
                type=IntentType.NOTIFY_COMPANY,
                payload={**base, "candidate_name": application.candidate.name},
            )
        )

    if role == ActorRole.COMPANY and STATUS_STAGES[target] == PipelineStage.COMPANY:
        intents.append(
            SideEffectIntent(
                type=IntentType.NOTIFY_ADMINS,
                payload={
                    **base,
                    "status": target.value,
                    "candidate_name": application.candidate.name,
                },
            )
        )

    if canonical in DISCARD_STATUSES and reason and reason.strip():
        intents.append(
            SideEffectIntent(
                type=IntentType.APPEND_DISCARD_NOTE,
                payload={
                    **base,
                    "notes_field": NOTES_FIELD_BY_ROLE[role],
                    "note": f"[DISCARDED: {application.candidate.name}] {reason.strip()}",
                },
            )
        )

    if canonical == ApplicationStatus.ACCEPTED and close_job:
        intents.append(
            SideEffectIntent(
                type=IntentType.CLOSE_JOB,
                payload={"job_id": application.job_id, "closed_reason": "success"},
            )
        )

    return intents


def apply_transition(
    application: Optional[Application],
    actor_role: Any,
    target_status: Any,
    *,
    actor_id: Optional[int] = None,
    reason: Optional[str] = None,
    close_job: bool = False,
    now: Optional[datetime] = None,
    follow_up_days: int = DEFAULT_FOLLOW_UP_DAYS,
) -> TransitionOutcome:
    """
    Validate a requested transition and produce the updated snapshot.

    The input snapshot is never modified. On success the returned snapshot
    carries ``status = target_status`` and an ``updated_at`` strictly greater
    than before. Resubmitting the current status is a no-op success with no
    intents.

    Args:
        application: Current snapshot (None if the lookup found nothing)
        actor_role: Requesting role, resolved by the caller's auth layer
        target_status: Desired status
        actor_id: Identity of the requesting staff member, if known
        reason: Free-text reason recorded with discards/rejections
        close_job: Ask for the job to be closed when the candidate is accepted
        now: Clock override for the new updated_at
        follow_up_days: Offset for the follow-up scheduled on sent_to_company

    Returns:
        TransitionOutcome with the new snapshot, intents and warnings

    Raises:
        ToolError: NOT_FOUND, UNKNOWN_STATUS, VALIDATION_ERROR or
            INVALID_TRANSITION; the input snapshot is left as it was
    """
    if application is None:
        raise create_not_found_error()

    result = evaluate_transition(
        application.status, actor_role, target_status, application=application, actor_id=actor_id
    )
    role = parse_role(actor_role)
    logger.debug("Transition check for application %s: %s", application.id, result.to_dict())

    if not result.allowed:
        logger.info(
            "Rejected transition for application %s: %s", application.id, result.error_message
        )
        raise create_invalid_transition_error(result.error_message)

    if result.is_noop:
        logger.debug(
            "No-op transition for application %s (already '%s')",
            application.id,
            application.status,
        )
        return TransitionOutcome(
            application=application, previous_status=application.status, is_noop=True
        )

    target = ApplicationStatus(target_status)
    updated_at = next_timestamp(application.updated_at, now)
    update: Dict[str, Any] = {"status": target.value, "updated_at": updated_at}
    if canonical_status(target) in REVIEW_STATUSES:
        update["reviewed_at"] = updated_at

    updated = application.model_copy(update=update)
    intents = build_intents(
        application,
        updated,
        role,
        target,
        reason=reason,
        close_job=close_job,
        follow_up_days=follow_up_days,
    )

    for warning in result.warnings:
        logger.warning(warning)
    logger.info(
        "Application %s moved from '%s' to '%s' by %s",
        application.id,
        application.status,
        target.value,
        role.value,
    )

    return TransitionOutcome(
        application=updated,
        previous_status=application.status,
        intents=intents,
        warnings=result.warnings,
    )
