"""
Main MCP tool handler for transition_application.

Orchestrates request validation, the pipeline engine, and the
compare-and-swap write so a status change is either fully applied (status,
timestamps and audit event in one transaction) or not applied at all.
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from config import get_config
from db.applications_writer import ApplicationsWriter
from models.application import Application, TransitionOutcome
from models.errors import (
    ErrorCode,
    ToolError,
    create_internal_error,
    create_not_found_error,
)
from models.status import parse_role, parse_status
from schemas.transition_application import (
    TransitionApplicationRequest,
    TransitionApplicationResponse,
)
from utils.pipeline_engine import apply_transition
from utils.pydantic_error_mapper import map_pydantic_validation_error
from utils.validation import format_timestamp

logger = logging.getLogger(__name__)


def _build_response(
    application_id: int,
    previous_status: str,
    target_status: str,
    action: str,
    success: bool,
    dry_run: bool,
    application: Optional[Application] = None,
    outcome: Optional[TransitionOutcome] = None,
    event_id: Optional[int] = None,
    error_code: Optional[str] = None,
    error_message: Optional[str] = None,
) -> Dict[str, Any]:
    """Build structured success/blocked response payload."""
    intents: List[Dict[str, Any]] = []
    warnings: List[str] = []
    if outcome is not None:
        intents = [intent.model_dump(mode="json") for intent in outcome.intents]
        warnings = list(outcome.warnings)

    return TransitionApplicationResponse(
        application_id=application_id,
        previous_status=previous_status,
        target_status=target_status,
        action=action,
        success=success,
        dry_run=dry_run,
        application=application.to_record() if application is not None else None,
        intents=intents,
        warnings=warnings,
        event_id=event_id,
        error_code=error_code,
        error=error_message,
    ).model_dump(exclude_none=True)


def build_blocked_response(
    application: Application, target_status: str, dry_run: bool, error: ToolError
) -> Dict[str, Any]:
    """Build a blocked response for a move the transition table rejects."""
    return _build_response(
        application_id=application.id,
        previous_status=application.status,
        target_status=target_status,
        action="blocked",
        success=False,
        dry_run=dry_run,
        application=application,
        error_code=error.code.value,
        error_message=error.message,
    )


def transition_application(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Move one application to a new pipeline status.

    This is the main entry point for the MCP tool:
    1. Validates input parameters
    2. Opens a write transaction and loads the application
    3. Runs the pipeline engine (table lookup, guards, snapshot, intents)
    4. Returns "noop" when the application is already in the target status
    5. Returns "would_update" without writing when dry_run=true
    6. Otherwise compare-and-swaps the status, appends an audit event and commits

    Args:
        args: Dictionary containing parameters:
            - application_id (int): Application to move
            - actor_role (str): admin | recruiter | specialist | company
            - target_status (str): Desired status (must be in the vocabulary)
            - actor_id (int, optional): Requesting staff member for assignment checks
            - reason (str, optional): Discard/rejection reason
            - close_job (bool, optional): Close the job when accepting (default: False)
            - dry_run (bool, optional): Validate without writing (default: False)
            - db_path (str, optional): Database path override

    Returns:
        Dictionary with structure (success case):
        {
            "application_id": int,
            "previous_status": str,
            "target_status": str,
            "action": str,              # "updated", "noop", "would_update"
            "success": true,
            "dry_run": bool,
            "application": {...},       # Snapshot after the move
            "intents": [{"type": str, "payload": {...}}],
            "warnings": [str],
            "event_id": int             # Audit event id, when written
        }

        Dictionary with structure (blocked case):
        {
            "application_id": int,
            "previous_status": str,
            "target_status": str,
            "action": "blocked",
            "success": false,
            "dry_run": bool,
            "application": {...},       # Unchanged snapshot
            "error_code": "INVALID_TRANSITION",
            "error": str                # Which role, which status, why
        }

        On system error, returns:
        {
            "error": {
                "code": str,            # VALIDATION_ERROR, UNKNOWN_STATUS, NOT_FOUND,
                                        # STALE_STATE, DB_NOT_FOUND, DB_ERROR, INTERNAL_ERROR
                "message": str,
                "retryable": bool
            }
        }
    """
    try:
        try:
            request = TransitionApplicationRequest.model_validate(args)
        except ValidationError as e:
            raise map_pydantic_validation_error(e) from e

        role = parse_role(request.actor_role)
        target = parse_status(request.target_status)
        follow_up_days = get_config().follow_up_days

        with ApplicationsWriter(request.db_path, immediate=not request.dry_run) as writer:
            writer.ensure_pipeline_columns()

            row = writer.fetch_application(request.application_id)
            if row is None:
                raise create_not_found_error(request.application_id)
            application = Application.from_row(row)

            try:
                outcome = apply_transition(
                    application,
                    role,
                    target,
                    actor_id=request.actor_id,
                    reason=request.reason,
                    close_job=request.close_job,
                    follow_up_days=follow_up_days,
                )
            except ToolError as e:
                if e.code != ErrorCode.INVALID_TRANSITION:
                    raise
                writer.rollback()
                return build_blocked_response(application, target.value, request.dry_run, e)

            if outcome.is_noop:
                writer.rollback()
                return _build_response(
                    application_id=application.id,
                    previous_status=application.status,
                    target_status=target.value,
                    action="noop",
                    success=True,
                    dry_run=request.dry_run,
                    application=application,
                )

            if request.dry_run:
                writer.rollback()
                return _build_response(
                    application_id=application.id,
                    previous_status=application.status,
                    target_status=target.value,
                    action="would_update",
                    success=True,
                    dry_run=True,
                    application=outcome.application,
                    outcome=outcome,
                )

            updated = outcome.application
            updated_at = format_timestamp(updated.updated_at)
            reviewed_at = None
            if updated.reviewed_at != application.reviewed_at:
                reviewed_at = format_timestamp(updated.reviewed_at)

            writer.save_transition(
                application_id=application.id,
                expected_status=application.status,
                new_status=updated.status,
                updated_at=updated_at,
                reviewed_at=reviewed_at,
            )
            event_id = writer.record_event(
                application_id=application.id,
                job_id=application.job_id,
                from_status=application.status,
                to_status=updated.status,
                actor_role=role.value,
                actor_id=request.actor_id,
                intents=[intent.model_dump(mode="json") for intent in outcome.intents],
                created_at=updated_at,
            )
            writer.commit()

            return _build_response(
                application_id=application.id,
                previous_status=application.status,
                target_status=target.value,
                action="updated",
                success=True,
                dry_run=False,
                application=updated,
                outcome=outcome,
                event_id=event_id,
            )

    except ToolError as e:
        return e.to_dict()

    except Exception as e:
        logger.exception("Unexpected failure in transition_application")
        return create_internal_error(message=str(e), original_error=e).to_dict()
