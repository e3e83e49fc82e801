"""
MCP tool handlers for assign_candidates and assign_pipeline_staff.

Both are admin operations. Assigning candidates creates applications in an
initial status; assigning staff sets who is responsible for a job's
applications without moving any of them.
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from db.applications_writer import ApplicationsWriter
from models.errors import (
    ToolError,
    create_internal_error,
    create_invalid_transition_error,
    create_validation_error,
)
from models.status import INITIAL_STATUSES, ActorRole, parse_role, parse_status
from schemas.assign_candidates import (
    AssignCandidateResult,
    AssignCandidatesRequest,
    AssignCandidatesResponse,
    AssignPipelineStaffRequest,
    AssignPipelineStaffResponse,
    CandidateInput,
)
from utils.pydantic_error_mapper import map_pydantic_validation_error
from utils.validation import get_current_utc_timestamp, validate_batch_size, validate_email

logger = logging.getLogger(__name__)


def require_admin(actor_role: str, operation: str) -> None:
    """
    Reject non-admin actors.

    Raises:
        ToolError: VALIDATION_ERROR for an unknown role, INVALID_TRANSITION
            for a known role that may not perform ``operation``
    """
    role = parse_role(actor_role)
    if role != ActorRole.ADMIN:
        raise create_invalid_transition_error(
            f"Role '{role.value}' cannot {operation}; only admin may"
        )


def validate_candidate_item(item: Any, index: int) -> tuple[Optional[CandidateInput], Optional[str]]:
    """
    Validate a single candidate item.

    Returns:
        (candidate, None) if valid, (None, error message) if invalid
    """
    if not isinstance(item, dict):
        return None, f"Candidate at index {index} is not an object"

    try:
        candidate = CandidateInput.model_validate(item)
    except ValidationError as e:
        return None, map_pydantic_validation_error(e).message

    if candidate.candidate_id is not None and candidate.candidate_id <= 0:
        return None, f"Invalid candidate_id: {candidate.candidate_id} must be positive"

    try:
        email = validate_email(candidate.email)
    except ToolError as e:
        return None, e.message

    return candidate.model_copy(update={"email": email}), None


def build_failure_response(job_id: int, failures: Dict[int, str], size: int) -> Dict[str, Any]:
    """Whole-batch failure: nothing is created when any item is malformed."""
    results = [
        AssignCandidateResult(
            index=index,
            success=False,
            error=failures.get(index, "Batch rejected because another item is invalid"),
        )
        for index in range(size)
    ]
    return AssignCandidatesResponse(
        job_id=job_id,
        created_count=0,
        skipped_count=0,
        failed_count=len(failures),
        results=results,
    ).model_dump(exclude_none=True)


def assign_candidates(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Attach candidates to a job as new applications.

    1. Validates the request, the actor (admin only) and the initial status
    2. Validates every candidate item; any malformed item rejects the batch
    3. Opens a write transaction, bootstrapping the schema if needed
    4. Skips candidates whose email already has an application for the job
       (or repeats an earlier item of the same batch)
    5. Inserts the rest with one shared timestamp, records a creation event
       per application and commits

    Args:
        args: Dictionary containing parameters:
            - job_id (int): Job the candidates apply to
            - actor_role (str): Must be "admin"
            - candidates (list): Items with name, email, phone?, candidate_id?
            - initial_status (str, optional): pending | injected_by_admin
              (default: injected_by_admin)
            - recruiter_id (int, optional): Responsible recruiter
            - specialist_id (int, optional): Responsible specialist
            - actor_id (int, optional): Admin performing the assignment
            - db_path (str, optional): Database path override

    Returns:
        Dictionary with structure:
        {
            "job_id": int,
            "created_count": int,
            "skipped_count": int,
            "failed_count": int,
            "results": [
                {"index": int, "email": str, "success": bool,
                 "application_id": int, "error": str},
                ...
            ]
        }

        On system error, returns:
        {
            "error": {"code": str, "message": str, "retryable": bool}
        }
    """
    try:
        try:
            request = AssignCandidatesRequest.model_validate(args)
        except ValidationError as e:
            raise map_pydantic_validation_error(e) from e

        require_admin(request.actor_role, "assign candidates")

        initial_status = parse_status(request.initial_status)
        if initial_status not in INITIAL_STATUSES:
            allowed = ", ".join(sorted(status.value for status in INITIAL_STATUSES))
            raise create_validation_error(
                f"Invalid initial_status: '{initial_status.value}'. Allowed values are: {allowed}"
            )

        validate_batch_size(request.candidates)

        if not request.candidates:
            return AssignCandidatesResponse(
                job_id=request.job_id, created_count=0, skipped_count=0, results=[]
            ).model_dump(exclude_none=True)

        candidates: List[CandidateInput] = []
        failures: Dict[int, str] = {}
        for index, item in enumerate(request.candidates):
            candidate, error = validate_candidate_item(item, index)
            if error:
                failures[index] = error
            else:
                candidates.append(candidate)

        if failures:
            return build_failure_response(request.job_id, failures, len(request.candidates))

        with ApplicationsWriter(request.db_path, bootstrap=True, immediate=True) as writer:
            writer.ensure_pipeline_columns()

            existing = writer.find_existing_emails(
                request.job_id, [candidate.email for candidate in candidates]
            )
            timestamp = get_current_utc_timestamp()

            results: List[AssignCandidateResult] = []
            created = 0
            skipped = 0
            for index, candidate in enumerate(candidates):
                if candidate.email in existing:
                    skipped += 1
                    results.append(
                        AssignCandidateResult(
                            index=index,
                            email=candidate.email,
                            success=False,
                            error=f"Candidate {candidate.email} is already assigned to job "
                            f"{request.job_id}",
                        )
                    )
                    continue

                application_id = writer.insert_application(
                    job_id=request.job_id,
                    candidate_name=candidate.name,
                    candidate_email=candidate.email,
                    status=initial_status.value,
                    timestamp=timestamp,
                    candidate_phone=candidate.phone,
                    candidate_id=candidate.candidate_id,
                    recruiter_id=request.recruiter_id,
                    specialist_id=request.specialist_id,
                )
                writer.record_event(
                    application_id=application_id,
                    job_id=request.job_id,
                    from_status=None,
                    to_status=initial_status.value,
                    actor_role=ActorRole.ADMIN.value,
                    actor_id=request.actor_id,
                    created_at=timestamp,
                )
                existing.add(candidate.email)
                created += 1
                results.append(
                    AssignCandidateResult(
                        index=index,
                        email=candidate.email,
                        success=True,
                        application_id=application_id,
                    )
                )

            writer.commit()

        logger.info(
            f"Assigned {created} candidates to job {request.job_id} "
            f"({skipped} already assigned)"
        )

        return AssignCandidatesResponse(
            job_id=request.job_id,
            created_count=created,
            skipped_count=skipped,
            results=results,
        ).model_dump(exclude_none=True)

    except ToolError as e:
        return e.to_dict()

    except Exception as e:
        logger.exception("Unexpected failure in assign_candidates")
        return create_internal_error(message=str(e), original_error=e).to_dict()


def assign_pipeline_staff(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Set the responsible recruiter and/or specialist for every application of a job.

    Statuses and updated_at are untouched. An omitted id leaves the current
    assignment in place; clear_recruiter / clear_specialist unassign.

    Returns:
        {"job_id": int, "updated_count": int, "recruiter_id": int?, "specialist_id": int?,
         "cleared": [str]?}
        or {"error": {...}}
    """
    try:
        try:
            request = AssignPipelineStaffRequest.model_validate(args)
        except ValidationError as e:
            raise map_pydantic_validation_error(e) from e

        require_admin(request.actor_role, "assign pipeline staff")

        with ApplicationsWriter(request.db_path) as writer:
            writer.ensure_pipeline_columns()
            updated_count = writer.assign_staff(
                request.job_id,
                recruiter_id=request.recruiter_id,
                specialist_id=request.specialist_id,
                clear_recruiter=request.clear_recruiter,
                clear_specialist=request.clear_specialist,
            )
            writer.commit()

        cleared = [
            field
            for field, flag in (
                ("recruiter_id", request.clear_recruiter),
                ("specialist_id", request.clear_specialist),
            )
            if flag
        ]

        return AssignPipelineStaffResponse(
            job_id=request.job_id,
            updated_count=updated_count,
            recruiter_id=request.recruiter_id,
            specialist_id=request.specialist_id,
            cleared=cleared or None,
        ).model_dump(exclude_none=True)

    except ToolError as e:
        return e.to_dict()

    except Exception as e:
        logger.exception("Unexpected failure in assign_pipeline_staff")
        return create_internal_error(message=str(e), original_error=e).to_dict()
