#!/usr/bin/env python3
"""
MCP Server entry point for the candidate pipeline tools.

This server exposes the hiring pipeline state machine to LLM agents and
staff dashboards: moving applications between statuses under role-based
rules, projecting a job's pipeline into stage counts, and the admin
operations that create applications and assign responsible staff.

The server uses the FastMCP framework to expose the tools via the Model
Context Protocol.

Usage:
    python server.py

The server runs in stdio mode by default, which is the standard transport
for MCP servers that are invoked by LLM agents.
"""

import logging
from mcp.server.fastmcp import FastMCP
from tools.transition_application import transition_application
from tools.get_job_pipeline import get_job_pipeline
from tools.assign_candidates import assign_candidates, assign_pipeline_staff
from tools.describe_pipeline_status import describe_pipeline_status
from config import get_config

# Create FastMCP server instance
config = get_config()
mcp = FastMCP(
    name=config.server_name,
    instructions=(
        "This server provides tools for the candidate hiring pipeline. "
        "\n\n"
        "STATUS CHANGES:\n"
        "Use transition_application to move one application to a new status. "
        "The actor_role must be resolved by the caller (admin, recruiter, specialist, company). "
        "Moves outside the role's transition table come back with action='blocked' and are never written. "
        "Resubmitting the current status is a no-op. Use dry_run=true to preview a move and its intents. "
        "Returned intents (notifications, follow-ups, stats recompute) are instructions for the caller; "
        "this server does not send e-mail or schedule jobs itself."
        "\n\n"
        "READ TOOLS:\n"
        "Use get_job_pipeline to get per-status and per-stage counts for a job. "
        "Use describe_pipeline_status to inspect the vocabulary and which role may move where."
        "\n\n"
        "ADMIN TOOLS:\n"
        "Use assign_candidates to create applications for a job in an initial status. "
        "Use assign_pipeline_staff to set the responsible recruiter/specialist without changing statuses."
    ),
)


@mcp.tool(
    name="transition_application",
    description=(
        "Move one application to a new pipeline status under role-based rules. "
        "Validates against the transition table, applies assignment guards, writes the status "
        "with a compare-and-swap, appends an audit event, and returns side-effect intents."
    ),
)
def transition_application_tool(
    application_id: int,
    actor_role: str,
    target_status: str,
    actor_id: int | None = None,
    reason: str | None = None,
    close_job: bool | None = None,
    dry_run: bool | None = None,
    db_path: str | None = None,
) -> dict:
    """
    Move one application to a new pipeline status.

    Args:
        application_id: Application to move (positive integer).
        actor_role: Requesting role: admin, recruiter, specialist or company.
        target_status: Desired status. Must be one of: pending, injected_by_admin,
            reviewing, sent_to_specialist, discarded, evaluating, sent_to_company,
            company_interested, interested, interviewed, rejected, company_rejected,
            accepted, hired, archived.
        actor_id: Requesting staff member; recruiters and specialists must be the
            one assigned to the application.
        reason: Discard/rejection reason, appended to the notes of the acting role.
        close_job: Emit a close_job intent when accepting (default: false).
        dry_run: Validate and preview without writing (default: false).
        db_path: Optional SQLite path override (default: data/pipeline.db).

    Returns:
        Dictionary with structure (success/blocked):
        {
            "application_id": int,
            "previous_status": str,
            "target_status": str,
            "action": str,          # updated | noop | would_update | blocked
            "success": bool,
            "dry_run": bool,
            "application": {...},
            "intents": [{"type": str, "payload": {...}}],
            "warnings": [str],
            "event_id": int,        # When written
            "error_code": str,      # Blocked only
            "error": str            # Blocked only
        }

        On system error, returns:
        {
            "error": {
                "code": str,        # VALIDATION_ERROR, UNKNOWN_STATUS, NOT_FOUND, STALE_STATE,
                                    # DB_NOT_FOUND, DB_ERROR, INTERNAL_ERROR
                "message": str,
                "retryable": bool
            }
        }

    Examples:
        # Recruiter forwards a pending candidate
        transition_application_tool(
            application_id=42, actor_role="recruiter", target_status="sent_to_specialist"
        )

        # Company rejects with a reason
        transition_application_tool(
            application_id=42, actor_role="company", target_status="rejected",
            reason="Salary expectations too high"
        )

        # Preview an admin override
        transition_application_tool(
            application_id=42, actor_role="admin", target_status="evaluating", dry_run=True
        )
    """
    args = {
        "application_id": application_id,
        "actor_role": actor_role,
        "target_status": target_status,
    }

    if actor_id is not None:
        args["actor_id"] = actor_id
    if reason is not None:
        args["reason"] = reason
    if close_job is not None:
        args["close_job"] = close_job
    if dry_run is not None:
        args["dry_run"] = dry_run
    if db_path is not None:
        args["db_path"] = db_path

    return transition_application(args)


@mcp.tool(
    name="get_job_pipeline",
    description=(
        "Summarize a job's candidates by status and by pipeline stage "
        "(recruiter, specialist, company). Read-only."
    ),
)
def get_job_pipeline_tool(
    job_id: int,
    include_applications: bool | None = None,
    db_path: str | None = None,
) -> dict:
    """
    Summarize a job's pipeline.

    Args:
        job_id: Job to summarize (positive integer).
        include_applications: Also return application snapshots
            (default: PIPELINE_INCLUDE_APPLICATIONS, true).
        db_path: Optional SQLite path override.

    Returns:
        {"job_id": int, "stats": {...}, "applications": [...]} or {"error": {...}}
    """
    args = {"job_id": job_id}

    if include_applications is not None:
        args["include_applications"] = include_applications
    if db_path is not None:
        args["db_path"] = db_path

    return get_job_pipeline(args)


@mcp.tool(
    name="assign_candidates",
    description=(
        "Admin only. Create applications for a job in an initial status "
        "(injected_by_admin or pending). Already-assigned candidates are skipped per item."
    ),
)
def assign_candidates_tool(
    job_id: int,
    actor_role: str,
    candidates: list[dict],
    initial_status: str | None = None,
    recruiter_id: int | None = None,
    specialist_id: int | None = None,
    actor_id: int | None = None,
    db_path: str | None = None,
) -> dict:
    """
    Attach candidates to a job.

    Args:
        job_id: Job the candidates apply to.
        actor_role: Must be "admin".
        candidates: Items with name, email, phone (optional), candidate_id (optional).
        initial_status: pending or injected_by_admin (default: injected_by_admin).
        recruiter_id: Responsible recruiter for the new applications.
        specialist_id: Responsible specialist for the new applications.
        actor_id: Admin performing the assignment.
        db_path: Optional SQLite path override.

    Returns:
        {"job_id", "created_count", "skipped_count", "failed_count", "results": [...]}
        or {"error": {...}}
    """
    args = {"job_id": job_id, "actor_role": actor_role, "candidates": candidates}

    if initial_status is not None:
        args["initial_status"] = initial_status
    if recruiter_id is not None:
        args["recruiter_id"] = recruiter_id
    if specialist_id is not None:
        args["specialist_id"] = specialist_id
    if actor_id is not None:
        args["actor_id"] = actor_id
    if db_path is not None:
        args["db_path"] = db_path

    return assign_candidates(args)


@mcp.tool(
    name="assign_pipeline_staff",
    description=(
        "Admin only. Set the responsible recruiter and/or specialist for all applications "
        "of a job without changing their statuses. clear_recruiter / clear_specialist "
        "remove an existing assignment."
    ),
)
def assign_pipeline_staff_tool(
    job_id: int,
    actor_role: str,
    recruiter_id: int | None = None,
    specialist_id: int | None = None,
    clear_recruiter: bool = False,
    clear_specialist: bool = False,
    actor_id: int | None = None,
    db_path: str | None = None,
) -> dict:
    """
    Assign pipeline staff to a job's applications.

    Returns:
        {"job_id", "updated_count", "recruiter_id", "specialist_id", "cleared"}
        or {"error": {...}}
    """
    args = {"job_id": job_id, "actor_role": actor_role}

    if recruiter_id is not None:
        args["recruiter_id"] = recruiter_id
    if specialist_id is not None:
        args["specialist_id"] = specialist_id
    if clear_recruiter:
        args["clear_recruiter"] = True
    if clear_specialist:
        args["clear_specialist"] = True
    if actor_id is not None:
        args["actor_id"] = actor_id
    if db_path is not None:
        args["db_path"] = db_path

    return assign_pipeline_staff(args)


@mcp.tool(
    name="describe_pipeline_status",
    description=(
        "Describe pipeline statuses: stage, initial/terminal/reactivatable flags, label, "
        "and the targets each role may move to. Omit status for the whole vocabulary."
    ),
)
def describe_pipeline_status_tool(status: str | None = None) -> dict:
    """Describe one status or the whole vocabulary."""
    args = {}

    if status is not None:
        args["status"] = status

    return describe_pipeline_status(args)


def main():
    """
    Main entry point for the MCP server.

    Runs the server in stdio mode, which is the standard transport
    for MCP servers that are invoked by LLM agents.
    """
    # Load and setup configuration
    config.setup_logging()

    # Log startup information
    logger = logging.getLogger(__name__)
    logger.info("Starting candidate pipeline MCP Server")
    logger.info(f"Server name: {config.server_name}")
    logger.info(f"Database path: {config.db_path}")

    # Validate configuration and log warnings
    warnings = config.validate()
    for warning in warnings:
        logger.warning(warning)

    # Start the server
    logger.info("Server starting in stdio mode")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
