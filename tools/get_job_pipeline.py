"""
MCP tool handler for get_job_pipeline.

Read-only projection of one job's applications into per-status and
per-stage counts, optionally with the application snapshots themselves.
"""

import logging
from typing import Any, Dict

from pydantic import ValidationError

from config import get_config
from db.applications_reader import get_connection, list_applications
from models.application import Application
from models.errors import ToolError, create_internal_error
from schemas.get_job_pipeline import GetJobPipelineRequest, GetJobPipelineResponse
from utils.pipeline_stats import compute_pipeline_stats
from utils.pydantic_error_mapper import map_pydantic_validation_error

logger = logging.getLogger(__name__)


def get_job_pipeline(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Summarize where every candidate of a job sits in the pipeline.

    Args:
        args: Dictionary containing parameters:
            - job_id (int): Job to summarize
            - include_applications (bool, optional): Return application snapshots
              (default: PIPELINE_INCLUDE_APPLICATIONS)
            - db_path (str, optional): Database path override

    Returns:
        Dictionary with structure:
        {
            "job_id": int,
            "stats": {
                "job_id": int,
                "total": int,
                "counts_by_status": {status: int},
                "stages": {"recruiter": {...}, "specialist": {...}, "company": {...}},
                "stage_totals": {"recruiter": int, "specialist": int, "company": int},
                "unstaged": int
            },
            "applications": [...]   # Only when include_applications is true
        }

        On error, returns:
        {
            "error": {
                "code": str,        # VALIDATION_ERROR, DB_NOT_FOUND, DB_ERROR, INTERNAL_ERROR
                "message": str,
                "retryable": bool
            }
        }
    """
    try:
        try:
            request = GetJobPipelineRequest.model_validate(args)
        except ValidationError as e:
            raise map_pydantic_validation_error(e) from e

        include_applications = request.include_applications
        if include_applications is None:
            include_applications = get_config().include_applications

        with get_connection(request.db_path) as conn:
            rows = list_applications(conn, request.job_id)

        stats = compute_pipeline_stats(rows, job_id=request.job_id)

        applications = None
        if include_applications:
            applications = [Application.from_row(row).to_record() for row in rows]

        logger.debug(f"Job {request.job_id}: {stats.total} applications")

        return GetJobPipelineResponse(
            job_id=request.job_id,
            stats=stats,
            applications=applications,
        ).model_dump(exclude_none=True)

    except ToolError as e:
        return e.to_dict()

    except Exception as e:
        logger.exception("Unexpected failure in get_job_pipeline")
        return create_internal_error(message=str(e), original_error=e).to_dict()
