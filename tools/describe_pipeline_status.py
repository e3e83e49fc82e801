"""
MCP tool handler for describe_pipeline_status.

Exposes the status vocabulary and transition table so callers can render
status pickers without hard-coding the rules.
"""

import logging
from typing import Any, Dict, List

from pydantic import ValidationError

from models.errors import ToolError, create_internal_error
from models.status import ActorRole, ApplicationStatus, classify_status, parse_status
from schemas.describe_pipeline_status import (
    DescribePipelineStatusRequest,
    DescribePipelineStatusResponse,
    StatusDescription,
)
from utils.pydantic_error_mapper import map_pydantic_validation_error
from utils.transition_table import allowed_targets

logger = logging.getLogger(__name__)


def describe_status(status: ApplicationStatus) -> StatusDescription:
    """Classify one status and list each role's allowed targets in vocabulary order."""
    info = classify_status(status)
    targets = {
        role.value: [
            target.value for target in ApplicationStatus if target in allowed_targets(status, role)
        ]
        for role in ActorRole
    }
    return StatusDescription(**info.to_dict(), allowed_targets=targets)


def describe_pipeline_status(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Describe one status, or the whole vocabulary when ``status`` is omitted.

    Returns:
        {"statuses": [{"status", "canonical", "stage", "is_initial", "is_terminal",
                       "is_reactivatable", "label", "allowed_targets": {role: [...]}}]}
        or {"error": {...}} (UNKNOWN_STATUS for a value outside the vocabulary)
    """
    try:
        try:
            request = DescribePipelineStatusRequest.model_validate(args)
        except ValidationError as e:
            raise map_pydantic_validation_error(e) from e

        if request.status is None:
            statuses: List[ApplicationStatus] = list(ApplicationStatus)
        else:
            statuses = [parse_status(request.status)]

        return DescribePipelineStatusResponse(
            statuses=[describe_status(status) for status in statuses]
        ).model_dump()

    except ToolError as e:
        return e.to_dict()

    except Exception as e:
        logger.exception("Unexpected failure in describe_pipeline_status")
        return create_internal_error(message=str(e), original_error=e).to_dict()
