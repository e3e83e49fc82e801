"""
Error model for the candidate pipeline tools.

Provides structured error codes and sanitized error messages. Validation
failures (INVALID_TRANSITION, UNKNOWN_STATUS) are kept distinct so operators
can tell "not allowed" apart from "corrupt data".
"""

import os
import re
from enum import Enum
from typing import Any, Optional


class ErrorCode(str, Enum):
    """Structured error codes for the pipeline tools."""
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    UNKNOWN_STATUS = "UNKNOWN_STATUS"
    NOT_FOUND = "NOT_FOUND"
    STALE_STATE = "STALE_STATE"
    DB_NOT_FOUND = "DB_NOT_FOUND"
    DB_ERROR = "DB_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ToolError(Exception):
    """Base exception for tool errors with structured error information."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        retryable: bool = False,
        original_error: Optional[Exception] = None
    ):
        """
        Initialize a tool error.

        Args:
            code: The error code
            message: Human-readable error message
            retryable: Whether the operation can be retried
            original_error: The original exception if this wraps another error
        """
        self.code = code
        self.message = message
        self.retryable = retryable
        self.original_error = original_error
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert error to dictionary format for MCP response."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "retryable": self.retryable
            }
        }


def sanitize_path(path: str) -> str:
    """
    Sanitize file paths to avoid exposing sensitive system details.

    Returns only the basename for absolute paths, keeps relative paths.
    """
    if os.path.isabs(path):
        return os.path.basename(path)
    return path


def sanitize_sql_error(error_msg: str) -> str:
    """
    Sanitize SQL error messages to remove sensitive details.

    Removes SQL fragments and absolute paths, keeping only actionable text.
    """
    sanitized = re.sub(r'SQL:.*', '', error_msg, flags=re.IGNORECASE)
    sanitized = re.sub(r'"[^"]*SELECT[^"]*"', '[SQL query]', sanitized, flags=re.IGNORECASE)
    sanitized = re.sub(r"'[^']*SELECT[^']*'", '[SQL query]', sanitized, flags=re.IGNORECASE)
    sanitized = re.sub(
        r'\b(SELECT|INSERT|UPDATE|DELETE)\b.*', '[SQL query]', sanitized, flags=re.IGNORECASE
    )
    sanitized = re.sub(r'/[^\s]+/', '[path]/', sanitized)

    return sanitized.strip()


def sanitize_stack_trace(error_msg: str) -> str:
    """Keep only the first line of a multi-line error message."""
    lines = error_msg.split('\n')
    if lines:
        return lines[0].strip()
    return error_msg


def create_validation_error(message: str) -> ToolError:
    """
    Create a validation error for malformed requests.

    Args:
        message: Description of the validation failure

    Returns:
        ToolError with VALIDATION_ERROR code
    """
    return ToolError(
        code=ErrorCode.VALIDATION_ERROR,
        message=message,
        retryable=False
    )


def create_invalid_transition_error(message: str) -> ToolError:
    """
    Create an error for a move the transition table does not allow.

    Callers should show the reason and leave the application as it is.
    """
    return ToolError(
        code=ErrorCode.INVALID_TRANSITION,
        message=message,
        retryable=False
    )


def create_unknown_status_error(status: Any, field: str = "status") -> ToolError:
    """
    Create a data-integrity error for a status outside the vocabulary.

    Args:
        status: The unrecognized value
        field: Which value was bad (e.g. "status", "target_status")

    Returns:
        ToolError with UNKNOWN_STATUS code
    """
    return ToolError(
        code=ErrorCode.UNKNOWN_STATUS,
        message=f"Unknown {field} value: '{status}' is not a pipeline status",
        retryable=False
    )


def create_not_found_error(application_id: Any = None) -> ToolError:
    """Create an error for an application that does not exist."""
    if application_id is None:
        message = "Application not found"
    else:
        message = f"Application {application_id} not found"
    return ToolError(
        code=ErrorCode.NOT_FOUND,
        message=message,
        retryable=False
    )


def create_stale_state_error(application_id: Any, expected_status: str) -> ToolError:
    """
    Create an error for a compare-and-swap miss on the stored status.

    The caller's view was outdated: refetch and retry once.
    """
    return ToolError(
        code=ErrorCode.STALE_STATE,
        message=(
            f"Application {application_id} is no longer in status '{expected_status}'; "
            "refetch and retry"
        ),
        retryable=True
    )


def create_db_not_found_error(db_path: str) -> ToolError:
    """
    Create a database not found error.

    Args:
        db_path: The database path that was not found

    Returns:
        ToolError with DB_NOT_FOUND code
    """
    sanitized_path = sanitize_path(db_path)
    return ToolError(
        code=ErrorCode.DB_NOT_FOUND,
        message=f"Database not found: {sanitized_path}",
        retryable=False
    )


def create_db_error(
    message: str, retryable: bool = False, original_error: Optional[Exception] = None
) -> ToolError:
    """
    Create a database error with a sanitized message.

    Args:
        message: Description of the database error
        retryable: Whether the operation can be retried
        original_error: The original exception

    Returns:
        ToolError with DB_ERROR code
    """
    sanitized_message = sanitize_sql_error(message)
    sanitized_message = sanitize_stack_trace(sanitized_message)

    return ToolError(
        code=ErrorCode.DB_ERROR,
        message=f"Database error: {sanitized_message}",
        retryable=retryable,
        original_error=original_error
    )


def create_internal_error(message: str, original_error: Optional[Exception] = None) -> ToolError:
    """
    Create an internal error for unexpected exceptions.

    Args:
        message: Description of the internal error
        original_error: The original exception

    Returns:
        ToolError with INTERNAL_ERROR code
    """
    sanitized_message = sanitize_stack_trace(message)

    return ToolError(
        code=ErrorCode.INTERNAL_ERROR,
        message=f"Internal error: {sanitized_message}",
        retryable=True,
        original_error=original_error
    )
