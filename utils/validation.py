"""
Input validation and timestamp utilities for the pipeline tools.

Timestamps are stored as ISO 8601 UTC strings with millisecond precision
(``YYYY-MM-DDTHH:MM:SS.mmmZ``), so every comparison and bump happens at
millisecond resolution.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from models.errors import create_validation_error

# Smallest step that survives a round-trip through the stored format
TIMESTAMP_RESOLUTION = timedelta(milliseconds=1)

# Constants for assign_candidates validation
MAX_ASSIGN_BATCH_SIZE = 100


def validate_email(email: Any) -> str:
    """
    Validate and normalize a candidate email.

    Emails are compared case-insensitively, so they are stored lowercased.
    """
    if not isinstance(email, str) or not email.strip():
        raise create_validation_error("Invalid candidate email: cannot be empty")

    normalized = email.strip().lower()
    local, sep, domain = normalized.partition("@")
    if not sep or not local or "." not in domain:
        raise create_validation_error(f"Invalid candidate email: '{email}'")

    return normalized


def validate_batch_size(items: list) -> None:
    """Reject assignment batches above the configured maximum."""
    if len(items) > MAX_ASSIGN_BATCH_SIZE:
        raise create_validation_error(
            f"Batch size {len(items)} exceeds maximum of {MAX_ASSIGN_BATCH_SIZE}"
        )


def utc_now() -> datetime:
    """Current time as an aware UTC datetime truncated to milliseconds."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """
    Format a datetime as an ISO 8601 UTC string with millisecond precision.

    Naive datetimes are assumed to already be in UTC.

    Example: 2026-02-04T03:47:36.966Z
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a stored timestamp into an aware UTC datetime.

    Accepts datetimes, ISO strings with a ``Z`` suffix or explicit offset,
    and empty values (returned as None).
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise create_validation_error(f"Invalid timestamp: '{value}'") from None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def next_timestamp(previous: Optional[datetime], now: Optional[datetime] = None) -> datetime:
    """
    Return a timestamp strictly greater than ``previous``.

    Uses ``now`` when the clock has moved past ``previous``; otherwise bumps
    ``previous`` by one millisecond so ordering survives clock skew and
    same-millisecond writes.
    """
    current = parse_timestamp(now) if now is not None else utc_now()
    current = current.replace(microsecond=(current.microsecond // 1000) * 1000)
    if previous is None:
        return current
    previous = parse_timestamp(previous)
    if current > previous:
        return current
    return previous + TIMESTAMP_RESOLUTION


def get_current_utc_timestamp() -> str:
    """ISO 8601 UTC timestamp string for the current instant."""
    return format_timestamp(utc_now())
