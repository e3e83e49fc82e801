"""
Unit tests for input validation and timestamp helpers.
"""

from datetime import datetime, timedelta, timezone

import pytest
from models.errors import ErrorCode, ToolError
from utils.validation import (
    MAX_ASSIGN_BATCH_SIZE,
    format_timestamp,
    get_current_utc_timestamp,
    next_timestamp,
    parse_timestamp,
    validate_batch_size,
    validate_email,
)

T0 = datetime(2026, 2, 4, 3, 47, 36, 966000, tzinfo=timezone.utc)


class TestValidateEmail:
    """Tests for candidate email validation."""

    def test_normalizes_case_and_whitespace(self):
        assert validate_email("  Ana.Torres@Example.COM ") == "ana.torres@example.com"

    @pytest.mark.parametrize("value", ["", "   ", "ana", "ana@", "@example.com", "ana@example", 42])
    def test_invalid(self, value):
        with pytest.raises(ToolError) as exc_info:
            validate_email(value)
        assert exc_info.value.code == ErrorCode.VALIDATION_ERROR


class TestValidateBatchSize:
    """Tests for batch size validation."""

    def test_at_limit(self):
        validate_batch_size([{}] * MAX_ASSIGN_BATCH_SIZE)

    def test_over_limit(self):
        with pytest.raises(ToolError) as exc_info:
            validate_batch_size([{}] * (MAX_ASSIGN_BATCH_SIZE + 1))
        assert "exceeds maximum" in exc_info.value.message


class TestTimestamps:
    """Tests for timestamp formatting, parsing and ordering."""

    def test_format_millisecond_precision(self):
        assert format_timestamp(T0) == "2026-02-04T03:47:36.966Z"

    def test_format_none(self):
        assert format_timestamp(None) is None

    def test_format_converts_offsets_to_utc(self):
        value = datetime(2026, 2, 4, 5, 0, 0, tzinfo=timezone(timedelta(hours=2)))
        assert format_timestamp(value) == "2026-02-04T03:00:00.000Z"

    def test_parse_z_suffix(self):
        assert parse_timestamp("2026-02-04T03:47:36.966Z") == T0

    def test_parse_empty(self):
        assert parse_timestamp(None) is None
        assert parse_timestamp("") is None

    def test_parse_naive_is_utc(self):
        assert parse_timestamp("2026-02-04T03:47:36.966") == T0

    def test_parse_invalid(self):
        with pytest.raises(ToolError) as exc_info:
            parse_timestamp("yesterday")
        assert exc_info.value.code == ErrorCode.VALIDATION_ERROR

    def test_next_timestamp_uses_clock_when_ahead(self):
        now = T0 + timedelta(seconds=1)
        assert next_timestamp(T0, now) == now

    def test_next_timestamp_bumps_when_clock_behind(self):
        assert next_timestamp(T0, T0 - timedelta(hours=1)) == T0 + timedelta(milliseconds=1)

    def test_next_timestamp_bumps_on_same_millisecond(self):
        assert next_timestamp(T0, T0 + timedelta(microseconds=400)) == T0 + timedelta(
            milliseconds=1
        )

    def test_next_timestamp_without_previous(self):
        assert next_timestamp(None, T0) == T0

    def test_current_timestamp_format(self):
        value = get_current_utc_timestamp()
        assert value.endswith("Z")
        assert len(value) == len("2026-02-04T03:47:36.966Z")
