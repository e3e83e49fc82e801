"""
Unit tests for the status vocabulary.

Tests enum values, stage membership, lifecycle flags and parsing.
"""

import pytest
from models.errors import ErrorCode, ToolError
from models.status import (
    INITIAL_STATUSES,
    REACTIVATABLE_STATUSES,
    STATUS_LABELS,
    STATUS_STAGES,
    STATUS_SYNONYMS,
    TERMINAL_STATUSES,
    ActorRole,
    ApplicationStatus,
    PipelineStage,
    canonical_status,
    classify_status,
    parse_role,
    parse_status,
)


class TestApplicationStatus:
    """Tests for ApplicationStatus enum."""

    def test_vocabulary_values(self):
        """The stored vocabulary is exactly these fifteen strings."""
        assert {status.value for status in ApplicationStatus} == {
            "pending",
            "injected_by_admin",
            "reviewing",
            "sent_to_specialist",
            "discarded",
            "evaluating",
            "sent_to_company",
            "company_interested",
            "interested",
            "interviewed",
            "rejected",
            "company_rejected",
            "accepted",
            "hired",
            "archived",
        }

    def test_enum_compares_equal_to_string(self):
        assert ApplicationStatus.PENDING == "pending"
        assert ApplicationStatus("hired") is ApplicationStatus.HIRED

    def test_every_status_has_stage_entry_and_label(self):
        for status in ApplicationStatus:
            assert status in STATUS_STAGES
            assert STATUS_LABELS[status]


class TestStages:
    """Tests for stage membership."""

    @pytest.mark.parametrize(
        "status",
        ["pending", "injected_by_admin", "reviewing", "sent_to_specialist", "discarded"],
    )
    def test_recruiter_stage(self, status):
        assert STATUS_STAGES[ApplicationStatus(status)] == PipelineStage.RECRUITER

    @pytest.mark.parametrize("status", ["evaluating", "sent_to_company"])
    def test_specialist_stage(self, status):
        assert STATUS_STAGES[ApplicationStatus(status)] == PipelineStage.SPECIALIST

    @pytest.mark.parametrize(
        "status",
        [
            "company_interested",
            "interested",
            "interviewed",
            "rejected",
            "company_rejected",
            "accepted",
            "hired",
        ],
    )
    def test_company_stage(self, status):
        assert STATUS_STAGES[ApplicationStatus(status)] == PipelineStage.COMPANY

    def test_archived_has_no_stage(self):
        assert STATUS_STAGES[ApplicationStatus.ARCHIVED] is None

    def test_each_staged_status_in_exactly_one_stage(self):
        for stage in PipelineStage:
            members = {s for s, st in STATUS_STAGES.items() if st == stage}
            for other in PipelineStage:
                if other != stage:
                    assert not members & {s for s, st in STATUS_STAGES.items() if st == other}


class TestLifecycleSets:
    """Tests for initial, terminal and reactivatable sets."""

    def test_initial_statuses(self):
        assert INITIAL_STATUSES == {ApplicationStatus.PENDING, ApplicationStatus.INJECTED_BY_ADMIN}

    def test_terminal_statuses(self):
        assert TERMINAL_STATUSES == {ApplicationStatus.ACCEPTED, ApplicationStatus.HIRED}

    def test_reactivatable_statuses(self):
        assert ApplicationStatus.DISCARDED in REACTIVATABLE_STATUSES
        assert ApplicationStatus.REJECTED in REACTIVATABLE_STATUSES
        assert ApplicationStatus.COMPANY_REJECTED in REACTIVATABLE_STATUSES
        assert not REACTIVATABLE_STATUSES & TERMINAL_STATUSES

    def test_synonyms_fold_onto_canonical(self):
        assert canonical_status(ApplicationStatus.HIRED) == ApplicationStatus.ACCEPTED
        assert canonical_status(ApplicationStatus.INTERESTED) == ApplicationStatus.COMPANY_INTERESTED
        assert canonical_status(ApplicationStatus.COMPANY_REJECTED) == ApplicationStatus.REJECTED
        assert canonical_status(ApplicationStatus.PENDING) == ApplicationStatus.PENDING

    def test_synonyms_share_stage(self):
        for alias, canonical in STATUS_SYNONYMS.items():
            assert STATUS_STAGES[alias] == STATUS_STAGES[canonical]


class TestParsing:
    """Tests for parse_status and parse_role."""

    def test_parse_status_valid(self):
        assert parse_status("sent_to_company") is ApplicationStatus.SENT_TO_COMPANY

    def test_parse_status_passes_members_through(self):
        assert parse_status(ApplicationStatus.REVIEWING) is ApplicationStatus.REVIEWING

    def test_parse_status_unknown(self):
        with pytest.raises(ToolError) as exc_info:
            parse_status("shortlisted")
        assert exc_info.value.code == ErrorCode.UNKNOWN_STATUS
        assert "shortlisted" in exc_info.value.message

    def test_parse_status_is_case_sensitive(self):
        with pytest.raises(ToolError) as exc_info:
            parse_status("Pending")
        assert exc_info.value.code == ErrorCode.UNKNOWN_STATUS

    def test_parse_role_valid(self):
        assert parse_role("company") is ActorRole.COMPANY

    def test_parse_role_unknown(self):
        with pytest.raises(ToolError) as exc_info:
            parse_role("candidate")
        assert exc_info.value.code == ErrorCode.VALIDATION_ERROR
        assert "admin, recruiter, specialist, company" in exc_info.value.message


class TestClassifyStatus:
    """Tests for classify_status."""

    def test_classify_hired(self):
        info = classify_status("hired")
        assert info.stage == PipelineStage.COMPANY
        assert info.is_terminal is True
        assert info.canonical == ApplicationStatus.ACCEPTED
        assert info.label == "In hiring process"

    def test_classify_injected(self):
        info = classify_status("injected_by_admin")
        assert info.is_initial is True
        assert info.is_terminal is False

    def test_to_dict(self):
        data = classify_status("archived").to_dict()
        assert data == {
            "status": "archived",
            "canonical": "archived",
            "stage": None,
            "is_initial": False,
            "is_terminal": False,
            "is_reactivatable": True,
            "label": "Archived",
        }
