"""
Tests for describe_pipeline_status tool.
"""

from models.status import ApplicationStatus
from tools.describe_pipeline_status import describe_pipeline_status


class TestDescribePipelineStatus:
    """Tests for describe_pipeline_status."""

    def test_whole_vocabulary_in_order(self):
        result = describe_pipeline_status({})
        assert [item["status"] for item in result["statuses"]] == [
            status.value for status in ApplicationStatus
        ]

    def test_single_status(self):
        result = describe_pipeline_status({"status": "sent_to_company"})
        (item,) = result["statuses"]

        assert item["stage"] == "specialist"
        assert item["is_terminal"] is False
        assert item["allowed_targets"]["recruiter"] == []
        assert "interviewed" in item["allowed_targets"]["company"]
        assert "hired" in item["allowed_targets"]["company"]
        assert len(item["allowed_targets"]["admin"]) == len(ApplicationStatus) - 1

    def test_terminal_status(self):
        (item,) = describe_pipeline_status({"status": "hired"})["statuses"]
        assert item["is_terminal"] is True
        assert item["canonical"] == "accepted"
        assert item["label"] == "In hiring process"
        assert item["allowed_targets"]["company"] == []

    def test_archived_has_no_stage(self):
        (item,) = describe_pipeline_status({"status": "archived"})["statuses"]
        assert item["stage"] is None
        assert item["is_reactivatable"] is True

    def test_unknown_status(self):
        result = describe_pipeline_status({"status": "shortlisted"})
        assert result["error"]["code"] == "UNKNOWN_STATUS"

    def test_status_must_be_string(self):
        result = describe_pipeline_status({"status": 3})
        assert result["error"]["code"] == "VALIDATION_ERROR"
