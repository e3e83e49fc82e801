"""
Unit and property tests for pipeline aggregation.

Tests per-status counts, stage folding and the total invariants.
"""

import logging

from hypothesis import given, strategies as st
from models.status import ApplicationStatus
from utils.pipeline_stats import compute_pipeline_stats

VOCABULARY = [status.value for status in ApplicationStatus]


class TestComputePipelineStats:
    """Tests for compute_pipeline_stats."""

    def test_mixed_job(self):
        """Six recruiter-stage, three specialist-stage and one hired application."""
        statuses = (
            ["pending"] * 3
            + ["reviewing"] * 2
            + ["sent_to_specialist"]
            + ["evaluating"] * 2
            + ["sent_to_company"]
            + ["hired"]
        )
        stats = compute_pipeline_stats(statuses, job_id=7)

        assert stats.job_id == 7
        assert stats.total == 10
        assert stats.stage_totals.recruiter == 6
        assert stats.stage_totals.specialist == 3
        assert stats.stage_totals.company == 1
        assert stats.stages.company.accepted == 1
        assert stats.counts_by_status["hired"] == 1
        assert stats.counts_by_status["accepted"] == 0
        assert stats.stages.recruiter.sent_to_specialist == 1

    def test_empty_job(self):
        stats = compute_pipeline_stats([])
        assert stats.total == 0
        assert set(stats.counts_by_status) == set(VOCABULARY)
        assert all(count == 0 for count in stats.counts_by_status.values())

    def test_injected_counts_as_pending(self):
        stats = compute_pipeline_stats(["pending", "injected_by_admin"])
        assert stats.stages.recruiter.pending == 2
        assert stats.counts_by_status["injected_by_admin"] == 1

    def test_synonyms_fold_in_company_stage(self):
        stats = compute_pipeline_stats(
            ["interested", "company_interested", "rejected", "company_rejected", "accepted"]
        )
        assert stats.stages.company.interested == 2
        assert stats.stages.company.rejected == 2
        assert stats.stages.company.accepted == 1
        assert stats.stage_totals.company == 5

    def test_archived_is_unstaged(self):
        stats = compute_pipeline_stats(["archived", "pending"])
        assert stats.unstaged == 1
        assert stats.stage_totals.recruiter == 1
        assert stats.total == 2

    def test_unknown_status_counted_and_logged(self, caplog):
        with caplog.at_level(logging.WARNING):
            stats = compute_pipeline_stats(["pending", "shortlisted"], job_id=9)

        assert stats.total == 2
        assert stats.unstaged == 1
        assert stats.counts_by_status["shortlisted"] == 1
        assert "shortlisted" in caplog.text

    def test_accepts_rows_and_enum_members(self):
        stats = compute_pipeline_stats(
            [{"status": "pending"}, ApplicationStatus.PENDING, "pending"]
        )
        assert stats.counts_by_status["pending"] == 3

    def test_model_dump_shape(self):
        data = compute_pipeline_stats(["evaluating"], job_id=1).model_dump()
        assert set(data) == {
            "job_id",
            "total",
            "counts_by_status",
            "stages",
            "stage_totals",
            "unstaged",
        }
        assert data["stages"]["specialist"] == {"evaluating": 1, "sent_to_company": 0}


class TestPipelineStatsProperties:
    """Property tests for the aggregation invariants."""

    @given(st.lists(st.sampled_from(VOCABULARY), max_size=60))
    def test_counts_sum_to_total(self, statuses):
        stats = compute_pipeline_stats(statuses)
        assert stats.total == len(statuses)
        assert sum(stats.counts_by_status.values()) == stats.total

    @given(st.lists(st.sampled_from(VOCABULARY + ["legacy", "unknown"]), max_size=60))
    def test_stage_totals_plus_unstaged_equal_total(self, statuses):
        stats = compute_pipeline_stats(statuses)
        totals = stats.stage_totals
        assert totals.recruiter + totals.specialist + totals.company + stats.unstaged == stats.total

    @given(st.lists(st.sampled_from(VOCABULARY), max_size=60))
    def test_stage_breakdown_sums_to_stage_total(self, statuses):
        stats = compute_pipeline_stats(statuses)
        stages = stats.stages.model_dump()
        for stage, counts in stages.items():
            assert sum(counts.values()) == getattr(stats.stage_totals, stage)

    @given(st.lists(st.sampled_from(VOCABULARY), max_size=30))
    def test_order_does_not_matter(self, statuses):
        assert compute_pipeline_stats(statuses) == compute_pipeline_stats(list(reversed(statuses)))
