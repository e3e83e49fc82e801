"""
Property-based tests for pipeline transitions.

Tests invariants that should hold for every status, role and target.
"""

from datetime import datetime, timedelta, timezone

import pytest
from hypothesis import given, strategies as st
from models.application import Application, CandidateRef
from models.errors import ErrorCode, ToolError
from models.status import TERMINAL_STATUSES, ActorRole, ApplicationStatus
from utils.pipeline_engine import apply_transition
from utils.transition_table import allowed_targets, can_transition

T0 = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)

statuses = st.sampled_from(list(ApplicationStatus))
roles = st.sampled_from(list(ActorRole))
staff_roles = st.sampled_from([ActorRole.RECRUITER, ActorRole.SPECIALIST, ActorRole.COMPANY])
clock_offsets = st.integers(min_value=-10_000, max_value=10_000)


def make_application(status):
    # specialist_id is set so the hand-over guard never blocks a recruiter
    return Application(
        id=1,
        job_id=1,
        candidate=CandidateRef(name="Test Candidate", email="test@example.com"),
        status=status.value,
        recruiter_id=1,
        specialist_id=2,
        created_at=T0,
        updated_at=T0,
    )


class TestTransitionProperties:
    """Property tests for apply_transition."""

    @given(current=statuses, role=roles, target=statuses, offset=clock_offsets)
    def test_outcome_matches_table(self, current, role, target, offset):
        """Every triple is either applied, a no-op, or blocked with INVALID_TRANSITION."""
        application = make_application(current)
        now = T0 + timedelta(seconds=offset)

        if target == current:
            outcome = apply_transition(application, role, target, now=now)
            assert outcome.is_noop is True
            assert outcome.application == application
            return

        if can_transition(current, role, target):
            outcome = apply_transition(application, role, target, now=now)
            assert outcome.application.status == target.value
            assert outcome.application.updated_at > application.updated_at
            assert outcome.intents
        else:
            with pytest.raises(ToolError) as exc_info:
                apply_transition(application, role, target, now=now)
            assert exc_info.value.code == ErrorCode.INVALID_TRANSITION
            assert application.status == current.value
            assert application.updated_at == T0

    @given(current=statuses, role=staff_roles)
    def test_terminal_statuses_have_no_staff_exit(self, current, role):
        if current in TERMINAL_STATUSES:
            assert allowed_targets(current, role) == frozenset()

    @given(
        walk=st.lists(st.tuples(roles, statuses), min_size=1, max_size=15),
        offsets=st.lists(clock_offsets, min_size=15, max_size=15),
    )
    def test_updated_at_strictly_monotonic_along_any_walk(self, walk, offsets):
        application = make_application(ApplicationStatus.PENDING)
        for (role, target), offset in zip(walk, offsets):
            previous = application
            try:
                outcome = apply_transition(
                    application, role, target, now=T0 + timedelta(seconds=offset)
                )
            except ToolError as e:
                assert e.code == ErrorCode.INVALID_TRANSITION
                continue
            application = outcome.application
            if outcome.is_noop:
                assert application.updated_at == previous.updated_at
            else:
                assert application.updated_at > previous.updated_at
