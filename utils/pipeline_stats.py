"""
Read-side projection of a job's application pipeline.

Counts are recomputed from the full application set on every call; nothing
is cached or maintained incrementally.
"""

import logging
from collections import Counter
from typing import Any, Iterable, Optional

from models.status import (
    ApplicationStatus as S,
    PipelineStage,
    STATUS_STAGES,
    canonical_status,
)
from schemas.get_job_pipeline import (
    CompanyStageCounts,
    PipelineStats,
    RecruiterStageCounts,
    SpecialistStageCounts,
    StageBreakdown,
    StageTotals,
)

logger = logging.getLogger(__name__)


def _status_of(item: Any) -> str:
    """Read the status from an Application, a row mapping or a plain string."""
    if isinstance(item, str):
        status = item
    elif hasattr(item, "status"):
        status = item.status
    else:
        status = item["status"]
    # Enum members hash by name, so key the counters by plain value
    return status.value if isinstance(status, S) else status


def compute_pipeline_stats(
    applications: Iterable[Any], job_id: Optional[int] = None
) -> PipelineStats:
    """
    Compute per-status, per-stage and total counts for one job.

    Synonyms are folded together in the stage breakdown (``hired`` counts as
    accepted, ``injected_by_admin`` as pending). Archived and unrecognized
    statuses belong to no stage and are reported in ``unstaged`` so they never
    drop out of the total.

    Args:
        applications: Application snapshots, row mappings or status strings
        job_id: Job the collection belongs to (echoed in the result)

    Returns:
        PipelineStats projection

    Examples:
        >>> stats = compute_pipeline_stats(["pending", "pending", "evaluating", "hired"])
        >>> stats.total, stats.stage_totals.recruiter, stats.stages.company.accepted
        (4, 2, 1)
    """
    observed = Counter(_status_of(item) for item in applications)

    counts_by_status = {status.value: 0 for status in S}
    folded = Counter()
    totals = Counter()
    unstaged = 0

    for raw, count in observed.items():
        counts_by_status[raw] = counts_by_status.get(raw, 0) + count
        try:
            status = S(raw)
        except ValueError:
            logger.warning(
                "Unrecognized application status '%s' (%d rows) for job %s",
                raw,
                count,
                job_id,
            )
            unstaged += count
            continue

        stage = STATUS_STAGES[status]
        if stage is None:
            unstaged += count
            continue
        totals[stage] += count
        folded[canonical_status(status)] += count

    stages = StageBreakdown(
        recruiter=RecruiterStageCounts(
            pending=folded[S.PENDING] + folded[S.INJECTED_BY_ADMIN],
            reviewing=folded[S.REVIEWING],
            sent_to_specialist=folded[S.SENT_TO_SPECIALIST],
            discarded=folded[S.DISCARDED],
        ),
        specialist=SpecialistStageCounts(
            evaluating=folded[S.EVALUATING],
            sent_to_company=folded[S.SENT_TO_COMPANY],
        ),
        company=CompanyStageCounts(
            interested=folded[S.COMPANY_INTERESTED],
            interviewed=folded[S.INTERVIEWED],
            rejected=folded[S.REJECTED],
            accepted=folded[S.ACCEPTED],
        ),
    )

    return PipelineStats(
        job_id=job_id,
        total=sum(observed.values()),
        counts_by_status=counts_by_status,
        stages=stages,
        stage_totals=StageTotals(
            recruiter=totals[PipelineStage.RECRUITER],
            specialist=totals[PipelineStage.SPECIALIST],
            company=totals[PipelineStage.COMPANY],
        ),
        unstaged=unstaged,
    )
