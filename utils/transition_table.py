"""
Authoritative transition table for the candidate pipeline.

The table is static configuration: a mapping from ``(current status, role)``
to the set of statuses that role may move an application to. It is written
once in canonical spellings and expanded over ``STATUS_SYNONYMS`` at import
time so ``hired``/``accepted``, ``rejected``/``company_rejected`` and
``interested``/``company_interested`` carry the same rights.

Admins hold an explicit override and may move any status to any other.
"""

from typing import Dict, FrozenSet, Iterable, Tuple

from models.status import (
    STATUS_SYNONYMS,
    ActorRole,
    ApplicationStatus as S,
)

# role -> current status -> allowed next statuses (canonical spellings)
CANONICAL_TRANSITIONS: Dict[ActorRole, Dict[S, Tuple[S, ...]]] = {
    ActorRole.RECRUITER: {
        S.PENDING: (S.REVIEWING, S.SENT_TO_SPECIALIST, S.DISCARDED),
        S.INJECTED_BY_ADMIN: (S.REVIEWING, S.SENT_TO_SPECIALIST, S.DISCARDED),
        S.REVIEWING: (S.SENT_TO_SPECIALIST, S.DISCARDED, S.PENDING),
        S.DISCARDED: (S.REVIEWING, S.PENDING),
    },
    ActorRole.SPECIALIST: {
        S.SENT_TO_SPECIALIST: (S.EVALUATING, S.SENT_TO_COMPANY, S.DISCARDED),
        S.EVALUATING: (S.SENT_TO_SPECIALIST, S.SENT_TO_COMPANY, S.DISCARDED),
        S.DISCARDED: (S.SENT_TO_SPECIALIST, S.EVALUATING, S.SENT_TO_COMPANY),
    },
    ActorRole.COMPANY: {
        S.SENT_TO_COMPANY: (S.COMPANY_INTERESTED, S.INTERVIEWED, S.REJECTED, S.ACCEPTED),
        S.COMPANY_INTERESTED: (S.INTERVIEWED, S.ACCEPTED, S.REJECTED),
        S.INTERVIEWED: (S.ACCEPTED, S.REJECTED),
        S.REJECTED: (S.COMPANY_INTERESTED, S.ACCEPTED),
    },
}

# Roles that may force any move between vocabulary statuses
OVERRIDE_ROLES: FrozenSet[ActorRole] = frozenset({ActorRole.ADMIN})


def _spellings(status: S) -> Tuple[S, ...]:
    """A canonical status followed by every synonym that folds onto it."""
    return (status,) + tuple(alias for alias, canon in STATUS_SYNONYMS.items() if canon == status)


def _expand(
    canonical: Dict[ActorRole, Dict[S, Tuple[S, ...]]],
) -> Dict[Tuple[S, ActorRole], FrozenSet[S]]:
    table: Dict[Tuple[S, ActorRole], FrozenSet[S]] = {}
    for role, moves in canonical.items():
        for current, targets in moves.items():
            expanded = frozenset(
                spelling for target in targets for spelling in _spellings(target)
            )
            for source in _spellings(current):
                table[(source, role)] = expanded - {source}
    return table


TRANSITION_TABLE: Dict[Tuple[S, ActorRole], FrozenSet[S]] = _expand(CANONICAL_TRANSITIONS)


def allowed_targets(current: S, role: ActorRole) -> FrozenSet[S]:
    """
    Statuses ``role`` may move an application in ``current`` to.

    For override roles this is every other vocabulary status.
    """
    if role in OVERRIDE_ROLES:
        return frozenset(S) - {current}
    return TRANSITION_TABLE.get((current, role), frozenset())


def can_transition(current: S, role: ActorRole, target: S) -> bool:
    """
    Check whether the triple is present in the transition table.

    Examples:
        >>> can_transition(S.PENDING, ActorRole.RECRUITER, S.SENT_TO_SPECIALIST)
        True
        >>> can_transition(S.PENDING, ActorRole.SPECIALIST, S.SENT_TO_COMPANY)
        False
        >>> can_transition(S.HIRED, ActorRole.ADMIN, S.EVALUATING)
        True
    """
    return target in allowed_targets(current, role)


def is_listed_transition(current: S, target: S, roles: Iterable[ActorRole] = ()) -> bool:
    """True if any non-override role (or any of ``roles``) may make the move."""
    candidates = tuple(roles) or tuple(role for role in ActorRole if role not in OVERRIDE_ROLES)
    return any(
        target in TRANSITION_TABLE.get((current, role), frozenset()) for role in candidates
    )
