"""Reviewer selection.

Selection is a deterministic prefix: the eligible pool is ordered by user
id and the first ``quota`` ids are taken. It does not balance review load
over time; two pull requests from the same team with the same exclusions
get the same reviewers.
"""

from typing import Iterable

from .models import User

CREATE_QUOTA = 2
REASSIGN_QUOTA = 1


def candidate_pool(candidates: Iterable[User], exclude: Iterable[str] = ()) -> list[str]:
    """Ids of active candidates outside ``exclude``, unique and ascending."""
    excluded = set(exclude)
    return sorted({
        candidate.id for candidate in candidates
        if candidate.is_active and candidate.id not in excluded
    })


def select_reviewers(candidates: Iterable[User], exclude: Iterable[str] = (),
                     quota: int = CREATE_QUOTA) -> list[str]:
    """
    Pick up to ``quota`` reviewer ids from ``candidates``.

    Returns an empty list when nobody is eligible; the caller decides
    whether that is an error.
    """
    if quota < 0:
        raise ValueError(f'quota must be non-negative, got {quota}')
    return candidate_pool(candidates, exclude)[:quota]
