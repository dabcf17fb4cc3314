"""Storage capabilities each service depends on.

Every service takes only the operations it uses, so tests can swap in a
narrow double instead of the ORM-backed gateways.
"""

from datetime import datetime
from typing import Callable, Iterable, Protocol, TypeVar

from .models import PullRequest, User
from .unit_of_work import Transaction

T = TypeVar('T')


class Transactor(Protocol):
    def within_transaction(self, fn: Callable[[Transaction], T], tx: Transaction | None = None) -> T: ...


class PullRequestStore(Protocol):
    def exists(self, tx: Transaction | None, pr_id: str) -> bool: ...

    def get(self, tx: Transaction | None, pr_id: str, for_update: bool = False) -> PullRequest | None: ...

    def create(self, tx: Transaction | None, pr_id: str, title: str,
               author_id: str, now: datetime) -> PullRequest: ...

    def update_status(self, tx: Transaction | None, pr_id: str, status: str,
                      merged_at: datetime | None, updated_at: datetime) -> int: ...

    def touch(self, tx: Transaction | None, pr_id: str, updated_at: datetime) -> int: ...


class ReviewerStore(Protocol):
    def assign(self, tx: Transaction | None, pr_id: str, reviewer_id: str): ...

    def list_reviewer_ids(self, tx: Transaction | None, pr_id: str) -> list[str]: ...

    def is_assigned(self, tx: Transaction | None, pr_id: str, reviewer_id: str) -> bool: ...

    def replace(self, tx: Transaction | None, pr_id: str, old_reviewer_id: str, new_reviewer_id: str): ...


class CandidateStore(Protocol):
    def get(self, tx: Transaction | None, user_id: str) -> User | None: ...

    def find_active_candidates(self, tx: Transaction | None, team_name: str,
                               exclude_ids: Iterable[str] = ()) -> list[User]: ...


class TeamMemberStore(Protocol):
    def list_by_team(self, tx: Transaction | None, team_name: str) -> list[User]: ...

    def team_exists(self, tx: Transaction | None, team_name: str) -> bool: ...

    def upsert(self, tx: Transaction | None, user_id: str, username: str,
               team_name: str, is_active: bool) -> User: ...

    def deactivate(self, tx: Transaction | None, user_ids: Iterable[str]) -> int: ...


class OpenReviewStore(Protocol):
    def list_open_by_reviewers(self, tx: Transaction | None,
                               reviewer_ids: Iterable[str]) -> list[PullRequest]: ...


class ReviewerRemovalStore(Protocol):
    def list_reviewer_ids(self, tx: Transaction | None, pr_id: str) -> list[str]: ...

    def remove(self, tx: Transaction | None, pr_id: str, reviewer_id: str) -> int: ...
