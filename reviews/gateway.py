"""Row-level storage primitives for users, pull requests and reviewer edges.

No business rules live here. Every call takes the transaction handle of
the surrounding unit of work as its first argument, or ``None`` to run on
a plain autocommit connection.
"""

from datetime import datetime
from typing import Iterable

from django.db import transaction
from django.db.models import Count, Q

from .models import PullRequest, ReviewerAssignment, User
from .unit_of_work import Transaction, db_alias


class UserGateway:

    def get(self, tx: Transaction | None, user_id: str) -> User | None:
        return User.objects.using(db_alias(tx)).filter(id=user_id).first()

    def find_active_candidates(self, tx: Transaction | None, team_name: str,
                               exclude_ids: Iterable[str] = ()) -> list[User]:
        """Active members of ``team_name`` outside ``exclude_ids``, by id."""
        return list(
            User.objects.using(db_alias(tx))
            .filter(team_name=team_name, is_active=True)
            .exclude(id__in=list(exclude_ids))
            .order_by('id')
        )

    def list_by_team(self, tx: Transaction | None, team_name: str) -> list[User]:
        return list(User.objects.using(db_alias(tx)).filter(team_name=team_name).order_by('id'))

    def team_exists(self, tx: Transaction | None, team_name: str) -> bool:
        return User.objects.using(db_alias(tx)).filter(team_name=team_name).exists()

    def list_all(self, tx: Transaction | None) -> list[User]:
        return list(User.objects.using(db_alias(tx)).order_by('id'))

    def upsert(self, tx: Transaction | None, user_id: str, username: str,
               team_name: str, is_active: bool) -> User:
        user, _ = User.objects.using(db_alias(tx)).update_or_create(
            id=user_id,
            defaults={
                'username': username,
                'team_name': team_name,
                'is_active': is_active,
            },
        )
        return user

    def set_is_active(self, tx: Transaction | None, user_id: str, is_active: bool) -> int:
        return User.objects.using(db_alias(tx)).filter(id=user_id).update(is_active=is_active)

    def deactivate(self, tx: Transaction | None, user_ids: Iterable[str]) -> int:
        """Flip active users to inactive; returns how many were flipped."""
        return (
            User.objects.using(db_alias(tx))
            .filter(id__in=list(user_ids), is_active=True)
            .update(is_active=False)
        )


class PullRequestGateway:

    def exists(self, tx: Transaction | None, pr_id: str) -> bool:
        return PullRequest.objects.using(db_alias(tx)).filter(id=pr_id).exists()

    def get(self, tx: Transaction | None, pr_id: str, for_update: bool = False) -> PullRequest | None:
        queryset = PullRequest.objects.using(db_alias(tx))
        if for_update:
            queryset = queryset.select_for_update()
        return queryset.filter(id=pr_id).first()

    def create(self, tx: Transaction | None, pr_id: str, title: str,
               author_id: str, now: datetime) -> PullRequest:
        return PullRequest.objects.using(db_alias(tx)).create(
            id=pr_id,
            title=title,
            author_id=author_id,
            status=PullRequest.Status.OPEN,
            created_at=now,
            updated_at=now,
        )

    def update_status(self, tx: Transaction | None, pr_id: str, status: str,
                      merged_at: datetime | None, updated_at: datetime) -> int:
        return PullRequest.objects.using(db_alias(tx)).filter(id=pr_id).update(
            status=status,
            merged_at=merged_at,
            updated_at=updated_at,
        )

    def touch(self, tx: Transaction | None, pr_id: str, updated_at: datetime) -> int:
        return PullRequest.objects.using(db_alias(tx)).filter(id=pr_id).update(updated_at=updated_at)

    def list_all(self, tx: Transaction | None) -> list[PullRequest]:
        """All pull requests, newest first, annotated with ``reviewers_count``."""
        return list(
            PullRequest.objects.using(db_alias(tx))
            .annotate(reviewers_count=Count('assignments'))
            .order_by('-created_at', 'id')
        )

    def list_by_reviewer(self, tx: Transaction | None, reviewer_id: str) -> list[PullRequest]:
        return list(
            PullRequest.objects.using(db_alias(tx))
            .filter(assignments__reviewer_id=reviewer_id)
            .order_by('id')
        )

    def list_open_by_reviewers(self, tx: Transaction | None,
                               reviewer_ids: Iterable[str]) -> list[PullRequest]:
        return list(
            PullRequest.objects.using(db_alias(tx))
            .filter(status=PullRequest.Status.OPEN, assignments__reviewer_id__in=list(reviewer_ids))
            .distinct()
            .order_by('id')
        )


class ReviewerGateway:

    def assign(self, tx: Transaction | None, pr_id: str, reviewer_id: str):
        ReviewerAssignment.objects.using(db_alias(tx)).bulk_create(
            [ReviewerAssignment(pull_request_id=pr_id, reviewer_id=reviewer_id)],
            ignore_conflicts=True,
        )

    def list_reviewer_ids(self, tx: Transaction | None, pr_id: str) -> list[str]:
        return list(
            ReviewerAssignment.objects.using(db_alias(tx))
            .filter(pull_request_id=pr_id)
            .order_by('reviewer_id')
            .values_list('reviewer_id', flat=True)
        )

    def list_pr_ids(self, tx: Transaction | None, reviewer_id: str) -> list[str]:
        return list(
            ReviewerAssignment.objects.using(db_alias(tx))
            .filter(reviewer_id=reviewer_id)
            .order_by('pull_request_id')
            .values_list('pull_request_id', flat=True)
        )

    def is_assigned(self, tx: Transaction | None, pr_id: str, reviewer_id: str) -> bool:
        return (
            ReviewerAssignment.objects.using(db_alias(tx))
            .filter(pull_request_id=pr_id, reviewer_id=reviewer_id)
            .exists()
        )

    def replace(self, tx: Transaction | None, pr_id: str, old_reviewer_id: str, new_reviewer_id: str):
        using = db_alias(tx)
        with transaction.atomic(using=using):
            ReviewerAssignment.objects.using(using).filter(
                pull_request_id=pr_id, reviewer_id=old_reviewer_id,
            ).delete()
            ReviewerAssignment.objects.using(using).create(
                pull_request_id=pr_id, reviewer_id=new_reviewer_id,
            )

    def remove(self, tx: Transaction | None, pr_id: str, reviewer_id: str) -> int:
        deleted, _ = (
            ReviewerAssignment.objects.using(db_alias(tx))
            .filter(pull_request_id=pr_id, reviewer_id=reviewer_id)
            .delete()
        )
        return deleted

    def review_counts(self, tx: Transaction | None) -> dict[str, dict[str, int]]:
        """Per reviewer: ``total`` edges and ``open`` edges on OPEN pull requests."""
        rows = (
            ReviewerAssignment.objects.using(db_alias(tx))
            .values('reviewer_id')
            .annotate(
                total=Count('id'),
                open=Count('id', filter=Q(pull_request__status=PullRequest.Status.OPEN)),
            )
        )
        return {row['reviewer_id']: {'total': row['total'], 'open': row['open']} for row in rows}
