from dataclasses import dataclass

import structlog
from django.core.exceptions import ObjectDoesNotExist
from django.utils import timezone

from . import errors
from .gateway import PullRequestGateway, ReviewerGateway, UserGateway
from .models import PullRequest, User
from .ports import (
    CandidateStore,
    OpenReviewStore,
    PullRequestStore,
    ReviewerRemovalStore,
    ReviewerStore,
    TeamMemberStore,
    Transactor,
)
from .selection import CREATE_QUOTA, REASSIGN_QUOTA, select_reviewers
from .unit_of_work import Transaction, UnitOfWork

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Team:
    """A team is the set of users sharing a ``team_name``."""
    name: str
    members: list[User]


@dataclass(frozen=True)
class PullRequestState:
    pull_request: PullRequest
    reviewer_ids: list[str]


@dataclass(frozen=True)
class ReassignResult:
    pull_request: PullRequest
    reviewer_ids: list[str]
    replaced_by: str


@dataclass(frozen=True)
class DeactivationResult:
    team_name: str
    deactivated_users: int
    removed_assignments: int
    affected_pull_requests: int
    prs_without_reviewers: int
    user_ids: list[str]


class TeamService:
    """
    Teams and their members.

    Deactivating a team strips its members from every open review and marks
    them inactive. Vacated slots are not refilled, so an open pull request
    may end up with no reviewers at all.
    """

    def __init__(self, users: TeamMemberStore | None = None,
                 pull_requests: OpenReviewStore | None = None,
                 reviewers: ReviewerRemovalStore | None = None,
                 uow: Transactor | None = None):
        self.users = users or UserGateway()
        self.pull_requests = pull_requests or PullRequestGateway()
        self.reviewers = reviewers or ReviewerGateway()
        self.uow = uow or UnitOfWork()

    def add_team(self, team_name: str, members: list, tx: Transaction | None = None) -> Team:
        """
        Create a team and create or update its members.

        ``members`` holds dicts with ``user_id``, ``username`` and
        ``is_active``. A member already on another team moves to this one.
        """
        if not members:
            logger.warning('team_without_members', team_name=team_name)
            raise errors.rule_violation(errors.BAD_REQUEST, 'team must have at least one member')

        member_ids = [member_data['user_id'] for member_data in members]
        duplicates = sorted({user_id for user_id in member_ids if member_ids.count(user_id) > 1})
        if duplicates:
            logger.warning('team_duplicate_members', team_name=team_name, user_ids=duplicates)
            raise errors.rule_violation(
                errors.BAD_REQUEST, f"duplicate user_id in members: {', '.join(duplicates)}")

        def add(tx):
            if self.users.team_exists(tx, team_name):
                logger.warning('team_already_exists', team_name=team_name)
                raise errors.rule_violation(errors.TEAM_EXISTS, 'team_name already exists')

            saved = {}
            for member_data in members:
                user = self.users.upsert(
                    tx,
                    member_data['user_id'],
                    member_data['username'],
                    team_name,
                    member_data['is_active'],
                )
                saved[user.id] = user
            return Team(team_name, [saved[user_id] for user_id in sorted(saved)])

        team = self.uow.within_transaction(add, tx=tx)
        logger.info('team_created', team_name=team_name, members_count=len(team.members))
        return team

    def get_team(self, team_name: str, tx: Transaction | None = None) -> Team:
        members = self.users.list_by_team(tx, team_name)
        if not members:
            logger.warning('team_not_found', team_name=team_name)
            raise ObjectDoesNotExist(f"Team '{team_name}' not found")
        return Team(team_name, members)

    def deactivate_team(self, team_name: str, tx: Transaction | None = None) -> DeactivationResult:
        def deactivate(tx):
            members = self.users.list_by_team(tx, team_name)
            if not members:
                logger.warning('team_not_found', team_name=team_name)
                raise ObjectDoesNotExist(f"Team '{team_name}' not found")

            member_ids = [member.id for member in members]
            leaving = set(member_ids)

            open_prs = self.pull_requests.list_open_by_reviewers(tx, member_ids)
            removed = 0
            emptied = 0
            for pr in open_prs:
                reviewer_ids = self.reviewers.list_reviewer_ids(tx, pr.id)
                for reviewer_id in reviewer_ids:
                    if reviewer_id in leaving:
                        removed += self.reviewers.remove(tx, pr.id, reviewer_id)
                if leaving.issuperset(reviewer_ids):
                    emptied += 1

            deactivated = self.users.deactivate(tx, member_ids)
            return DeactivationResult(
                team_name=team_name,
                deactivated_users=deactivated,
                removed_assignments=removed,
                affected_pull_requests=len(open_prs),
                prs_without_reviewers=emptied,
                user_ids=member_ids,
            )

        result = self.uow.within_transaction(deactivate, tx=tx)
        logger.info(
            'team_deactivated',
            team_name=team_name,
            deactivated_users=result.deactivated_users,
            removed_assignments=result.removed_assignments,
            affected_pull_requests=result.affected_pull_requests,
        )
        if result.prs_without_reviewers:
            logger.warning(
                'open_prs_left_without_reviewers',
                team_name=team_name,
                count=result.prs_without_reviewers,
            )
        return result


class UserService:

    def __init__(self, users: UserGateway | None = None,
                 pull_requests: PullRequestGateway | None = None,
                 uow: Transactor | None = None):
        self.users = users or UserGateway()
        self.pull_requests = pull_requests or PullRequestGateway()
        self.uow = uow or UnitOfWork()

    def set_is_active(self, user_id: str, is_active: bool, tx: Transaction | None = None) -> User:
        """Flip the active flag; existing review assignments are left alone."""
        def update(tx):
            user = self.users.get(tx, user_id)
            if user is None:
                logger.warning('user_not_found', user_id=user_id)
                raise ObjectDoesNotExist(f"User '{user_id}' not found")
            self.users.set_is_active(tx, user_id, is_active)
            user.is_active = is_active
            return user

        user = self.uow.within_transaction(update, tx=tx)
        logger.info('user_is_active_updated', user_id=user_id, is_active=is_active)
        return user

    def get_review(self, user_id: str, tx: Transaction | None = None) -> list:
        """Pull requests where the user is an assigned reviewer."""
        if self.users.get(tx, user_id) is None:
            logger.warning('user_not_found', user_id=user_id)
            raise ObjectDoesNotExist(f"User '{user_id}' not found")
        return self.pull_requests.list_by_reviewer(tx, user_id)


class PullRequestService:
    """
    Pull request lifecycle: create, merge and reviewer reassignment.

    Each operation runs in one unit of work. Rule violations are raised
    before the first write, so a failed call leaves nothing behind.
    """

    def __init__(self, pull_requests: PullRequestStore | None = None,
                 reviewers: ReviewerStore | None = None,
                 users: CandidateStore | None = None,
                 uow: Transactor | None = None):
        self.pull_requests = pull_requests or PullRequestGateway()
        self.reviewers = reviewers or ReviewerGateway()
        self.users = users or UserGateway()
        self.uow = uow or UnitOfWork()

    def create_pull_request(self, pr_id: str, title: str, author_id: str,
                            tx: Transaction | None = None) -> PullRequestState:
        def create(tx):
            if self.pull_requests.exists(tx, pr_id):
                logger.warning('pr_already_exists', pr_id=pr_id)
                raise errors.rule_violation(errors.PR_EXISTS, 'PR id already exists')

            author = self.users.get(tx, author_id)
            if author is None:
                logger.warning('author_not_found', author_id=author_id)
                raise ObjectDoesNotExist(f"Author '{author_id}' not found")
            if not author.is_active:
                logger.warning('author_not_active', author_id=author_id)
                raise ObjectDoesNotExist(f"Author '{author_id}' is not active")
            if not author.team_name:
                logger.warning('author_has_no_team', author_id=author_id)
                raise ObjectDoesNotExist(f"Author '{author_id}' has no team")

            candidates = self.users.find_active_candidates(tx, author.team_name, [author.id])
            reviewer_ids = select_reviewers(candidates, exclude=[author.id], quota=CREATE_QUOTA)
            if not reviewer_ids:
                logger.warning('no_reviewer_candidates', pr_id=pr_id, team_name=author.team_name)

            pr = self.pull_requests.create(tx, pr_id, title, author.id, timezone.now())
            for reviewer_id in reviewer_ids:
                self.reviewers.assign(tx, pr_id, reviewer_id)
            return PullRequestState(pr, reviewer_ids)

        state = self.uow.within_transaction(create, tx=tx)
        logger.info('pr_created', pr_id=pr_id, reviewer_ids=state.reviewer_ids)
        return state

    def merge_pull_request(self, pr_id: str, tx: Transaction | None = None) -> PullRequestState:
        """Mark the pull request MERGED. Merging twice returns the first result."""
        def merge(tx):
            pr = self.pull_requests.get(tx, pr_id, for_update=True)
            if pr is None:
                logger.warning('pr_not_found', pr_id=pr_id)
                raise ObjectDoesNotExist(f"PR '{pr_id}' not found")

            reviewer_ids = self.reviewers.list_reviewer_ids(tx, pr_id)
            if pr.is_merged:
                logger.info('pr_already_merged', pr_id=pr_id)
                return PullRequestState(pr, reviewer_ids)

            now = timezone.now()
            self.pull_requests.update_status(tx, pr_id, PullRequest.Status.MERGED, now, now)
            pr.status = PullRequest.Status.MERGED
            pr.merged_at = now
            pr.updated_at = now
            logger.info('pr_merged', pr_id=pr_id)
            return PullRequestState(pr, reviewer_ids)

        return self.uow.within_transaction(merge, tx=tx)

    def reassign_reviewer(self, pr_id: str, old_reviewer_id: str,
                          tx: Transaction | None = None) -> ReassignResult:
        """
        Replace ``old_reviewer_id`` with the first eligible teammate.

        The replacement comes from the old reviewer's team and is never the
        author or anyone already reviewing, the departing reviewer included.
        """
        def reassign(tx):
            pr = self.pull_requests.get(tx, pr_id, for_update=True)
            if pr is None:
                logger.warning('pr_not_found', pr_id=pr_id)
                raise ObjectDoesNotExist(f"PR '{pr_id}' not found")

            if pr.is_merged:
                logger.warning('reassign_on_merged_pr', pr_id=pr_id)
                raise errors.rule_violation(errors.PR_MERGED, 'cannot reassign on merged PR')

            if not self.reviewers.is_assigned(tx, pr_id, old_reviewer_id):
                logger.warning('reviewer_not_assigned', pr_id=pr_id, reviewer_id=old_reviewer_id)
                raise errors.rule_violation(errors.NOT_ASSIGNED, 'reviewer is not assigned to this PR')

            old_reviewer = self.users.get(tx, old_reviewer_id)
            if old_reviewer is None:
                logger.warning('reviewer_not_found', reviewer_id=old_reviewer_id)
                raise ObjectDoesNotExist(f"User '{old_reviewer_id}' not found")

            current_ids = self.reviewers.list_reviewer_ids(tx, pr_id)
            exclude = [pr.author_id, *current_ids]

            candidates = []
            if old_reviewer.team_name:
                candidates = self.users.find_active_candidates(tx, old_reviewer.team_name, exclude)
            chosen = select_reviewers(candidates, exclude=exclude, quota=REASSIGN_QUOTA)
            if not chosen:
                logger.warning('no_replacement_candidate', pr_id=pr_id, team_name=old_reviewer.team_name)
                raise errors.rule_violation(errors.NO_CANDIDATE, 'no active replacement candidate in team')

            new_reviewer_id = chosen[0]
            self.reviewers.replace(tx, pr_id, old_reviewer_id, new_reviewer_id)
            now = timezone.now()
            self.pull_requests.touch(tx, pr_id, now)
            pr.updated_at = now

            return ReassignResult(pr, self.reviewers.list_reviewer_ids(tx, pr_id), new_reviewer_id)

        result = self.uow.within_transaction(reassign, tx=tx)
        logger.info(
            'reviewer_reassigned',
            pr_id=pr_id,
            old_reviewer_id=old_reviewer_id,
            new_reviewer_id=result.replaced_by,
        )
        return result


class StatsService:
    """Review load per user and reviewer coverage per pull request."""

    def __init__(self, users: UserGateway | None = None,
                 pull_requests: PullRequestGateway | None = None,
                 reviewers: ReviewerGateway | None = None,
                 uow: Transactor | None = None):
        self.users = users or UserGateway()
        self.pull_requests = pull_requests or PullRequestGateway()
        self.reviewers = reviewers or ReviewerGateway()
        self.uow = uow or UnitOfWork()

    def get_statistics(self, tx: Transaction | None = None) -> dict:
        def collect(tx):
            return (
                self.pull_requests.list_all(tx),
                self.users.list_all(tx),
                self.reviewers.review_counts(tx),
            )

        prs, users, counts = self.uow.within_transaction(collect, tx=tx)

        open_prs = [pr for pr in prs if pr.status == PullRequest.Status.OPEN]
        user_stats = [
            {
                'user_id': user.id,
                'username': user.username,
                'team_name': user.team_name,
                'is_active': user.is_active,
                'assignments_count': counts.get(user.id, {}).get('total', 0),
                'active_reviews': counts.get(user.id, {}).get('open', 0),
            }
            for user in users
        ]
        user_stats.sort(key=lambda stat: (-stat['assignments_count'], stat['user_id']))

        stats = {
            'total_prs': len(prs),
            'open_prs': len(open_prs),
            'merged_prs': len(prs) - len(open_prs),
            'total_assignments': sum(pr.reviewers_count for pr in prs),
            'open_prs_without_reviewers': sum(1 for pr in open_prs if pr.reviewers_count == 0),
            'user_stats': user_stats,
            'pr_stats': [
                {
                    'pull_request_id': pr.id,
                    'pull_request_name': pr.title,
                    'status': pr.status,
                    'reviewers_count': pr.reviewers_count,
                    'created_at': pr.created_at,
                    'merged_at': pr.merged_at,
                }
                for pr in prs
            ],
        }
        logger.info('statistics_collected', total_prs=stats['total_prs'],
                    total_assignments=stats['total_assignments'])
        return stats
