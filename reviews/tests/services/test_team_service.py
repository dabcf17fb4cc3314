from unittest.mock import patch

from django.core.exceptions import ObjectDoesNotExist, ValidationError
from django.db import DatabaseError
from django.test import TestCase

from reviews.gateway import UserGateway
from reviews.models import PullRequest, ReviewerAssignment, User
from reviews.services import PullRequestService, TeamService


class TeamServiceTest(TestCase):
    def setUp(self):
        self.service = TeamService()
        self.team_name = "backend"
        self.members_data = [
            {"user_id": "u1", "username": "Alice", "is_active": True},
            {"user_id": "u2", "username": "Bob", "is_active": True},
            {"user_id": "u3", "username": "Charlie", "is_active": False},
        ]

    def test_add_team_success(self):
        team = self.service.add_team(self.team_name, self.members_data)

        self.assertEqual(team.name, self.team_name)
        self.assertEqual([member.id for member in team.members], ["u1", "u2", "u3"])

        user1 = User.objects.get(id="u1")
        self.assertEqual(user1.username, "Alice")
        self.assertTrue(user1.is_active)
        self.assertEqual(user1.team_name, "backend")
        self.assertFalse(User.objects.get(id="u3").is_active)

    def test_add_team_duplicate(self):
        self.service.add_team(self.team_name, self.members_data)

        with self.assertRaises(ValidationError) as context:
            self.service.add_team(self.team_name, [{"user_id": "u9", "username": "New", "is_active": True}])

        self.assertEqual(context.exception.code, 'TEAM_EXISTS')
        self.assertEqual(str(context.exception), "['team_name already exists']")
        self.assertFalse(User.objects.filter(id="u9").exists())

    def test_add_team_empty_members(self):
        with self.assertRaises(ValidationError) as context:
            self.service.add_team("empty_team", [])

        self.assertEqual(context.exception.code, 'BAD_REQUEST')

    def test_add_team_duplicate_member_ids(self):
        members = self.members_data + [{"user_id": "u1", "username": "Alice again", "is_active": False}]

        with self.assertRaises(ValidationError) as context:
            self.service.add_team(self.team_name, members)

        self.assertEqual(context.exception.code, 'BAD_REQUEST')
        self.assertEqual(context.exception.messages, ["duplicate user_id in members: u1"])
        self.assertFalse(User.objects.exists())

    def test_add_team_moves_existing_user(self):
        User.objects.create(id="u1", username="Old Name", team_name="frontend", is_active=False)

        self.service.add_team(self.team_name, self.members_data)

        user = User.objects.get(id="u1")
        self.assertEqual(user.username, "Alice")
        self.assertEqual(user.team_name, "backend")
        self.assertTrue(user.is_active)

    def test_add_team_is_all_or_nothing(self):
        real_upsert = UserGateway.upsert
        calls = []

        def flaky_upsert(gateway, tx, user_id, *args):
            calls.append(user_id)
            if user_id == "u3":
                raise DatabaseError("disk full")
            return real_upsert(gateway, tx, user_id, *args)

        with patch.object(UserGateway, 'upsert', flaky_upsert):
            with self.assertRaises(DatabaseError):
                self.service.add_team(self.team_name, self.members_data)

        self.assertEqual(calls, ["u1", "u2", "u3"])
        self.assertFalse(User.objects.exists())

    def test_get_team_success(self):
        self.service.add_team(self.team_name, self.members_data)

        team = self.service.get_team(self.team_name)

        self.assertEqual(team.name, self.team_name)
        self.assertEqual(len(team.members), 3)

    def test_get_team_not_found(self):
        with self.assertRaises(ObjectDoesNotExist):
            self.service.get_team("nonexistent")


class DeactivateTeamTest(TestCase):
    def setUp(self):
        self.service = TeamService()
        self.prs = PullRequestService()
        for user_id in ("b1", "b2", "b3"):
            User.objects.create(id=user_id, username=user_id, team_name="backend", is_active=True)
        for user_id in ("f1", "f2", "f3"):
            User.objects.create(id=user_id, username=user_id, team_name="frontend", is_active=True)

    def test_deactivate_team_not_found(self):
        with self.assertRaises(ObjectDoesNotExist):
            self.service.deactivate_team("nonexistent")

    def test_deactivate_team_flips_every_member(self):
        User.objects.filter(id="b3").update(is_active=False)

        result = self.service.deactivate_team("backend")

        self.assertEqual(result.deactivated_users, 2)
        self.assertEqual(result.user_ids, ["b1", "b2", "b3"])
        self.assertFalse(User.objects.filter(team_name="backend", is_active=True).exists())
        self.assertEqual(User.objects.filter(team_name="frontend", is_active=True).count(), 3)

    def test_deactivate_team_strips_open_reviews(self):
        self.prs.create_pull_request("pr-1", "Backend work", "b1")   # b2, b3
        self.prs.create_pull_request("pr-2", "Frontend work", "f1")  # f2, f3
        pr3 = PullRequest.objects.create(id="pr-3", title="Mixed", author_id="f1")
        ReviewerAssignment.objects.create(pull_request=pr3, reviewer_id="b2")
        ReviewerAssignment.objects.create(pull_request=pr3, reviewer_id="f2")

        result = self.service.deactivate_team("backend")

        self.assertEqual(result.removed_assignments, 3)
        self.assertEqual(result.affected_pull_requests, 2)
        self.assertEqual(result.prs_without_reviewers, 1)

        backend_ids = set(result.user_ids)
        for pr in PullRequest.objects.filter(status=PullRequest.Status.OPEN):
            reviewers = set(pr.assignments.values_list('reviewer_id', flat=True))
            self.assertFalse(reviewers & backend_ids)

        self.assertFalse(ReviewerAssignment.objects.filter(pull_request_id="pr-1").exists())
        self.assertEqual(
            sorted(ReviewerAssignment.objects.filter(pull_request_id="pr-2").values_list('reviewer_id', flat=True)),
            ["f2", "f3"],
        )
        self.assertEqual(
            list(ReviewerAssignment.objects.filter(pull_request_id="pr-3").values_list('reviewer_id', flat=True)),
            ["f2"],
        )

    def test_deactivate_team_leaves_merged_prs_alone(self):
        self.prs.create_pull_request("pr-1", "Backend work", "b1")
        self.prs.merge_pull_request("pr-1")

        result = self.service.deactivate_team("backend")

        self.assertEqual(result.removed_assignments, 0)
        self.assertEqual(ReviewerAssignment.objects.filter(pull_request_id="pr-1").count(), 2)

    def test_deactivate_team_does_not_refill_reviewers(self):
        self.prs.create_pull_request("pr-1", "Backend work", "b1")

        self.service.deactivate_team("backend")

        self.assertEqual(PullRequest.objects.get(id="pr-1").assignments.count(), 0)

    def test_deactivate_team_twice(self):
        self.service.deactivate_team("backend")

        result = self.service.deactivate_team("backend")

        self.assertEqual(result.deactivated_users, 0)
        self.assertEqual(result.removed_assignments, 0)
