from django.test import TestCase
from django.utils import timezone

from reviews.gateway import PullRequestGateway, ReviewerGateway, UserGateway
from reviews.models import PullRequest, User


class GatewayTest(TestCase):
    def setUp(self):
        self.users = UserGateway()
        self.pull_requests = PullRequestGateway()
        self.reviewers = ReviewerGateway()
        for user_id, team_name, is_active in (
            ("u3", "backend", True),
            ("u1", "backend", True),
            ("u2", "backend", False),
            ("u4", "backend", True),
            ("f1", "frontend", True),
        ):
            User.objects.create(id=user_id, username=user_id, team_name=team_name, is_active=is_active)

    def test_get_missing_user(self):
        self.assertIsNone(self.users.get(None, "ghost"))

    def test_find_active_candidates_ordered_by_id(self):
        candidates = self.users.find_active_candidates(None, "backend", ["u4"])

        self.assertEqual([user.id for user in candidates], ["u1", "u3"])

    def test_deactivate_counts_only_flipped_users(self):
        self.assertEqual(self.users.deactivate(None, ["u1", "u2", "u3"]), 2)
        self.assertEqual(self.users.deactivate(None, ["u1", "u2", "u3"]), 0)

    def test_upsert_moves_user(self):
        user = self.users.upsert(None, "f1", "Renamed", "backend", False)

        self.assertEqual(user.team_name, "backend")
        self.assertFalse(self.users.team_exists(None, "frontend"))

    def test_edges(self):
        now = timezone.now()
        self.pull_requests.create(None, "pr-2", "Second", "u1", now)
        self.pull_requests.create(None, "pr-1", "First", "u1", now)
        self.reviewers.assign(None, "pr-1", "u3")
        self.reviewers.assign(None, "pr-1", "u3")
        self.reviewers.assign(None, "pr-2", "u3")
        self.reviewers.assign(None, "pr-1", "u4")

        self.assertEqual(self.reviewers.list_reviewer_ids(None, "pr-1"), ["u3", "u4"])
        self.assertEqual(self.reviewers.list_pr_ids(None, "u3"), ["pr-1", "pr-2"])
        self.assertTrue(self.reviewers.is_assigned(None, "pr-2", "u3"))
        self.assertFalse(self.reviewers.is_assigned(None, "pr-2", "u4"))

        self.reviewers.replace(None, "pr-1", "u4", "f1")
        self.assertEqual(self.reviewers.list_reviewer_ids(None, "pr-1"), ["f1", "u3"])

        self.assertEqual(self.reviewers.remove(None, "pr-1", "u3"), 1)
        self.assertEqual(self.reviewers.remove(None, "pr-1", "u3"), 0)

    def test_review_counts_split_open_and_merged(self):
        now = timezone.now()
        self.pull_requests.create(None, "pr-1", "First", "u1", now)
        self.pull_requests.create(None, "pr-2", "Second", "u1", now)
        self.reviewers.assign(None, "pr-1", "u3")
        self.reviewers.assign(None, "pr-2", "u3")
        self.pull_requests.update_status(None, "pr-2", PullRequest.Status.MERGED, now, now)

        counts = self.reviewers.review_counts(None)

        self.assertEqual(counts["u3"], {"total": 2, "open": 1})
        self.assertNotIn("u4", counts)
        self.assertEqual(
            [pr.id for pr in self.pull_requests.list_open_by_reviewers(None, ["u3", "u4"])],
            ["pr-1"],
        )

    def test_get_for_update(self):
        self.pull_requests.create(None, "pr-1", "First", "u1", timezone.now())

        pr = self.pull_requests.get(None, "pr-1", for_update=True)

        self.assertEqual(pr.id, "pr-1")
        self.assertIsNone(self.pull_requests.get(None, "missing"))
