from django.core.exceptions import ObjectDoesNotExist
from django.test import TestCase

from reviews.models import PullRequest, ReviewerAssignment, User
from reviews.services import UserService


class UserServiceTest(TestCase):
    def setUp(self):
        self.service = UserService()

        self.user1 = User.objects.create(id="u1", username="Alice", is_active=True, team_name="backend")
        self.user2 = User.objects.create(id="u2", username="Bob", is_active=True, team_name="backend")

        # u2 reviews pr-1
        self.pr = PullRequest.objects.create(id="pr-1", title="Test PR", author=self.user1)
        ReviewerAssignment.objects.create(pull_request=self.pr, reviewer=self.user2)

    def test_set_is_active_success(self):
        user = self.service.set_is_active("u1", False)

        self.assertEqual(user.id, "u1")
        self.assertFalse(user.is_active)
        self.assertFalse(User.objects.get(id="u1").is_active)

    def test_set_is_active_keeps_assignments(self):
        self.service.set_is_active("u2", False)

        self.assertTrue(ReviewerAssignment.objects.filter(pull_request=self.pr, reviewer_id="u2").exists())

    def test_set_is_active_not_found(self):
        with self.assertRaises(ObjectDoesNotExist):
            self.service.set_is_active("nonexistent", True)

    def test_get_review_success(self):
        assigned_prs = self.service.get_review("u2")

        self.assertEqual(len(assigned_prs), 1)
        self.assertEqual(assigned_prs[0].id, "pr-1")
        self.assertEqual(assigned_prs[0].author, self.user1)

    def test_get_review_empty(self):
        self.assertEqual(self.service.get_review("u1"), [])

    def test_get_review_not_found(self):
        with self.assertRaises(ObjectDoesNotExist):
            self.service.get_review("nonexistent")

    def test_get_review_multiple_prs(self):
        pr2 = PullRequest.objects.create(id="pr-2", title="Another PR", author=self.user1)
        ReviewerAssignment.objects.create(pull_request=pr2, reviewer=self.user2)

        assigned_prs = self.service.get_review("u2")

        self.assertEqual([pr.id for pr in assigned_prs], ["pr-1", "pr-2"])
