from django.db import models
from django.utils import timezone


class User(models.Model):
    id = models.CharField(max_length=255, primary_key=True)
    username = models.CharField(max_length=255)
    # Empty string means the user is not on any team.
    team_name = models.CharField(max_length=255, blank=True, default='')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.username} ({self.id})"

    class Meta:
        db_table = 'users'
        indexes = [
            models.Index(fields=['team_name', 'is_active'], name='idx_users_team_active'),
        ]


class PullRequest(models.Model):
    class Status(models.TextChoices):
        OPEN = 'OPEN', 'Open'
        MERGED = 'MERGED', 'Merged'

    id = models.CharField(max_length=255, primary_key=True)
    title = models.CharField(max_length=255)
    author = models.ForeignKey(User, on_delete=models.PROTECT, related_name='authored_prs')
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.OPEN)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)
    merged_at = models.DateTimeField(null=True, blank=True)

    @property
    def is_merged(self) -> bool:
        return self.status == self.Status.MERGED

    def __str__(self):
        return f"{self.title} ({self.id})"

    class Meta:
        db_table = 'pull_requests'
        indexes = [
            models.Index(fields=['status'], name='idx_pull_requests_status'),
        ]


class ReviewerAssignment(models.Model):
    pull_request = models.ForeignKey(
        PullRequest,
        on_delete=models.CASCADE,
        related_name='assignments',
        db_column='pr_id',
    )
    reviewer = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name='review_assignments',
        db_column='reviewer_id',
    )
    assigned_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.pull_request_id} -> {self.reviewer_id}"

    class Meta:
        db_table = 'pr_reviewers'
        constraints = [
            models.UniqueConstraint(fields=['pull_request', 'reviewer'], name='uq_pr_reviewer'),
        ]
