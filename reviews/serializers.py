from rest_framework import serializers

from .models import PullRequest, User


class TeamMemberSerializer(serializers.ModelSerializer):
    user_id = serializers.CharField(source='id')
    username = serializers.CharField()
    is_active = serializers.BooleanField()

    class Meta:
        model = User
        fields = ['user_id', 'username', 'is_active']


class TeamSerializer(serializers.Serializer):
    team_name = serializers.CharField(source='name')
    members = TeamMemberSerializer(many=True)


class UserSerializer(serializers.ModelSerializer):
    user_id = serializers.CharField(source='id')
    username = serializers.CharField()
    team_name = serializers.CharField()
    is_active = serializers.BooleanField()

    class Meta:
        model = User
        fields = ['user_id', 'username', 'team_name', 'is_active']


class PullRequestSerializer(serializers.Serializer):
    """Serializes a ``PullRequestState`` or ``ReassignResult``."""
    pull_request_id = serializers.CharField(source='pull_request.id')
    pull_request_name = serializers.CharField(source='pull_request.title')
    author_id = serializers.CharField(source='pull_request.author_id')
    status = serializers.CharField(source='pull_request.status')
    assigned_reviewers = serializers.ListField(source='reviewer_ids', child=serializers.CharField())
    createdAt = serializers.DateTimeField(source='pull_request.created_at', format='%Y-%m-%dT%H:%M:%SZ')
    mergedAt = serializers.DateTimeField(source='pull_request.merged_at', format='%Y-%m-%dT%H:%M:%SZ',
                                         allow_null=True)


class PullRequestShortSerializer(serializers.ModelSerializer):
    pull_request_id = serializers.CharField(source='id')
    pull_request_name = serializers.CharField(source='title')
    author_id = serializers.CharField()
    status = serializers.CharField()

    class Meta:
        model = PullRequest
        fields = ['pull_request_id', 'pull_request_name', 'author_id', 'status']


class DeactivationSerializer(serializers.Serializer):
    team_name = serializers.CharField()
    deactivated_users = serializers.IntegerField()
    removed_assignments = serializers.IntegerField()
    affected_pull_requests = serializers.IntegerField()
    prs_without_reviewers = serializers.IntegerField()
    user_ids = serializers.ListField(child=serializers.CharField())


class UserReviewStatsSerializer(serializers.Serializer):
    user_id = serializers.CharField()
    username = serializers.CharField()
    team_name = serializers.CharField()
    is_active = serializers.BooleanField()
    assignments_count = serializers.IntegerField()
    active_reviews = serializers.IntegerField()


class PRReviewerStatsSerializer(serializers.Serializer):
    pull_request_id = serializers.CharField()
    pull_request_name = serializers.CharField()
    status = serializers.CharField()
    reviewers_count = serializers.IntegerField()
    created_at = serializers.DateTimeField(format='%Y-%m-%dT%H:%M:%SZ')
    merged_at = serializers.DateTimeField(format='%Y-%m-%dT%H:%M:%SZ', allow_null=True)


class StatsSerializer(serializers.Serializer):
    total_prs = serializers.IntegerField()
    open_prs = serializers.IntegerField()
    merged_prs = serializers.IntegerField()
    total_assignments = serializers.IntegerField()
    open_prs_without_reviewers = serializers.IntegerField()
    user_stats = UserReviewStatsSerializer(many=True)
    pr_stats = PRReviewerStatsSerializer(many=True)


class StrictCharField(serializers.CharField):
    """Accepts JSON strings only; numbers are not coerced."""

    def to_internal_value(self, data):
        if not isinstance(data, str):
            self.fail('invalid')
        return super().to_internal_value(data)


class StrictBooleanField(serializers.BooleanField):
    """Accepts JSON ``true``/``false`` only, not ``"yes"`` or ``1``."""

    def to_internal_value(self, data):
        if not isinstance(data, bool):
            self.fail('invalid', input=data)
        return data


class MemberInputSerializer(serializers.Serializer):
    user_id = StrictCharField(max_length=255)
    username = StrictCharField(max_length=255)
    is_active = StrictBooleanField()


class TeamInputSerializer(serializers.Serializer):
    team_name = StrictCharField(max_length=255)
    members = MemberInputSerializer(many=True)


class TeamNameInputSerializer(serializers.Serializer):
    team_name = StrictCharField(max_length=255)


class SetIsActiveInputSerializer(serializers.Serializer):
    user_id = StrictCharField(max_length=255)
    is_active = StrictBooleanField()


class PullRequestCreateInputSerializer(serializers.Serializer):
    pull_request_id = StrictCharField(max_length=255)
    pull_request_name = StrictCharField(max_length=255)
    author_id = StrictCharField(max_length=255)


class PullRequestMergeInputSerializer(serializers.Serializer):
    pull_request_id = StrictCharField(max_length=255)


class ReassignInputSerializer(serializers.Serializer):
    pull_request_id = StrictCharField(max_length=255)
    old_user_id = StrictCharField(max_length=255)
