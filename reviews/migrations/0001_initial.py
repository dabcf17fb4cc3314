import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='User',
            fields=[
                ('id', models.CharField(max_length=255, primary_key=True, serialize=False)),
                ('username', models.CharField(max_length=255)),
                ('team_name', models.CharField(blank=True, default='', max_length=255)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'users',
                'indexes': [
                    models.Index(fields=['team_name', 'is_active'], name='idx_users_team_active'),
                ],
            },
        ),
        migrations.CreateModel(
            name='PullRequest',
            fields=[
                ('id', models.CharField(max_length=255, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=255)),
                ('status', models.CharField(
                    choices=[('OPEN', 'Open'), ('MERGED', 'Merged')],
                    default='OPEN',
                    max_length=10,
                )),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('merged_at', models.DateTimeField(blank=True, null=True)),
                ('author', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='authored_prs',
                    to='reviews.user',
                )),
            ],
            options={
                'db_table': 'pull_requests',
                'indexes': [
                    models.Index(fields=['status'], name='idx_pull_requests_status'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ReviewerAssignment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('assigned_at', models.DateTimeField(auto_now_add=True)),
                ('pull_request', models.ForeignKey(
                    db_column='pr_id',
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='assignments',
                    to='reviews.pullrequest',
                )),
                ('reviewer', models.ForeignKey(
                    db_column='reviewer_id',
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='review_assignments',
                    to='reviews.user',
                )),
            ],
            options={
                'db_table': 'pr_reviewers',
                'constraints': [
                    models.UniqueConstraint(fields=('pull_request', 'reviewer'), name='uq_pr_reviewer'),
                ],
            },
        ),
    ]
