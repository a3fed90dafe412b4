from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone


class Rating(models.Model):
    """A 1-5 score one participant gives another for a shared offering."""

    rater = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='ratings_given'
    )
    rated_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='ratings_received'
    )
    offering = models.ForeignKey(
        'offerings.Offering',
        on_delete=models.CASCADE,
        related_name='ratings'
    )
    score = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)]
    )
    comment = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'ratings'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['rater', 'rated_user', 'offering'],
                name='one_rating_per_offering'
            ),
            models.CheckConstraint(
                condition=Q(score__gte=1, score__lte=5),
                name='rating_score_range'
            ),
        ]

    def __str__(self):
        return f"Rating #{self.id} - {self.rater_id} -> {self.rated_user_id}: {self.score}"


class Report(models.Model):
    """A user report queued for moderation."""

    REASON_CHOICES = [
        ('harassment', 'Harassment'),
        ('bad_behavior', 'Bad Behavior'),
        ('spam', 'Spam'),
        ('inappropriate', 'Inappropriate Content'),
        ('safety', 'Safety Concern'),
        ('no_show', 'No Show'),
        ('other', 'Other'),
    ]
    REASONS = tuple(value for value, _ in REASON_CHOICES)

    STATUS_PENDING = 'pending'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        ('reviewed', 'Reviewed'),
        ('resolved', 'Resolved'),
        ('dismissed', 'Dismissed'),
    ]

    reporter = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='reports_filed'
    )
    reported_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='reports_received'
    )
    offering = models.ForeignKey(
        'offerings.Offering',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reports'
    )
    reason = models.CharField(max_length=20, choices=REASON_CHOICES)
    details = models.TextField(blank=True, null=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'reports'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['reporter', 'reported_user', 'created_at'], name='report_pair_recent_idx'),
        ]

    def __str__(self):
        return f"Report #{self.id} - {self.reporter_id} -> {self.reported_user_id} ({self.reason})"
