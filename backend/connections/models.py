from django.conf import settings
from django.db import models
from django.db.models import F, Q
from django.utils import timezone


class Connection(models.Model):
    """
    A social link between two users.

    pending -> accepted | declined (addressee only); pending/accepted -> blocked
    (either side); pending/accepted rows can also be deleted by either side.
    """

    STATUS_PENDING = 'pending'
    STATUS_ACCEPTED = 'accepted'
    STATUS_DECLINED = 'declined'
    STATUS_BLOCKED = 'blocked'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_ACCEPTED, 'Accepted'),
        (STATUS_DECLINED, 'Declined'),
        (STATUS_BLOCKED, 'Blocked'),
    ]
    OPEN_STATUSES = (STATUS_PENDING, STATUS_ACCEPTED)
    # at most one row per pair holds one of these
    CURRENT_STATUSES = OPEN_STATUSES + (STATUS_BLOCKED,)

    requester = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='sent_connections'
    )
    addressee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='received_connections'
    )
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING)

    # "<low id>:<high id>", identical for both directions of the pair
    pair_key = models.CharField(max_length=64, editable=False, db_index=True)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'connections'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['pair_key'],
                condition=Q(status__in=['pending', 'accepted', 'blocked']),
                name='one_current_connection_per_pair'
            ),
            models.CheckConstraint(
                condition=~Q(requester=F('addressee')),
                name='connection_not_self'
            ),
        ]

    def __str__(self):
        return f"Connection #{self.id} - {self.requester_id} -> {self.addressee_id} ({self.status})"

    @staticmethod
    def make_pair_key(user_a_id, user_b_id) -> str:
        low, high = sorted((int(user_a_id), int(user_b_id)))
        return f"{low}:{high}"

    def save(self, *args, **kwargs):
        self.pair_key = self.make_pair_key(self.requester_id, self.addressee_id)
        super().save(*args, **kwargs)

    def other_party_id(self, user_id):
        return self.addressee_id if self.requester_id == user_id else self.requester_id
