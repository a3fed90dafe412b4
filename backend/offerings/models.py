from django.conf import settings
from django.db import models
from django.db.models import F, Q
from django.utils import timezone


class Offering(models.Model):
    """
    A host-created, time-windowed ride group.

    Parties (immediate requests) and shows of interest (scheduled requests)
    share this table; `kind` is the discriminator and the variant-specific
    columns stay empty for the other kind.
    """

    KIND_PARTY = 'party'
    KIND_SOI = 'soi'
    KIND_CHOICES = [
        (KIND_PARTY, 'Party'),
        (KIND_SOI, 'Show of Interest'),
    ]

    RIDE_OPTION_CHOICES = [
        ('auto', 'Auto'),
        ('cab', 'Cab'),
        ('bike', 'Bike'),
        ('walk', 'Walk'),
        ('bus', 'Bus'),
        ('metro', 'Metro'),
    ]

    host = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='hosted_offerings'
    )
    kind = models.CharField(max_length=10, choices=KIND_CHOICES)

    # Common
    party_size = models.PositiveSmallIntegerField()
    meetup_point = models.CharField(max_length=255)
    drop_off = models.CharField(max_length=255)
    ride_options = models.JSONField(default=list, blank=True)
    display_university = models.BooleanField(default=False)
    host_university = models.CharField(max_length=120, null=True, blank=True)
    is_active = models.BooleanField(default=True)

    # Party only
    duration_minutes = models.PositiveSmallIntegerField(null=True, blank=True)
    expires_at = models.DateTimeField(null=True, blank=True)
    host_comments = models.TextField(null=True, blank=True)
    is_friends_only = models.BooleanField(default=False)

    # SOI only
    start_time = models.DateTimeField(null=True, blank=True)
    expiry_timestamp = models.DateTimeField(null=True, blank=True)

    # Guard columns: host slot backs the one-live-offering constraint,
    # member_count backs the conditional capacity update.
    holds_host_slot = models.BooleanField(default=True)
    member_count = models.PositiveSmallIntegerField(default=0)

    # Timestamps
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'offerings'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['host', 'kind'],
                condition=Q(holds_host_slot=True),
                name='one_live_offering_per_host_kind'
            ),
            models.CheckConstraint(
                condition=Q(member_count__lte=F('party_size')),
                name='offering_members_within_party_size'
            ),
            models.CheckConstraint(
                condition=Q(party_size__gte=1, party_size__lte=7),
                name='offering_party_size_range'
            ),
        ]
        indexes = [
            models.Index(fields=['kind', 'is_active', 'expires_at'], name='offering_party_window_idx'),
            models.Index(fields=['kind', 'is_active', 'start_time'], name='offering_soi_window_idx'),
        ]

    def __str__(self):
        return f"{self.get_kind_display()} #{self.id} - {self.host} ({'active' if self.is_active else 'inactive'})"

    @property
    def is_party(self):
        return self.kind == self.KIND_PARTY

    @property
    def is_soi(self):
        return self.kind == self.KIND_SOI


class PartyManager(models.Manager):
    def get_queryset(self):
        return super().get_queryset().filter(kind=Offering.KIND_PARTY)


class ShowOfInterestManager(models.Manager):
    def get_queryset(self):
        return super().get_queryset().filter(kind=Offering.KIND_SOI)


class Party(Offering):
    """Immediate ride request, live for `duration_minutes` after creation."""

    objects = PartyManager()

    class Meta:
        proxy = True
        verbose_name_plural = 'parties'

    def save(self, *args, **kwargs):
        self.kind = Offering.KIND_PARTY
        super().save(*args, **kwargs)


class ShowOfInterest(Offering):
    """Scheduled ride request anchored on an absolute start time."""

    objects = ShowOfInterestManager()

    class Meta:
        proxy = True
        verbose_name = 'show of interest'
        verbose_name_plural = 'shows of interest'

    def save(self, *args, **kwargs):
        self.kind = Offering.KIND_SOI
        super().save(*args, **kwargs)


class Membership(models.Model):
    """One user's place in one offering. Rejoining reactivates the same row."""

    STATUS_JOINED = 'joined'
    STATUS_LEFT = 'left'
    STATUS_KICKED = 'kicked'
    STATUS_CHOICES = [
        (STATUS_JOINED, 'Joined'),
        (STATUS_LEFT, 'Left'),
        (STATUS_KICKED, 'Kicked'),
    ]

    offering = models.ForeignKey(
        Offering,
        on_delete=models.CASCADE,
        related_name='memberships'
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='offering_memberships'
    )
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_JOINED)
    contact_shared = models.BooleanField(default=False)

    joined_at = models.DateTimeField(default=timezone.now)
    left_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'offering_memberships'
        ordering = ['joined_at']
        constraints = [
            models.UniqueConstraint(
                fields=['offering', 'user'],
                name='unique_offering_member'
            )
        ]

    def __str__(self):
        return f"Membership #{self.id} - {self.user} in {self.offering_id} ({self.status})"


class JoinRequest(models.Model):
    """
    A rider asking the host for a place.

    pending -> accepted | declined (host) or cancelled (requester). Accepting
    admits the rider through the same capacity gate as a direct join.
    """

    STATUS_PENDING = 'pending'
    STATUS_ACCEPTED = 'accepted'
    STATUS_DECLINED = 'declined'
    STATUS_CANCELLED = 'cancelled'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_ACCEPTED, 'Accepted'),
        (STATUS_DECLINED, 'Declined'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    offering = models.ForeignKey(
        Offering,
        on_delete=models.CASCADE,
        related_name='join_requests'
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='offering_join_requests'
    )
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING)

    created_at = models.DateTimeField(default=timezone.now)
    responded_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'offering_join_requests'
        ordering = ['created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['offering', 'user'],
                condition=Q(status='pending'),
                name='one_pending_join_request'
            )
        ]

    def __str__(self):
        return f"JoinRequest #{self.id} - {self.user} for {self.offering_id} ({self.status})"
