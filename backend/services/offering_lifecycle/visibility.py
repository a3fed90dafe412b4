"""
Visibility window rules for offerings.

`is_live` decides in Python whether an offering is currently visible and
joinable; `live_q` expresses the very same predicate for the ORM so list
queries and conditional writes agree with it.
"""

from datetime import datetime, timedelta
from typing import Optional

from django.conf import settings
from django.db.models import Q
from django.utils import timezone

from offerings.models import Offering

ENDED_CANCELLED = "cancelled"
ENDED_EXPIRED = "expired"


def soi_grace() -> timedelta:
    """How long after its start time a show of interest stays visible."""
    return timedelta(minutes=getattr(settings, "SOI_START_GRACE_MINUTES", 10))


def _is_aware(value) -> bool:
    return isinstance(value, datetime) and timezone.is_aware(value)


def is_live(offering, now: datetime) -> bool:
    """
    Return True if the offering is visible and accepts joins at `now`.

    Fails closed: missing or naive timestamps and unknown kinds are not live.
    """
    if not _is_aware(now):
        return False

    try:
        if not offering.is_active:
            return False

        if offering.kind == Offering.KIND_PARTY:
            return _is_aware(offering.expires_at) and offering.expires_at > now

        if offering.kind == Offering.KIND_SOI:
            if not _is_aware(offering.start_time):
                return False
            if offering.start_time < now - soi_grace():
                return False
            expiry = offering.expiry_timestamp
            if expiry is None:
                return True
            return _is_aware(expiry) and expiry > now
    except AttributeError:
        return False

    return False


def live_q(now: datetime, kind: Optional[str] = None) -> Q:
    """ORM filter matching exactly the offerings `is_live` accepts at `now`."""
    party = Q(kind=Offering.KIND_PARTY, is_active=True, expires_at__gt=now)
    soi = (
        Q(kind=Offering.KIND_SOI, is_active=True, start_time__gte=now - soi_grace())
        & (Q(expiry_timestamp__isnull=True) | Q(expiry_timestamp__gt=now))
    )

    if kind == Offering.KIND_PARTY:
        return party
    if kind == Offering.KIND_SOI:
        return soi
    return party | soi


def ended_at(offering) -> Optional[datetime]:
    """The instant the offering stopped being live (or will, if it still is)."""
    if offering.cancelled_at is not None:
        return offering.cancelled_at

    if offering.kind == Offering.KIND_PARTY:
        return offering.expires_at

    if offering.kind == Offering.KIND_SOI and offering.start_time is not None:
        window_end = offering.start_time + soi_grace()
        if offering.expiry_timestamp is not None:
            return min(window_end, offering.expiry_timestamp)
        return window_end

    return None


def ended_reason(offering, now: datetime) -> Optional[str]:
    """`cancelled`, `expired`, or None while the offering is still live."""
    if is_live(offering, now):
        return None
    if offering.cancelled_at is not None or not offering.is_active:
        return ENDED_CANCELLED
    return ENDED_EXPIRED
