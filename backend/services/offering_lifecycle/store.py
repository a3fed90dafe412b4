"""
Offering store: reads and writes of offering records.

Everything that touches the `offerings` table goes through here so the
guard columns (`holds_host_slot`, `member_count`) are only ever changed by
the atomic statements below.
"""

import logging
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from django.db.models import Case, DateTimeField, ExpressionWrapper, F, Q, QuerySet, When

from offerings.models import Offering, Membership
from .visibility import live_q, is_live, ended_at, soi_grace
from services.exceptions import NotFoundError

logger = logging.getLogger(__name__)


def get_offering(offering_id, kind: Optional[str] = None) -> Offering:
    """Fetch one offering by id (optionally of a given kind) or raise NotFoundError."""
    qs = Offering.objects.select_related("host")
    if kind:
        qs = qs.filter(kind=kind)
    try:
        return qs.get(pk=offering_id)
    except (Offering.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("Offering not found")


def insert_offering(**fields) -> Offering:
    """Insert a new offering holding its host slot. Raises IntegrityError on a slot clash."""
    return Offering.objects.create(holds_host_slot=True, member_count=0, **fields)


def release_elapsed_host_slots(now: datetime, host=None, kind: Optional[str] = None) -> int:
    """
    Give back the host slot of every offering that is no longer live.

    Returns the number of offerings released.
    """
    qs = Offering.objects.filter(holds_host_slot=True)
    if host is not None:
        qs = qs.filter(host=host)
    if kind:
        qs = qs.filter(kind=kind)
    return qs.exclude(live_q(now)).update(holds_host_slot=False)


def live_offerings(now: datetime, kind: Optional[str] = None) -> QuerySet:
    return Offering.objects.filter(live_q(now, kind)).select_related("host")


def live_hosted_by(host, now: datetime, kind: Optional[str] = None) -> QuerySet:
    return live_offerings(now, kind).filter(host=host)


def live_joined_by(user, now: datetime) -> QuerySet:
    return live_offerings(now).filter(
        memberships__user=user,
        memberships__status=Membership.STATUS_JOINED,
    )


def sort_soonest_ending(offerings: Iterable[Offering]) -> List[Offering]:
    return sorted(offerings, key=lambda o: (ended_at(o), o.pk))


def window_end_expression():
    """ORM counterpart of `ended_at` for offerings that are still live."""
    soi_end = ExpressionWrapper(F("start_time") + soi_grace(), output_field=DateTimeField())
    return Case(
        When(kind=Offering.KIND_PARTY, then=F("expires_at")),
        When(expiry_timestamp__lt=soi_end, then=F("expiry_timestamp")),
        default=soi_end,
        output_field=DateTimeField(),
    )


def order_soonest_ending(qs: QuerySet) -> QuerySet:
    return qs.annotate(window_end=window_end_expression()).order_by("window_end", "pk")


def recently_ended_for(user, now: datetime, window: timedelta) -> List[Offering]:
    """
    Offerings hosted or joined by `user` that stopped being live within `window`.

    Newest end first.
    """
    cutoff = now - window
    grace = soi_grace()

    ended_recently = (
        Q(cancelled_at__gte=cutoff)
        | Q(kind=Offering.KIND_PARTY, expires_at__lte=now, expires_at__gte=cutoff)
        | Q(kind=Offering.KIND_SOI, start_time__lt=now - grace, start_time__gte=cutoff - grace)
        | Q(kind=Offering.KIND_SOI, expiry_timestamp__lte=now, expiry_timestamp__gte=cutoff)
    )
    involved = Q(host=user) | Q(
        memberships__user=user,
        memberships__status=Membership.STATUS_JOINED,
    )

    candidates = (
        Offering.objects.filter(involved)
        .filter(ended_recently)
        .select_related("host")
        .distinct()
    )

    ended = []
    for offering in candidates:
        end = ended_at(offering)
        if is_live(offering, now) or end is None or end < cutoff or end > now:
            continue
        ended.append(offering)

    ended.sort(key=lambda o: (ended_at(o), o.pk), reverse=True)
    return ended


# ===================== Guard Column Updates =====================

def reserve_member_slot(offering_id, now: datetime) -> bool:
    """
    Atomically take one member slot if the offering is live and not full.

    One conditional UPDATE; returns True when the slot was taken.
    """
    updated = (
        Offering.objects
        .filter(live_q(now), pk=offering_id, member_count__lt=F("party_size"))
        .update(member_count=F("member_count") + 1)
    )
    return updated == 1


def release_member_slot(offering_id) -> bool:
    updated = (
        Offering.objects
        .filter(pk=offering_id, member_count__gt=0)
        .update(member_count=F("member_count") - 1)
    )
    return updated == 1


def deactivate(offering: Offering, now: datetime) -> bool:
    """
    Flip a live offering to inactive. Parties also get `expires_at` pulled to now.

    Returns False when the offering was already terminal.
    """
    updates = {
        "is_active": False,
        "holds_host_slot": False,
        "cancelled_at": now,
        "updated_at": now,
    }
    if offering.kind == Offering.KIND_PARTY:
        updates["expires_at"] = now

    updated = (
        Offering.objects
        .filter(live_q(now), pk=offering.pk)
        .update(**updates)
    )
    if updated:
        logger.info("Offering %s deactivated at %s", offering.pk, now.isoformat())
    return updated == 1
