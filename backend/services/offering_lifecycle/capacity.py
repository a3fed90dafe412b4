"""
Capacity gate: admission of members into an offering.

The slot is taken with a single conditional UPDATE ("increment member_count
if below party_size and still live"), and the membership row is written in
the same transaction, so concurrent joins can never overcommit.

Capacity policy: the host does not occupy a slot. `party_size` bounds the
number of joined members.
"""

import logging

from django.db import IntegrityError, transaction

from offerings.models import Offering, Membership
from realtime.notifications import publish_offering_event
from services.connection_graph import are_connected
from services.exceptions import (
    AlreadyMemberError,
    ForbiddenError,
    NotLiveError,
    OfferingFullError,
)
from . import store
from services.context import RequestContext
from .visibility import is_live

logger = logging.getLogger(__name__)


def _check_admissible(ctx: RequestContext, offering: Offering, existing):
    if offering.host_id == ctx.user_id:
        raise AlreadyMemberError("You are hosting this offering")

    if not is_live(offering, ctx.now):
        raise NotLiveError()

    if existing is not None:
        if existing.status == Membership.STATUS_JOINED:
            raise AlreadyMemberError()
        if existing.status == Membership.STATUS_KICKED:
            raise ForbiddenError("You were removed from this offering by the host")

    if offering.is_friends_only and not are_connected(ctx.user_id, offering.host_id):
        raise ForbiddenError("This party is open to the host's connections only")


def _activate_membership(ctx: RequestContext, offering: Offering, existing) -> Membership:
    if existing is None:
        return Membership.objects.create(
            offering=offering,
            user=ctx.user,
            status=Membership.STATUS_JOINED,
            contact_shared=False,
            joined_at=ctx.now,
        )

    # Rejoin: only a row that is still `left` may be flipped back.
    reactivated = (
        Membership.objects
        .filter(pk=existing.pk, status=Membership.STATUS_LEFT)
        .update(
            status=Membership.STATUS_JOINED,
            contact_shared=False,
            joined_at=ctx.now,
            left_at=None,
        )
    )
    if not reactivated:
        raise AlreadyMemberError()

    existing.refresh_from_db()
    return existing


def join(ctx: RequestContext, offering_id) -> Membership:
    """
    Admit the caller into the offering.

    Raises:
        NotFoundError: no such offering
        NotLiveError: cancelled or window elapsed
        AlreadyMemberError: already joined, or the caller is the host
        ForbiddenError: kicked earlier, or friends-only and not connected
        OfferingFullError: no slot left
    """
    offering = store.get_offering(offering_id)
    existing = Membership.objects.filter(offering=offering, user=ctx.user).first()
    _check_admissible(ctx, offering, existing)

    try:
        with transaction.atomic():
            if not store.reserve_member_slot(offering.pk, ctx.now):
                offering.refresh_from_db()
                if not is_live(offering, ctx.now):
                    raise NotLiveError()
                raise OfferingFullError()

            membership = _activate_membership(ctx, offering, existing)
    except IntegrityError:
        # Lost a race against our own concurrent join on the same offering.
        raise AlreadyMemberError()
    except OfferingFullError:
        logger.info("User %s turned away from full offering %s", ctx.user_id, offering.pk)
        raise

    logger.info("User %s joined offering %s", ctx.user_id, offering.pk)
    publish_offering_event(offering.pk, "member_joined", "A rider joined", user_id=ctx.user_id)
    return membership


def free_slots(offering: Offering) -> int:
    return max(offering.party_size - offering.member_count, 0)
