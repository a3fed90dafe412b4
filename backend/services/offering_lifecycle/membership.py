"""
Membership ledger: leave, kick, cancel and contact sharing.

All transitions here are terminal and idempotent: repeating a call that
already took effect is a no-op that returns False.
"""

import logging
from typing import Any, Dict, List

from django.db import transaction

from offerings.models import Offering, Membership
from realtime.notifications import publish_offering_event
from services.exceptions import ForbiddenError, NotFoundError, NotLiveError
from services.context import RequestContext
from . import store
from .visibility import is_live

logger = logging.getLogger(__name__)


def _end_membership(offering: Offering, user_id, new_status: str, ctx: RequestContext) -> bool:
    with transaction.atomic():
        ended = (
            Membership.objects
            .filter(offering=offering, user_id=user_id, status=Membership.STATUS_JOINED)
            .update(status=new_status, left_at=ctx.now, contact_shared=False)
        )
        if ended:
            store.release_member_slot(offering.pk)
    return ended == 1


def leave(ctx: RequestContext, offering_id) -> bool:
    """
    Leave an offering the caller joined.

    Returns False when there was nothing to leave (never joined, already
    left or kicked, or the offering is already over).
    """
    offering = store.get_offering(offering_id)
    if offering.host_id == ctx.user_id:
        raise ForbiddenError("Hosts cannot leave their own offering; cancel it instead")

    if not is_live(offering, ctx.now):
        return False

    left = _end_membership(offering, ctx.user_id, Membership.STATUS_LEFT, ctx)
    if left:
        logger.info("User %s left offering %s", ctx.user_id, offering.pk)
        publish_offering_event(offering.pk, "member_left", "A rider left", user_id=ctx.user_id)
    return left


def kick(ctx: RequestContext, offering_id, member_user_id) -> bool:
    """Host-only: remove a joined member. A kicked member cannot rejoin."""
    offering = store.get_offering(offering_id)
    if offering.host_id != ctx.user_id:
        raise ForbiddenError("Only the host can remove members")
    if str(member_user_id) == str(ctx.user_id):
        raise ForbiddenError("Hosts cannot remove themselves; cancel the offering instead")

    if not is_live(offering, ctx.now):
        return False

    kicked = _end_membership(offering, member_user_id, Membership.STATUS_KICKED, ctx)
    if kicked:
        logger.info("Host %s removed user %s from offering %s", ctx.user_id, member_user_id, offering.pk)
        publish_offering_event(
            offering.pk, "member_kicked", "The host removed a rider", user_id=member_user_id
        )
    return kicked


def cancel(ctx: RequestContext, offering_id) -> bool:
    """
    Host-only: end the offering now. Cancellation is terminal.

    Returns False if the offering had already ended.
    """
    offering = store.get_offering(offering_id)
    if offering.host_id != ctx.user_id:
        raise ForbiddenError("Only the host can cancel this offering")

    cancelled = store.deactivate(offering, ctx.now)
    if cancelled:
        publish_offering_event(offering.pk, "offering_cancelled", "The host cancelled this ride")
    return cancelled


def set_contact_shared(ctx: RequestContext, offering_id, shared: bool) -> Membership:
    """Let a joined member expose (or hide) their phone number to the group."""
    offering = store.get_offering(offering_id)
    if not is_live(offering, ctx.now):
        raise NotLiveError()

    try:
        membership = Membership.objects.get(
            offering=offering, user=ctx.user, status=Membership.STATUS_JOINED
        )
    except Membership.DoesNotExist:
        raise NotFoundError("You are not a member of this offering")

    if membership.contact_shared != bool(shared):
        membership.contact_shared = bool(shared)
        membership.save(update_fields=["contact_shared"])
    return membership


# ===================== Projections =====================

def _member_profile(user, expose_phone: bool) -> Dict[str, Any]:
    return {
        "id": user.pk,
        "username": user.username,
        "full_name": user.get_full_name() or None,
        "university": user.university if user.show_university else None,
        "phone_number": user.phone_number if expose_phone and user.phone_number else None,
    }


def list_members(ctx: RequestContext, offering_id) -> List[Dict[str, Any]]:
    """
    Host first, then joined members in join order.

    Phone numbers are only shown to the host and joined members. Within the
    group a member's number is included when they shared contact for this
    offering and their profile allows showing it; the host's number follows
    the profile preference alone.
    """
    offering = store.get_offering(offering_id)
    memberships = list(
        Membership.objects
        .filter(offering=offering, status=Membership.STATUS_JOINED)
        .select_related("user")
        .order_by("joined_at", "pk")
    )
    in_group = offering.host_id == ctx.user_id or any(
        membership.user_id == ctx.user_id for membership in memberships
    )

    host = offering.host
    members = [{
        "user_id": host.pk,
        "status": "host",
        "is_host": True,
        "is_self": host.pk == ctx.user_id,
        "contact_shared": bool(host.show_phone),
        "joined_at": offering.created_at,
        "profile": _member_profile(host, expose_phone=in_group and host.show_phone),
    }]

    for membership in memberships:
        user = membership.user
        members.append({
            "user_id": user.pk,
            "status": membership.status,
            "is_host": False,
            "is_self": user.pk == ctx.user_id,
            "contact_shared": membership.contact_shared,
            "joined_at": membership.joined_at,
            "profile": _member_profile(
                user, expose_phone=in_group and membership.contact_shared and user.show_phone
            ),
        })
    return members


def joined_offering_ids(user, offering_ids) -> set:
    return set(
        Membership.objects
        .filter(user=user, offering_id__in=list(offering_ids), status=Membership.STATUS_JOINED)
        .values_list("offering_id", flat=True)
    )
