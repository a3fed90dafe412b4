"""
Host-approved joins.

A rider may ask for a place instead of joining directly. Asking runs the same
admission checks as `join`; accepting claims the pending request and admits
the rider through `capacity.join` in one transaction, so a full or ended
offering rolls the claim back and the request stays pending.
"""

import logging
from typing import List, Optional

from django.db import IntegrityError, transaction

from offerings.models import JoinRequest, Membership
from realtime.notifications import publish_offering_event
from services.context import RequestContext
from services.exceptions import (
    DuplicateError,
    ForbiddenError,
    NotFoundError,
    OfferingFullError,
)
from . import store
from .capacity import _check_admissible, join

logger = logging.getLogger(__name__)


def _get_join_request(request_id) -> JoinRequest:
    try:
        return JoinRequest.objects.select_related("offering", "user").get(pk=request_id)
    except (JoinRequest.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("Join request not found")


def _close(join_request: JoinRequest, new_status: str, ctx: RequestContext) -> None:
    closed = (
        JoinRequest.objects
        .filter(pk=join_request.pk, status=JoinRequest.STATUS_PENDING)
        .update(status=new_status, responded_at=ctx.now)
    )
    if not closed:
        raise ForbiddenError("This request is no longer pending")


def request_join(ctx: RequestContext, offering_id) -> JoinRequest:
    """
    Ask the host of a live offering for a place.

    Raises:
        NotFoundError: no such offering
        NotLiveError: cancelled or window elapsed
        AlreadyMemberError: already joined, or the caller is the host
        ForbiddenError: kicked earlier, or friends-only and not connected
        OfferingFullError: no slot left to ask for
        DuplicateError: a request from the caller is already pending
    """
    offering = store.get_offering(offering_id)
    existing = Membership.objects.filter(offering=offering, user=ctx.user).first()
    _check_admissible(ctx, offering, existing)
    if offering.member_count >= offering.party_size:
        raise OfferingFullError()

    pending = JoinRequest.objects.filter(
        offering=offering, user=ctx.user, status=JoinRequest.STATUS_PENDING
    )
    if pending.exists():
        raise DuplicateError("You have already asked to join this offering")

    try:
        with transaction.atomic():
            join_request = JoinRequest.objects.create(
                offering=offering,
                user=ctx.user,
                status=JoinRequest.STATUS_PENDING,
                created_at=ctx.now,
            )
    except IntegrityError:
        raise DuplicateError("You have already asked to join this offering")

    logger.info("User %s asked to join offering %s", ctx.user_id, offering.pk)
    publish_offering_event(
        offering.pk, "join_requested", "A rider asked to join", user_id=ctx.user_id,
        request_id=join_request.pk,
    )
    return join_request


def respond_join_request(ctx: RequestContext, request_id, accept: bool) -> JoinRequest:
    """
    Host accepts or declines a pending request.

    Accepting admits the requester exactly as `join` would and raises its
    errors (OfferingFullError, NotLiveError, ...) with the request left pending.
    """
    join_request = _get_join_request(request_id)
    offering = join_request.offering
    if offering.host_id != ctx.user_id:
        raise ForbiddenError("Only the host can answer join requests")

    if not accept:
        _close(join_request, JoinRequest.STATUS_DECLINED, ctx)
        logger.info("Host %s declined join request %s", ctx.user_id, join_request.pk)
    else:
        requester_ctx = RequestContext.for_user(join_request.user, now=ctx.now)
        with transaction.atomic():
            _close(join_request, JoinRequest.STATUS_ACCEPTED, ctx)
            join(requester_ctx, offering.pk)
        logger.info("Host %s accepted join request %s", ctx.user_id, join_request.pk)

    join_request.refresh_from_db()
    publish_offering_event(
        offering.pk, f"join_request_{join_request.status}", "The host answered a join request",
        user_id=join_request.user_id, request_id=join_request.pk,
    )
    return join_request


def cancel_join_request(ctx: RequestContext, request_id) -> JoinRequest:
    """Requester withdraws their own pending request."""
    join_request = _get_join_request(request_id)
    if join_request.user_id != ctx.user_id:
        raise NotFoundError("Join request not found")

    _close(join_request, JoinRequest.STATUS_CANCELLED, ctx)
    join_request.refresh_from_db()
    logger.info("User %s withdrew join request %s", ctx.user_id, join_request.pk)
    return join_request


def list_join_requests(ctx: RequestContext, offering_id: Optional[int] = None) -> List[JoinRequest]:
    """
    Pending requests waiting on the caller, oldest first.

    With `offering_id` only that offering's requests are listed and the caller
    must be its host; without it every live offering the caller hosts is covered.
    """
    pending = JoinRequest.objects.filter(status=JoinRequest.STATUS_PENDING).select_related("user")

    if offering_id is not None:
        offering = store.get_offering(offering_id)
        if offering.host_id != ctx.user_id:
            raise ForbiddenError("Only the host can see join requests")
        pending = pending.filter(offering=offering)
    else:
        hosted_ids = store.live_hosted_by(ctx.user, ctx.now).values("pk")
        pending = pending.filter(offering_id__in=hosted_ids)

    return list(pending.order_by("created_at", "pk"))
