"""
Connection request state machine.

At most one current (pending, accepted or blocked) row exists per unordered
pair; the partial unique constraint on `pair_key` settles concurrent requests
and the loser gets DuplicateError.
"""

import logging
from typing import Any, Dict, Set

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Q

from connections.models import Connection
from services.context import RequestContext
from services.exceptions import (
    DuplicateError,
    ForbiddenError,
    NotFoundError,
    SelfReferenceError,
    ValidationError,
)

User = get_user_model()
logger = logging.getLogger(__name__)


def _get_user(user_id):
    try:
        return User.objects.get(pk=user_id, is_active=True)
    except (User.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("User not found")


def _get_connection_for(ctx: RequestContext, connection_id) -> Connection:
    """Fetch a connection the caller is a party to; anything else is NotFound."""
    try:
        return Connection.objects.get(
            Q(requester=ctx.user) | Q(addressee=ctx.user),
            pk=connection_id,
        )
    except (Connection.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("Connection not found")


# ===================== Queries =====================

def are_connected(user_a_id, user_b_id) -> bool:
    if user_a_id is None or user_b_id is None or user_a_id == user_b_id:
        return False
    return Connection.objects.filter(
        pair_key=Connection.make_pair_key(user_a_id, user_b_id),
        status=Connection.STATUS_ACCEPTED,
    ).exists()


def connected_user_ids(user_id) -> Set[int]:
    """Ids of everyone holding an accepted connection with `user_id`."""
    rows = Connection.objects.filter(
        Q(requester_id=user_id) | Q(addressee_id=user_id),
        status=Connection.STATUS_ACCEPTED,
    ).values_list("requester_id", "addressee_id")
    return {addressee if requester == user_id else requester for requester, addressee in rows}


def is_blocked(user_a_id, user_b_id) -> bool:
    return Connection.objects.filter(
        pair_key=Connection.make_pair_key(user_a_id, user_b_id),
        status=Connection.STATUS_BLOCKED,
    ).exists()


def connections_bundle(ctx: RequestContext) -> Dict[str, Any]:
    """Accepted connections plus incoming and outgoing pending requests."""
    base = Connection.objects.select_related("requester", "addressee")
    return {
        "current_user_id": ctx.user_id,
        "connections": list(base.filter(
            Q(requester=ctx.user) | Q(addressee=ctx.user),
            status=Connection.STATUS_ACCEPTED,
        )),
        "incoming_requests": list(base.filter(addressee=ctx.user, status=Connection.STATUS_PENDING)),
        "outgoing_requests": list(base.filter(requester=ctx.user, status=Connection.STATUS_PENDING)),
        "university": ctx.user.university,
    }


# ===================== Transitions =====================

def send_request(ctx: RequestContext, addressee_id) -> Connection:
    """
    Open a pending connection request from the caller to `addressee_id`.

    Raises:
        SelfReferenceError: requester and addressee are the same user
        NotFoundError: no such addressee
        ForbiddenError: the pair is blocked
        DuplicateError: an open row already exists for the pair
    """
    if str(addressee_id) == str(ctx.user_id):
        raise SelfReferenceError("You cannot connect with yourself")

    addressee = _get_user(addressee_id)
    pair_key = Connection.make_pair_key(ctx.user_id, addressee.pk)

    if is_blocked(ctx.user_id, addressee.pk):
        raise ForbiddenError("You cannot connect with this user")
    if Connection.objects.filter(pair_key=pair_key, status__in=Connection.OPEN_STATUSES).exists():
        raise DuplicateError("A connection request already exists between you")

    try:
        with transaction.atomic():
            connection = Connection.objects.create(
                requester=ctx.user,
                addressee=addressee,
                status=Connection.STATUS_PENDING,
                created_at=ctx.now,
            )
    except IntegrityError:
        raise DuplicateError("A connection request already exists between you")

    logger.info("User %s sent a connection request to %s", ctx.user_id, addressee.pk)
    return connection


def send_request_by_username(ctx: RequestContext, username: str) -> Connection:
    cleaned = (username or "").strip()
    if not cleaned:
        raise ValidationError(errors={"username": "is required"})

    addressee = User.objects.filter(username__iexact=cleaned, is_active=True).first()
    if addressee is None:
        raise NotFoundError("User not found")
    return send_request(ctx, addressee.pk)


def respond(ctx: RequestContext, connection_id, accept: bool) -> Connection:
    """Addressee accepts or declines a pending request."""
    connection = _get_connection_for(ctx, connection_id)
    if connection.addressee_id != ctx.user_id:
        raise ForbiddenError("Only the recipient can respond to this request")

    new_status = Connection.STATUS_ACCEPTED if accept else Connection.STATUS_DECLINED
    updated = (
        Connection.objects
        .filter(pk=connection.pk, status=Connection.STATUS_PENDING)
        .update(status=new_status, updated_at=ctx.now)
    )
    if not updated:
        raise ForbiddenError("This request is no longer pending")

    connection.refresh_from_db()
    logger.info("User %s %s connection %s", ctx.user_id, new_status, connection.pk)
    return connection


def remove(ctx: RequestContext, connection_id) -> None:
    """Either side cancels a pending request or removes an accepted connection."""
    connection = _get_connection_for(ctx, connection_id)
    deleted, _ = (
        Connection.objects
        .filter(pk=connection.pk, status__in=Connection.OPEN_STATUSES)
        .delete()
    )
    if not deleted:
        raise ForbiddenError(f"A {connection.status} connection cannot be removed")
    logger.info("User %s removed connection %s", ctx.user_id, connection.pk)


def block(ctx: RequestContext, other_user_id) -> Connection:
    """
    Either side blocks the pair. An open row flips to blocked; without one a
    new blocked row is recorded. Blocking twice is a no-op, and concurrent
    blocks settle on the single blocked row the constraint allows.
    """
    if str(other_user_id) == str(ctx.user_id):
        raise SelfReferenceError("You cannot block yourself")

    other = _get_user(other_user_id)
    pair_key = Connection.make_pair_key(ctx.user_id, other.pk)
    blocked = Connection.objects.filter(pair_key=pair_key, status=Connection.STATUS_BLOCKED)

    with transaction.atomic():
        Connection.objects.filter(
            pair_key=pair_key, status__in=Connection.OPEN_STATUSES
        ).update(status=Connection.STATUS_BLOCKED, updated_at=ctx.now)

        connection = blocked.first()
        if connection is None:
            try:
                with transaction.atomic():
                    connection = Connection.objects.create(
                        requester=ctx.user,
                        addressee=other,
                        status=Connection.STATUS_BLOCKED,
                        created_at=ctx.now,
                    )
            except IntegrityError:
                connection = blocked.get()

    logger.info("User %s blocked user %s", ctx.user_id, other.pk)
    return connection
