"""
Offering creation under the one-live-offering-per-host-per-kind rule.

The pre-check gives a friendly early answer; the partial unique constraint on
(host, kind) WHERE holds_host_slot is what actually decides a race, and the
losing insert is reported as HostAlreadyActiveError.
"""

import logging
from datetime import datetime
from typing import Any, Dict

from django.db import IntegrityError, transaction

from offerings.models import Offering
from realtime.notifications import publish_offering_event
from services.exceptions import HostAlreadyActiveError, ValidationError
from . import store
from services.context import RequestContext

logger = logging.getLogger(__name__)


def has_live_offering(host, kind: str, now: datetime) -> bool:
    """True if `host` already has a live offering of `kind`."""
    return store.live_hosted_by(host, now, kind).exists()


def host_status(ctx: RequestContext, kind: str) -> Dict[str, Any]:
    """What the host screen needs before offering a ride."""
    return {
        "user_id": ctx.user_id,
        "is_hosting": has_live_offering(ctx.user, kind, ctx.now),
        "university": ctx.user.university,
        "show_university_preference": bool(ctx.user.show_university),
    }


# ===================== Input Validation =====================

def _first_message(detail):
    """Flatten a DRF error detail (list or nested dict) to its first message."""
    while isinstance(detail, (list, dict)):
        if not detail:
            return ""
        detail = next(iter(detail.values())) if isinstance(detail, dict) else detail[0]
    return str(detail)


def _validated_input(kind: str, data, now: datetime) -> Dict[str, Any]:
    from offerings.serializers import PartyCreateSerializer, ShowOfInterestCreateSerializer

    serializer_class = {
        Offering.KIND_PARTY: PartyCreateSerializer,
        Offering.KIND_SOI: ShowOfInterestCreateSerializer,
    }.get(kind)
    if serializer_class is None:
        raise ValidationError(errors={"kind": f"unknown offering kind {kind!r}"})

    serializer = serializer_class(data=data, context={"now": now})
    if not serializer.is_valid():
        raise ValidationError(errors={
            field: _first_message(detail) for field, detail in serializer.errors.items()
        })
    return dict(serializer.validated_data)


# ===================== Creation =====================

def create_offering(ctx: RequestContext, kind: str, data) -> Offering:
    """
    Create a party or show of interest for the calling host.

    `data` is the raw request payload (a dict or QueryDict).

    Raises:
        ValidationError: input out of bounds (nothing written)
        HostAlreadyActiveError: the host already has a live offering of `kind`,
            including when a concurrent create won the race
    """
    fields = _validated_input(kind, data, ctx.now)
    fields["host_university"] = ctx.user.university if fields["display_university"] else None

    if has_live_offering(ctx.user, kind, ctx.now):
        raise HostAlreadyActiveError()

    try:
        with transaction.atomic():
            store.release_elapsed_host_slots(ctx.now, host=ctx.user, kind=kind)
            offering = store.insert_offering(
                host=ctx.user,
                kind=kind,
                created_at=ctx.now,
                **fields,
            )
    except IntegrityError:
        logger.info("Rejected concurrent %s creation for host %s", kind, ctx.user_id)
        raise HostAlreadyActiveError()

    logger.info("Host %s created %s #%s", ctx.user_id, kind, offering.pk)
    publish_offering_event(offering.pk, "offering_created", f"{offering.get_kind_display()} created")
    return offering


def create_party(ctx: RequestContext, data: Dict[str, Any]) -> Offering:
    return create_offering(ctx, Offering.KIND_PARTY, data)


def create_soi(ctx: RequestContext, data: Dict[str, Any]) -> Offering:
    return create_offering(ctx, Offering.KIND_SOI, data)
