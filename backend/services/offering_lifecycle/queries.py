"""Read-side views of offerings: live feed, my offerings, recently ended."""

from datetime import timedelta
from typing import List, Optional

from django.conf import settings
from django.db.models import Q

from offerings.models import Offering
from services.connection_graph import connected_user_ids
from services.context import RequestContext
from . import store
from .membership import joined_offering_ids
from .visibility import ended_at, ended_reason


def list_live_offerings(ctx: RequestContext, kind: Optional[str] = None) -> List[Offering]:
    """
    Live offerings the caller may see, soonest-ending first.

    Friends-only parties are visible to their host and the host's accepted
    connections only. Each offering gets an `is_joined` flag for the caller.
    """
    visible = (
        Q(is_friends_only=False)
        | Q(host=ctx.user)
        | Q(host_id__in=connected_user_ids(ctx.user_id))
    )
    live = store.live_offerings(ctx.now, kind).filter(visible)
    offerings = list(store.order_soonest_ending(live)[:settings.LIVE_FEED_LIMIT])

    joined = joined_offering_ids(ctx.user, [o.pk for o in offerings])
    for offering in offerings:
        offering.is_joined = offering.pk in joined
    return offerings


def list_my_offerings(ctx: RequestContext) -> List[Offering]:
    """Live offerings the caller hosts or has joined, deduplicated."""
    hosted = list(store.live_hosted_by(ctx.user, ctx.now))
    joined = list(store.live_joined_by(ctx.user, ctx.now))

    by_id = {}
    for offering in hosted + joined:
        by_id[offering.pk] = offering

    offerings = store.sort_soonest_ending(by_id.values())
    for offering in offerings:
        offering.is_joined = offering.host_id != ctx.user_id
    return offerings


def list_expired_offerings(ctx: RequestContext) -> List[Offering]:
    """
    Read-only view of offerings the caller hosted or joined that ended
    within EXPIRED_VIEW_WINDOW_MINUTES. Each one carries `ended_reason`
    and `ended_at`.
    """
    window = timedelta(minutes=settings.EXPIRED_VIEW_WINDOW_MINUTES)
    offerings = store.recently_ended_for(ctx.user, ctx.now, window)
    for offering in offerings:
        offering.ended_reason = ended_reason(offering, ctx.now)
        offering.ended_at = ended_at(offering)
    return offerings
