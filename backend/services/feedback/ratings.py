"""Post-ride ratings between participants of an offering."""

import logging
from typing import Any, Dict, Optional

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Avg, Count

from feedback.models import Rating
from offerings.models import Membership
from services.context import RequestContext
from services.exceptions import (
    DuplicateError,
    ForbiddenError,
    NotFoundError,
    SelfReferenceError,
    ValidationError,
)
from services.offering_lifecycle import get_offering

User = get_user_model()
logger = logging.getLogger(__name__)

RECENT_RATINGS_LIMIT = 50


def _took_part(offering, user_id) -> bool:
    if offering.host_id == user_id:
        return True
    return Membership.objects.filter(
        offering=offering, user_id=user_id, status=Membership.STATUS_JOINED
    ).exists()


def _clamp_score(score) -> int:
    try:
        value = int(score)
    except (TypeError, ValueError):
        raise ValidationError(errors={"score": "must be a whole number"})
    return min(5, max(1, value))


def submit_rating(ctx: RequestContext, rated_user_id, offering_id, score,
                  comment: Optional[str] = None) -> Rating:
    """
    Rate another user for an offering the caller hosted or joined.

    The score is clamped to 1-5. One rating per (rater, rated user, offering).
    """
    if str(rated_user_id) == str(ctx.user_id):
        raise SelfReferenceError("You cannot rate yourself")

    value = _clamp_score(score)
    offering = get_offering(offering_id)

    try:
        rated_user = User.objects.get(pk=rated_user_id)
    except (User.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("User not found")

    if not _took_part(offering, ctx.user_id):
        raise ForbiddenError("You can only rate riders from offerings you took part in")

    try:
        with transaction.atomic():
            rating = Rating.objects.create(
                rater=ctx.user,
                rated_user=rated_user,
                offering=offering,
                score=value,
                comment=(comment or "").strip() or None,
                created_at=ctx.now,
            )
    except IntegrityError:
        raise DuplicateError("You have already rated this user for this ride")

    logger.info("User %s rated user %s (%s) for offering %s", ctx.user_id, rated_user.pk, value, offering.pk)
    return rating


def rating_summary(user_id) -> Dict[str, Any]:
    """Average score (one decimal), total count and the latest ratings."""
    ratings = Rating.objects.filter(rated_user_id=user_id)
    totals = ratings.aggregate(average=Avg("score"), total=Count("id"))

    average = totals["average"]
    return {
        "average_rating": round(average, 1) if average is not None else 0,
        "total_ratings": totals["total"],
        "ratings": list(ratings.select_related("rater").order_by("-created_at")[:RECENT_RATINGS_LIMIT]),
    }
