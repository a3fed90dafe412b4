"""User reports for moderation."""

import logging
from datetime import timedelta
from typing import Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction

from feedback.models import Report
from services.context import RequestContext
from services.exceptions import (
    DuplicateError,
    NotFoundError,
    SelfReferenceError,
    ValidationError,
)
from services.offering_lifecycle import get_offering

User = get_user_model()
logger = logging.getLogger(__name__)


def submit_report(ctx: RequestContext, reported_user_id, reason: str,
                  details: Optional[str] = None, offering_id=None) -> Report:
    """
    File a report against another user.

    A second report by the same reporter against the same user inside
    REPORT_SPAM_WINDOW_MINUTES is rejected as a duplicate.
    """
    if str(reported_user_id) == str(ctx.user_id):
        raise SelfReferenceError("You cannot report yourself")
    if reason not in Report.REASONS:
        raise ValidationError(errors={"reason": f"must be one of {', '.join(Report.REASONS)}"})

    try:
        reported_user = User.objects.get(pk=reported_user_id)
    except (User.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("User not found")

    offering = get_offering(offering_id) if offering_id is not None else None

    window_start = ctx.now - timedelta(minutes=settings.REPORT_SPAM_WINDOW_MINUTES)

    with transaction.atomic():
        # One reporter's submissions run one at a time.
        User.objects.select_for_update().get(pk=ctx.user_id)

        recent = Report.objects.filter(
            reporter=ctx.user,
            reported_user=reported_user,
            created_at__gte=window_start,
        )
        if recent.exists():
            raise DuplicateError("You have already reported this user recently")

        report = Report.objects.create(
            reporter=ctx.user,
            reported_user=reported_user,
            offering=offering,
            reason=reason,
            details=(details or "").strip() or None,
            created_at=ctx.now,
        )

    logger.warning("User %s reported user %s for %s", ctx.user_id, reported_user.pk, reason)
    return report
