"""Username search alongside the connection graph. Pure read."""

from typing import List

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db.models import Case, IntegerField, Value, When

from services.context import RequestContext

User = get_user_model()


def search_usernames(ctx: RequestContext, query: str, same_university: bool = False) -> List:
    """
    Case-insensitive substring match on usernames, prefix matches first.

    The caller is never returned. With `same_university` the results are
    limited to the caller's institution (ignored when the caller has none).
    """
    term = (query or "").strip()
    if not term:
        return []

    qs = (
        User.objects
        .filter(username__icontains=term, is_active=True)
        .exclude(pk=ctx.user_id)
    )
    if same_university and ctx.user.university:
        qs = qs.filter(university=ctx.user.university)

    qs = qs.annotate(
        prefix_rank=Case(
            When(username__istartswith=term, then=Value(0)),
            default=Value(1),
            output_field=IntegerField(),
        )
    ).order_by("prefix_rank", "username")

    return list(qs[:settings.USERNAME_SEARCH_LIMIT])
