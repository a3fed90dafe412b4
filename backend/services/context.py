"""Per-request context handed to every ride-formation operation."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from django.utils import timezone

from services.exceptions import NotAuthenticatedError


@dataclass(frozen=True)
class RequestContext:
    """
    The authenticated user plus the server clock reading for one request.

    `now` is taken once per request from the server so every check inside an
    operation sees the same instant; clients never supply it.
    """
    user: Any
    now: datetime

    @property
    def user_id(self) -> int:
        return self.user.pk

    @classmethod
    def for_user(cls, user, now: Optional[datetime] = None) -> "RequestContext":
        if user is None or not getattr(user, "is_authenticated", False):
            raise NotAuthenticatedError()
        return cls(user=user, now=now or timezone.now())

    @classmethod
    def from_request(cls, request) -> "RequestContext":
        return cls.for_user(getattr(request, "user", None))
