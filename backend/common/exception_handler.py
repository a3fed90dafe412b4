"""DRF exception handler that turns service errors into JSON responses."""

import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler

from services.exceptions import RideShareError, ValidationError

logger = logging.getLogger(__name__)


def rideshare_exception_handler(exc, context):
    """
    Map a RideShareError to `{"error": ..., "code": ...}` with its status code.

    Anything else falls through to DRF's default handling.
    """
    if not isinstance(exc, RideShareError):
        return exception_handler(exc, context)

    payload = {"error": exc.message, "code": exc.code}
    if isinstance(exc, ValidationError) and exc.errors:
        payload["errors"] = exc.errors

    view = context.get("view")
    logger.info(
        "%s rejected with %s: %s",
        view.__class__.__name__ if view else "request",
        exc.code,
        exc.message,
    )
    return Response(payload, status=exc.status_code)
