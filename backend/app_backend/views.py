import logging

import redis
from django.conf import settings
from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework import status
from channels.layers import get_channel_layer

from offerings.models import Offering
from offerings.tasks import sweep_expired_offerings_task
from .celery import app as celery_app

logger = logging.getLogger(__name__)


def _check_database():
    Offering.objects.exists()


def _check_redis():
    redis.Redis(
        host=settings.REDIS_HOST,
        port=settings.REDIS_PORT,
        db=0,
        socket_timeout=3,
    ).ping()


def _check_channels():
    if get_channel_layer() is None:
        raise RuntimeError("no channel layer")


def _check_celery():
    if sweep_expired_offerings_task.name not in celery_app.tasks:
        raise RuntimeError("sweep task not registered")


HEALTH_CHECKS = (
    ("database", _check_database),
    ("redis", _check_redis),
    ("channels", _check_channels),
    ("celery", _check_celery),
)


@api_view(["GET"])
@permission_classes([AllowAny])
def health_check(request):
    """Health check endpoint for monitoring system status"""

    services = {}
    for name, check in HEALTH_CHECKS:
        try:
            check()
            services[name] = "healthy"
        except Exception as e:
            logger.warning("Health check %s failed: %s", name, e)
            services[name] = f"unhealthy: {e}"

    healthy = all(state == "healthy" for state in services.values())
    return Response(
        {
            "status": "healthy" if healthy else "unhealthy",
            "timestamp": timezone.now().isoformat(),
            "services": services,
        },
        status=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
    )
