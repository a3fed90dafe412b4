"""
Lifecycle event publishing for offerings.

Events go to the channel-layer group `offering_<id>` once the surrounding
transaction commits. Delivering them to devices is someone else's job, so a
publishing failure is logged and never breaks the operation that caused it.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction
from django.utils import timezone

logger = logging.getLogger(__name__)


def offering_group_name(offering_id: int) -> str:
    return f"offering_{offering_id}"


def notify_offering_group(offering_id: int, event_type: str, message: str, **extra: Any) -> bool:
    """Send one event to everyone listening on the offering's group."""
    payload: Dict[str, Any] = {
        "type": event_type,
        "offering_id": offering_id,
        "message": message,
        "timestamp": timezone.now().isoformat(),
        **extra,
    }

    try:
        channel_layer = get_channel_layer()
        if channel_layer is None:
            return False
        async_to_sync(channel_layer.group_send)(offering_group_name(offering_id), payload)
        return True
    except Exception:
        logger.exception("Failed to notify offering group for offering %s", offering_id)
        return False


def publish_offering_event(offering_id: int, event_type: str, message: str, **extra: Any) -> None:
    """Queue `notify_offering_group` to run after the current transaction commits."""
    transaction.on_commit(
        lambda: notify_offering_group(offering_id, event_type, message, **extra)
    )
