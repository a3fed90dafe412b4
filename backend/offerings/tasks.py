"""Celery tasks for offering housekeeping."""

from celery import shared_task
from django.utils import timezone
import logging

logger = logging.getLogger(__name__)


@shared_task
def sweep_expired_offerings_task():
    """
    Periodic task that gives back the host slot of offerings whose window
    has elapsed.

    Creation already releases the calling host's stale slot, so this only
    keeps the guard column tidy for hosts who never come back.
    """
    from services.offering_lifecycle import release_elapsed_host_slots

    released = release_elapsed_host_slots(timezone.now())
    if released:
        logger.info(f"Released host slots of {released} elapsed offerings")
    return released
