"""
Offering lifecycle service - parties and shows of interest.

This module handles:
    - Visibility windows (is_live / live_q)
    - Creating offerings under the one-live-offering-per-host rule
    - Capacity-gated joins and host-approved join requests
    - Leave / kick / cancel transitions
    - Live, mine and recently-ended listings
"""

from .visibility import is_live, live_q, ended_at, ended_reason
from .exclusivity import (
    has_live_offering,
    host_status,
    create_offering,
    create_party,
    create_soi,
)
from .capacity import join, free_slots
from .membership import leave, kick, cancel, set_contact_shared, list_members
from .join_requests import (
    request_join,
    respond_join_request,
    cancel_join_request,
    list_join_requests,
)
from .queries import list_live_offerings, list_my_offerings, list_expired_offerings
from .store import get_offering, release_elapsed_host_slots

__all__ = [
    # Visibility
    "is_live",
    "live_q",
    "ended_at",
    "ended_reason",
    # Creation
    "has_live_offering",
    "host_status",
    "create_offering",
    "create_party",
    "create_soi",
    # Membership
    "join",
    "free_slots",
    "leave",
    "kick",
    "cancel",
    "set_contact_shared",
    "list_members",
    # Join requests
    "request_join",
    "respond_join_request",
    "cancel_join_request",
    "list_join_requests",
    # Reads
    "list_live_offerings",
    "list_my_offerings",
    "list_expired_offerings",
    "get_offering",
    "release_elapsed_host_slots",
]
