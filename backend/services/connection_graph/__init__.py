"""
Connection graph service - social links between users.

This module handles:
    - Sending, accepting and declining connection requests
    - Blocking and removing connections
    - Username search
"""

from .graph import (
    are_connected,
    connected_user_ids,
    is_blocked,
    connections_bundle,
    send_request,
    send_request_by_username,
    respond,
    remove,
    block,
)
from .search import search_usernames

__all__ = [
    "are_connected",
    "connected_user_ids",
    "is_blocked",
    "connections_bundle",
    "send_request",
    "send_request_by_username",
    "respond",
    "remove",
    "block",
    "search_usernames",
]
