"""
Realtime helpers for offering lifecycle events.

Events are pushed to the channel-layer group of the offering after the
surrounding database transaction commits.

Usage:
    from realtime.notifications import publish_offering_event
"""
