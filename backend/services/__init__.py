"""
Services package - Business logic layer.

This package contains the ride-formation rules. They operate on Django models
but are decoupled from the HTTP layer; every operation takes an explicit
RequestContext (authenticated user + server time).

Modules:
    - offering_lifecycle: parties, shows of interest and their memberships
    - connection_graph: connection requests between users and username search
    - feedback: post-ride ratings and user reports
"""

from .context import RequestContext
from .exceptions import (
    RideShareError,
    NotAuthenticatedError,
    NotFoundError,
    HostAlreadyActiveError,
    SelfReferenceError,
    AlreadyMemberError,
    OfferingFullError,
    NotLiveError,
    ForbiddenError,
    DuplicateError,
    ValidationError,
)

__all__ = [
    "RequestContext",
    # Exceptions
    "RideShareError",
    "NotAuthenticatedError",
    "NotFoundError",
    "HostAlreadyActiveError",
    "SelfReferenceError",
    "AlreadyMemberError",
    "OfferingFullError",
    "NotLiveError",
    "ForbiddenError",
    "DuplicateError",
    "ValidationError",
]
