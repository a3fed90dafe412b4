"""
Error kinds raised by the ride-formation services.

Every failure a caller can act on has its own class with a stable `code`
and the HTTP status the API layer answers with.
"""


class RideShareError(Exception):
    """Base class for failures surfaced to API callers."""
    code = "error"
    status_code = 400
    default_message = "The request could not be completed"

    def __init__(self, message=None):
        super().__init__(message or self.default_message)

    @property
    def message(self):
        return str(self)


class NotAuthenticatedError(RideShareError):
    """Raised when no authenticated user is attached to the request."""
    code = "not_authenticated"
    status_code = 401
    default_message = "You must be signed in"


class NotFoundError(RideShareError):
    """Raised when an offering, membership, user or connection does not exist."""
    code = "not_found"
    status_code = 404
    default_message = "Not found"


class HostAlreadyActiveError(RideShareError):
    """Raised when the host already has a live offering of the same kind."""
    code = "host_already_active"
    status_code = 409
    default_message = "You already have an active offering of this kind"


class SelfReferenceError(RideShareError):
    """Raised when a user targets themselves (connect, rate, report)."""
    code = "self_reference"
    status_code = 400
    default_message = "You cannot do that to yourself"


class AlreadyMemberError(RideShareError):
    """Raised when the user already holds a place in the offering."""
    code = "already_member"
    status_code = 409
    default_message = "You are already a member of this offering"


class OfferingFullError(RideShareError):
    """Raised when no free slot is left in the offering."""
    code = "full"
    status_code = 409
    default_message = "This offering is full"


class NotLiveError(RideShareError):
    """Raised when the offering was cancelled or its window elapsed."""
    code = "not_live"
    status_code = 410
    default_message = "This offering is no longer live"


class ForbiddenError(RideShareError):
    """Raised when the caller is not allowed to perform the transition."""
    code = "forbidden"
    status_code = 403
    default_message = "You are not allowed to do that"


class DuplicateError(RideShareError):
    """Raised for repeated connection requests, ratings and reports."""
    code = "duplicate"
    status_code = 409
    default_message = "This was already submitted"


class ValidationError(RideShareError):
    """Raised before any write when the input is out of bounds or malformed."""
    code = "validation_error"
    status_code = 400
    default_message = "Invalid input"

    def __init__(self, message=None, errors=None):
        self.errors = dict(errors or {})
        if message is None and self.errors:
            message = "; ".join(f"{field}: {msg}" for field, msg in self.errors.items())
        super().__init__(message)
