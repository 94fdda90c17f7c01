"""Store exceptions.

Every handler failure is one of a small fixed set of kinds. Each carries
a human-readable message and maps to one HTTP status in the API layer.
"""


class StoreError(Exception):
    """Base class for store handler failures."""

    code = "error"
    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class Unauthenticated(StoreError):
    """The operation requires a signed-in user."""

    code = "unauthenticated"
    status_code = 401


class NotFound(StoreError):
    """The referenced record does not exist or is not visible to the caller."""

    code = "not_found"
    status_code = 404


class Unauthorized(StoreError):
    """The caller is signed in but may not act on the record."""

    code = "unauthorized"
    status_code = 403


class ValidationFailed(StoreError):
    """The request conflicts with domain rules (stock, rating range, input)."""

    code = "validation_failed"
    status_code = 400


class Conflict(StoreError):
    """The write collides with existing state (duplicate review, reused upload)."""

    code = "conflict"
    status_code = 409
