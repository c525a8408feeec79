"""
Domain exceptions.

Services raise these; the handler registered in kryos.main maps each one to
its HTTP status and renders an ErrorResponse body.
"""


class KryosError(Exception):
    status_code = 500
    error = "Internal error"

    def __init__(self, message: str, detail: str = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class InputValidationError(KryosError):
    """Missing or invalid fields, rejected before any external call."""
    status_code = 400
    error = "Invalid request"


class PermissionDeniedError(KryosError):
    status_code = 403
    error = "Forbidden"


class NotFoundError(KryosError):
    status_code = 404
    error = "Not found"


class InvalidTransitionError(KryosError):
    status_code = 409
    error = "Invalid status transition"


class ImmutableFieldError(KryosError):
    status_code = 409
    error = "Immutable field"


class UpstreamError(KryosError):
    """Payment gateway or object store failure, upstream message attached as detail."""
    status_code = 502
    error = "Upstream error"


class PersistenceError(KryosError):
    status_code = 503
    error = "Persistence unavailable"
