"""
Error taxonomy shared by the stores, services and the HTTP layer.

Each error carries the HTTP status it is reported with; the mapping is
applied by the exception handlers registered in ``api.main``.
"""


class TaskmindError(Exception):
    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class ConflictError(TaskmindError):
    """Email is already registered."""
    status_code = 409
    default_message = "Email already registered"


class AuthError(TaskmindError):
    """Bad credentials or a missing/invalid token. Never says which field was wrong."""
    status_code = 401
    default_message = "Invalid credentials"


class NotFoundError(TaskmindError):
    """Task does not exist or belongs to another account."""
    status_code = 404
    default_message = "Not found"


class EnrichmentError(TaskmindError):
    status_code = 500
    default_message = "Failed to generate procedure from AI."


class StoreError(TaskmindError):
    status_code = 500
    default_message = "Storage failure"
