"""
Domain error taxonomy.

Services raise these; the handlers registered in ``clinic.main`` turn them
into ``{"success": false, "message": ...}`` responses.
"""


class ClinicError(Exception):
    status_code = 500
    retryable = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ClinicError):
    """Missing required field, enum violation or malformed id."""
    status_code = 400


class NotFoundError(ClinicError):
    status_code = 404

    def __init__(self, resource: str):
        super().__init__(f"{resource} not found")
        self.resource = resource


class IdentityConflictError(ClinicError):
    """A generated human-readable id collided with an existing one."""
    status_code = 409
    retryable = True


class AuthenticationError(ClinicError):
    status_code = 401
