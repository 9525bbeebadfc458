"""
Domain errors.

Services raise these; app.main turns them into the response envelope
with error.code set to the class's `code`.
"""


class AppError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ProfileNotFound(AppError):
    """Caller has no domain record for the role the route requires."""
    status_code = 404
    code = "PROFILE_NOT_FOUND"
    default_message = "Profile not found"


class NotFound(AppError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Resource not found"


class Forbidden(AppError):
    """Target belongs to a different college/recruiter/student."""
    status_code = 403
    code = "FORBIDDEN"
    default_message = "Access denied"


class InvalidTransition(AppError):
    status_code = 400
    code = "INVALID_TRANSITION"
    default_message = "Status transition not allowed"


class ValidationError(AppError):
    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "Invalid input"


class Conflict(AppError):
    status_code = 409
    code = "ALREADY_APPLIED"
    default_message = "Already applied to this opportunity"


class Unauthorized(AppError):
    status_code = 401
    code = "UNAUTHORIZED"
    default_message = "Invalid or expired token"
