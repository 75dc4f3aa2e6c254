"""Domain errors raised by the session and solution services.

Each error carries the HTTP status and the flat message shown to users.
The API layer turns them into ``{"error": message}`` responses.
"""


class MediationError(Exception):
    """Base class for all user-facing errors."""

    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.message
        super().__init__(self.message)


class MissingSessionCodeError(MediationError):
    status_code = 400
    message = "Session code is required"


class InvalidSessionCodeError(MediationError):
    status_code = 400
    message = "Please enter a valid 6-character session code"


class EmptyPerspectiveError(MediationError):
    status_code = 400
    message = "Please share your perspective"


class SessionNotFoundError(MediationError):
    status_code = 404
    message = "Session not found"


class SessionAlreadyCompleteError(MediationError):
    status_code = 409
    message = "This session already has both perspectives"


class DuplicateSessionCodeError(MediationError):
    status_code = 409
    message = "Session code already in use"


class IncompleteSessionError(MediationError):
    status_code = 400
    message = "Both partners must submit their perspectives first"


class AIServiceNotConfiguredError(MediationError):
    message = "AI service not configured"


class GenerationError(MediationError):
    message = "Failed to generate solution"


class EmptyGenerationError(MediationError):
    message = "No solution generated"


class PersistenceError(MediationError):
    message = "Failed to save solution"
