"""Services package."""
from .errors import MediationError
from .session_service import SessionService, session_service, validate_session_code
from .solution_service import SolutionService, solution_service

__all__ = [
    "MediationError",
    "SessionService",
    "SolutionService",
    "session_service",
    "solution_service",
    "validate_session_code",
]
