"""Models package."""
from .session import (
    DEFAULT_PARTNER1_NAME,
    DEFAULT_PARTNER2_NAME,
    MAX_PERSPECTIVE_LENGTH,
    SESSION_CODE_LENGTH,
    ErrorResponse,
    MediationSession,
    SessionCreate,
    SessionJoin,
    SessionResponse,
    SessionStatus,
    SolutionRequest,
    SolutionResponse,
    generate_session_code,
    is_valid_session_code,
    normalize_session_code,
    utc_now,
)

__all__ = [
    "DEFAULT_PARTNER1_NAME",
    "DEFAULT_PARTNER2_NAME",
    "MAX_PERSPECTIVE_LENGTH",
    "SESSION_CODE_LENGTH",
    "ErrorResponse",
    "MediationSession",
    "SessionCreate",
    "SessionJoin",
    "SessionResponse",
    "SessionStatus",
    "SolutionRequest",
    "SolutionResponse",
    "generate_session_code",
    "is_valid_session_code",
    "normalize_session_code",
    "utc_now",
]
