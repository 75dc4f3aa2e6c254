"""Session model for database persistence."""
import secrets
import string
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict
from pydantic import Field as PydanticField
from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator
from sqlmodel import Field, SQLModel


SESSION_CODE_LENGTH = 6
SESSION_CODE_ALPHABET = string.ascii_uppercase + string.digits
MAX_PERSPECTIVE_LENGTH = 1000
DEFAULT_PARTNER1_NAME = "Partner 1"
DEFAULT_PARTNER2_NAME = "Partner 2"


def utc_now() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """Timezone-aware DateTime. Naive values (SQLite reads) are taken as UTC."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


def generate_session_code() -> str:
    """Return a random 6-character uppercase alphanumeric code."""
    return "".join(secrets.choice(SESSION_CODE_ALPHABET) for _ in range(SESSION_CODE_LENGTH))


def normalize_session_code(code: Optional[str]) -> str:
    """Strip and upper-case user input so codes compare case-insensitively."""
    return (code or "").strip().upper()


def is_valid_session_code(code: str) -> bool:
    return len(code) == SESSION_CODE_LENGTH and all(c in SESSION_CODE_ALPHABET for c in code)


class SessionStatus(str, Enum):
    """Progress of a mediation session, derived from which fields are set."""
    WAITING_FOR_PARTNER = "waiting_for_partner"
    READY = "ready"
    RESOLVED = "resolved"


class MediationSession(SQLModel, table=True):
    """Database model for one mediation exchange between two partners."""

    __tablename__ = "sessions"

    session_code: str = Field(primary_key=True, max_length=SESSION_CODE_LENGTH)
    partner1_name: Optional[str] = None
    partner1_perspective: str = Field(max_length=MAX_PERSPECTIVE_LENGTH)
    partner2_name: Optional[str] = None
    partner2_perspective: Optional[str] = Field(default=None, max_length=MAX_PERSPECTIVE_LENGTH)
    solution: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)

    @property
    def is_complete(self) -> bool:
        """True once both perspectives are present."""
        return bool(self.partner1_perspective) and bool(self.partner2_perspective)

    @property
    def status(self) -> SessionStatus:
        if self.solution:
            return SessionStatus.RESOLVED
        if self.partner2_perspective:
            return SessionStatus.READY
        return SessionStatus.WAITING_FOR_PARTNER


class SessionCreate(SQLModel):
    """Schema for opening a session as partner 1."""
    session_code: Optional[str] = None
    partner1_name: Optional[str] = None
    partner1_perspective: str = Field(max_length=MAX_PERSPECTIVE_LENGTH)


class SessionJoin(SQLModel):
    """Schema for adding partner 2 to an existing session."""
    partner2_name: Optional[str] = None
    partner2_perspective: str = Field(max_length=MAX_PERSPECTIVE_LENGTH)


class SessionResponse(SQLModel):
    """Schema for session API response."""
    session_code: str
    partner1_name: Optional[str]
    partner1_perspective: str
    partner2_name: Optional[str]
    partner2_perspective: Optional[str]
    solution: Optional[str]
    status: SessionStatus
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_session(cls, session: MediationSession) -> "SessionResponse":
        return cls(**session.model_dump(), status=session.status)


class SolutionRequest(BaseModel):
    """Body of the generate-solution call."""
    model_config = ConfigDict(populate_by_name=True)

    session_code: Optional[str] = PydanticField(default=None, alias="sessionCode")


class SolutionResponse(BaseModel):
    solution: str


class ErrorResponse(BaseModel):
    error: str
