"""Session service for the mediation session store."""
import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import delete, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.config import settings
from app.db import session_scope
from app.models import (
    DEFAULT_PARTNER1_NAME,
    DEFAULT_PARTNER2_NAME,
    MediationSession,
    SessionCreate,
    SessionJoin,
    generate_session_code,
    is_valid_session_code,
    normalize_session_code,
    utc_now,
)
from .errors import (
    DuplicateSessionCodeError,
    EmptyPerspectiveError,
    InvalidSessionCodeError,
    PersistenceError,
    SessionAlreadyCompleteError,
    SessionNotFoundError,
)

logger = logging.getLogger(__name__)


def validate_session_code(code: Optional[str]) -> str:
    """Normalize a code and raise if it is not 6 uppercase alphanumerics."""
    normalized = normalize_session_code(code)
    if not is_valid_session_code(normalized):
        raise InvalidSessionCodeError()
    return normalized


def _clean_perspective(text: str) -> str:
    text = (text or "").strip()
    if not text:
        raise EmptyPerspectiveError()
    return text


def _clean_name(name: Optional[str], default: str) -> str:
    return (name or "").strip() or default


class SessionService:
    """Service for CRUD operations on mediation sessions."""

    def __init__(self, engine: Engine | None = None, code_attempts: int | None = None):
        self.engine = engine
        self.code_attempts = code_attempts or settings.session_code_attempts

    def create(self, data: SessionCreate) -> MediationSession:
        """Insert a new session holding partner 1's submission.

        A caller-supplied code is used as-is and a clash is reported. Without
        one, fresh codes are drawn until an insert succeeds.
        """
        perspective = _clean_perspective(data.partner1_perspective)
        name = _clean_name(data.partner1_name, DEFAULT_PARTNER1_NAME)

        if data.session_code is not None:
            return self._insert(validate_session_code(data.session_code), name, perspective)

        for attempt in range(1, self.code_attempts + 1):
            try:
                return self._insert(generate_session_code(), name, perspective)
            except DuplicateSessionCodeError:
                logger.warning("Session code collision (attempt %d/%d)", attempt, self.code_attempts)
        raise DuplicateSessionCodeError("Could not allocate a session code. Please try again.")

    def _insert(self, code: str, name: str, perspective: str) -> MediationSession:
        session = MediationSession(
            session_code=code,
            partner1_name=name,
            partner1_perspective=perspective,
        )
        with session_scope(self.engine) as db:
            db.add(session)
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                raise DuplicateSessionCodeError()
            db.refresh(session)
        logger.info("Session %s created", code)
        return session

    def get_by_code(self, code: str) -> Optional[MediationSession]:
        """Get a session by its code."""
        with session_scope(self.engine) as db:
            return db.get(MediationSession, normalize_session_code(code))

    def require(self, code: Optional[str]) -> MediationSession:
        """Get a session by code, raising when the code is malformed or unknown."""
        session = self.get_by_code(validate_session_code(code))
        if session is None:
            raise SessionNotFoundError()
        return session

    def join(self, code: str, data: SessionJoin) -> MediationSession:
        """Add partner 2's submission to an open session.

        The update only matches rows without a partner 2, so of two racing
        joiners exactly one wins.
        """
        code = validate_session_code(code)
        perspective = _clean_perspective(data.partner2_perspective)
        name = _clean_name(data.partner2_name, DEFAULT_PARTNER2_NAME)

        statement = (
            update(MediationSession)
            .where(MediationSession.session_code == code)
            .where(MediationSession.partner2_perspective.is_(None))
            .values(
                partner2_name=name,
                partner2_perspective=perspective,
                updated_at=utc_now(),
            )
        )
        with session_scope(self.engine) as db:
            result = db.exec(statement)
            db.commit()
            joined = result.rowcount == 1

        if not joined:
            self.require(code)
            raise SessionAlreadyCompleteError()

        logger.info("Session %s joined by partner 2", code)
        return self.require(code)

    def save_solution(self, code: str, solution: str) -> str:
        """Store the solution unless one is already present.

        Returns the stored text, which is the earlier one if another request
        saved first.
        """
        statement = (
            update(MediationSession)
            .where(MediationSession.session_code == code)
            .where(MediationSession.solution.is_(None))
            .values(solution=solution, updated_at=utc_now())
        )
        try:
            with session_scope(self.engine) as db:
                result = db.exec(statement)
                db.commit()
                saved = result.rowcount == 1
        except SQLAlchemyError as e:
            logger.error("Error saving solution for session %s: %s", code, e)
            raise PersistenceError() from e

        if saved:
            return solution

        existing = self.get_by_code(code)
        if existing is None or not existing.solution:
            logger.error("Solution for session %s was not stored", code)
            raise PersistenceError()
        logger.info("Session %s already had a solution, keeping the stored one", code)
        return existing.solution

    def purge_expired(self, now: datetime | None = None, retention_hours: int | None = None) -> int:
        """Delete sessions created before the retention window. Returns the count."""
        hours = settings.session_retention_hours if retention_hours is None else retention_hours
        if hours <= 0:
            return 0
        cutoff = (now or utc_now()) - timedelta(hours=hours)
        statement = delete(MediationSession).where(MediationSession.created_at < cutoff)
        with session_scope(self.engine) as db:
            result = db.exec(statement)
            db.commit()
            count = result.rowcount or 0
        if count:
            logger.info("Purged %d expired session(s)", count)
        return count


session_service = SessionService()
