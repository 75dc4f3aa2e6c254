"""Solution service: read-or-create the mediation text for a session."""
import logging
from typing import Callable, Optional

from langchain_core.language_models.chat_models import BaseChatModel

from app.agents import create_llm, mediate
from app.config import Settings, settings as default_settings
from app.models import normalize_session_code
from .errors import (
    AIServiceNotConfiguredError,
    EmptyGenerationError,
    GenerationError,
    IncompleteSessionError,
    MissingSessionCodeError,
    SessionNotFoundError,
)
from .session_service import SessionService, session_service

logger = logging.getLogger(__name__)


class SolutionService:
    """Generates a solution once per session and serves the stored one after."""

    def __init__(
        self,
        sessions: SessionService,
        llm_factory: Callable[[Settings], BaseChatModel] = create_llm,
        settings: Settings = default_settings,
    ):
        self.sessions = sessions
        self.llm_factory = llm_factory
        self.settings = settings

    async def generate(self, session_code: Optional[str]) -> str:
        """
        Return the solution for a session, generating it if needed.

        Raises a MediationError subclass for every failure the caller
        should see: missing code, unknown session, missing perspective,
        provider failure, or a failed write of the generated text.
        """
        code = normalize_session_code(session_code)
        if not code:
            raise MissingSessionCodeError()

        session = self.sessions.get_by_code(code)
        if session is None:
            raise SessionNotFoundError()

        if not session.is_complete:
            raise IncompleteSessionError()

        if session.solution:
            logger.info("Returning stored solution for session %s", code)
            return session.solution

        if not self.settings.llm_api_key:
            logger.error("No API key configured for provider %s", self.settings.llm_provider)
            raise AIServiceNotConfiguredError()

        try:
            llm = self.llm_factory(self.settings)
            solution = await mediate(session, llm)
        except Exception as e:
            logger.exception("LLM call failed for session %s", code)
            raise GenerationError() from e

        if not solution:
            logger.error("No solution generated for session %s", code)
            raise EmptyGenerationError()

        return self.sessions.save_solution(code, solution)


solution_service = SolutionService(session_service)
