"""Mediator Agent - Turns two perspectives into one mediation text."""
import logging

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_openai import ChatOpenAI

from app.config import Settings, settings as default_settings
from app.models import DEFAULT_PARTNER1_NAME, DEFAULT_PARTNER2_NAME, MediationSession
from .prompts import MEDIATOR_SYSTEM_PROMPT, MEDIATOR_TASK_PROMPT

logger = logging.getLogger(__name__)


def create_llm(settings: Settings = default_settings) -> BaseChatModel:
    """Build the chat model for the configured provider."""
    if settings.llm_provider == "google":
        return ChatGoogleGenerativeAI(
            model=settings.google_model,
            google_api_key=settings.google_api_key,
            temperature=settings.llm_temperature,
            top_p=settings.llm_top_p,
            top_k=settings.llm_top_k,
            max_output_tokens=settings.llm_max_output_tokens,
            timeout=settings.llm_timeout_seconds,
        )

    return ChatOpenAI(
        model=settings.openai_model,
        api_key=settings.openai_api_key,
        temperature=settings.llm_temperature,
        top_p=settings.llm_top_p,
        max_tokens=settings.llm_max_output_tokens,
        timeout=settings.llm_timeout_seconds,
    )


def build_messages(session: MediationSession) -> list:
    """Fill the mediation template with both partners' names and perspectives."""
    task_prompt = MEDIATOR_TASK_PROMPT.format(
        partner1_name=session.partner1_name or DEFAULT_PARTNER1_NAME,
        partner1_perspective=session.partner1_perspective,
        partner2_name=session.partner2_name or DEFAULT_PARTNER2_NAME,
        partner2_perspective=session.partner2_perspective,
    )
    return [
        SystemMessage(content=MEDIATOR_SYSTEM_PROMPT),
        HumanMessage(content=task_prompt),
    ]


def _response_text(content) -> str:
    """Flatten a chat reply into plain text.

    Some providers return a list of content parts instead of a string.
    """
    if isinstance(content, str):
        return content.strip()
    parts = []
    for part in content or []:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(part.get("text", ""))
    return "".join(parts).strip()


async def mediate(session: MediationSession, llm: BaseChatModel) -> str:
    """Ask the model for a mediation of the session. Returns "" if it gave no text."""
    logger.info("Requesting mediation for session %s", session.session_code)
    response = await llm.ainvoke(build_messages(session))
    return _response_text(response.content)
