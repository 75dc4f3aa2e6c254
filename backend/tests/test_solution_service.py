"""Tests for read-or-create solution generation with a mocked LLM."""

from unittest.mock import AsyncMock, patch

import pytest
from langchain_core.messages import AIMessage

from app.config import Settings
from app.models import SessionJoin
from app.services import SolutionService
from app.services.errors import (
    AIServiceNotConfiguredError,
    EmptyGenerationError,
    GenerationError,
    IncompleteSessionError,
    MissingSessionCodeError,
    PersistenceError,
    SessionNotFoundError,
)

from conftest import MEDIATION_TEXT


@pytest.fixture
def ready_session(sessions, open_session):
    return sessions.join("AB12CD", SessionJoin(partner2_name="Alex", partner2_perspective="I was overwhelmed"))


class TestGenerate:
    @pytest.mark.asyncio
    async def test_example_session_gets_stored_solution(self, solutions, sessions, ready_session):
        solution = await solutions.generate("AB12CD")

        assert solution == MEDIATION_TEXT
        assert sessions.get_by_code("AB12CD").solution == solution

    @pytest.mark.asyncio
    async def test_second_request_returns_stored_text_without_llm(self, solutions, fake_llm, ready_session):
        first = await solutions.generate("AB12CD")
        second = await solutions.generate("AB12CD")

        assert first == second
        assert fake_llm.ainvoke.await_count == 1

    @pytest.mark.asyncio
    async def test_prompt_carries_both_perspectives(self, solutions, fake_llm, ready_session):
        await solutions.generate("ab12cd")

        messages = fake_llm.ainvoke.await_args.args[0]
        prompt = messages[-1].content
        assert "Sam" in prompt and "I felt ignored" in prompt
        assert "Alex" in prompt and "I was overwhelmed" in prompt

    @pytest.mark.asyncio
    async def test_incomplete_session_skips_llm(self, solutions, fake_llm, open_session):
        with pytest.raises(IncompleteSessionError):
            await solutions.generate("AB12CD")
        fake_llm.ainvoke.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_session(self, solutions):
        with pytest.raises(SessionNotFoundError):
            await solutions.generate("ZZZZZZ")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code", [None, "", "   "])
    async def test_missing_code(self, solutions, code):
        with pytest.raises(MissingSessionCodeError):
            await solutions.generate(code)


class TestGenerationFailures:
    @pytest.mark.asyncio
    async def test_llm_error_is_a_generation_error(self, solutions, fake_llm, sessions, ready_session):
        fake_llm.ainvoke = AsyncMock(side_effect=RuntimeError("provider down"))

        with pytest.raises(GenerationError):
            await solutions.generate("AB12CD")
        assert sessions.get_by_code("AB12CD").solution is None

    @pytest.mark.asyncio
    async def test_empty_reply(self, solutions, fake_llm, sessions, ready_session):
        fake_llm.ainvoke = AsyncMock(return_value=AIMessage(content="   "))

        with pytest.raises(EmptyGenerationError):
            await solutions.generate("AB12CD")
        assert sessions.get_by_code("AB12CD").solution is None

    @pytest.mark.asyncio
    async def test_missing_api_key(self, sessions, llm_factory, ready_session):
        service = SolutionService(
            sessions,
            llm_factory=llm_factory,
            settings=Settings(openai_api_key="", llm_provider="openai"),
        )

        with pytest.raises(AIServiceNotConfiguredError):
            await service.generate("AB12CD")
        llm_factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_save_failure_discards_text(self, solutions, sessions, ready_session):
        with patch.object(sessions, "save_solution", side_effect=PersistenceError()):
            with pytest.raises(PersistenceError):
                await solutions.generate("AB12CD")
        assert sessions.get_by_code("AB12CD").solution is None
