"""Shared fixtures for the Couple Resolve test suite."""

import os

# Point the module-level engine and settings at throwaway values before app imports.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("OPENAI_API_KEY", "test-key")
os.environ.setdefault("LLM_PROVIDER", "openai")

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from langchain_core.messages import AIMessage

from app.api import get_session_service, get_solution_service
from app.config import Settings
from app.db import build_engine, init_db
from app.main import app
from app.models import SessionCreate
from app.services import SessionService, SolutionService

MEDIATION_TEXT = "You both want to feel valued. Try a weekly check-in."


@pytest.fixture
def engine():
    """Fresh in-memory database per test."""
    engine = build_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def sessions(engine):
    return SessionService(engine, code_attempts=3)


@pytest.fixture
def fake_llm():
    """Chat model stand-in whose ainvoke returns a fixed mediation."""
    llm = MagicMock()
    llm.ainvoke = AsyncMock(return_value=AIMessage(content=MEDIATION_TEXT))
    return llm


@pytest.fixture
def llm_factory(fake_llm):
    return MagicMock(return_value=fake_llm)


@pytest.fixture
def test_settings():
    return Settings(openai_api_key="test-key", llm_provider="openai")


@pytest.fixture
def solutions(sessions, llm_factory, test_settings):
    return SolutionService(sessions, llm_factory=llm_factory, settings=test_settings)


@pytest.fixture
def api_overrides(sessions, solutions):
    """Route the FastAPI app to the per-test services."""
    app.dependency_overrides[get_session_service] = lambda: sessions
    app.dependency_overrides[get_solution_service] = lambda: solutions
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(api_overrides):
    return TestClient(api_overrides)


@pytest.fixture
def open_session(sessions):
    """A session with only partner 1's perspective."""
    return sessions.create(SessionCreate(
        session_code="AB12CD",
        partner1_name="Sam",
        partner1_perspective="I felt ignored",
    ))
