"""Tests for the client controller against the real app over ASGI."""

import asyncio
from unittest.mock import patch

import httpx
import pytest

from app.client import (
    ApiClient,
    HomeView,
    MediationController,
    Partner1FormView,
    Partner2FormView,
    Poller,
    SolutionView,
    WaitingView,
)
from app.client.state import (
    ALREADY_COMPLETE_MESSAGE,
    EMPTY_PERSPECTIVE_MESSAGE,
    GENERIC_ERROR_MESSAGE,
    INVALID_CODE_MESSAGE,
    NOT_FOUND_MESSAGE,
)
from app.models import SessionCreate, SessionJoin
from app.services.errors import PersistenceError, SessionAlreadyCompleteError

from conftest import MEDIATION_TEXT

POLL = 0.01


def _controller(transport: httpx.AsyncBaseTransport) -> MediationController:
    return MediationController(ApiClient("http://testserver", transport=transport), poll_interval=POLL)


@pytest.fixture
def asgi(api_overrides):
    return httpx.ASGITransport(app=api_overrides)


def _unreachable(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"unexpected request to {request.url}")


class TestPartner1:
    @pytest.mark.asyncio
    async def test_submit_then_poll_until_solution(self, asgi, sessions, fake_llm):
        controller = _controller(asgi)
        controller.start_as_partner1()
        code = controller.view.session_code
        controller.edit(name="Sam", perspective="I felt ignored")

        await controller.submit()

        assert isinstance(controller.view, WaitingView)
        assert controller.polling
        stored = sessions.get_by_code(code)
        assert stored.partner1_perspective == "I felt ignored"
        assert stored.partner2_perspective is None

        sessions.join(code, SessionJoin(partner2_perspective="I was overwhelmed"))
        view = await asyncio.wait_for(controller.wait_for_solution(), timeout=5)

        assert view == SolutionView(session_code=code, solution=MEDIATION_TEXT)
        assert not controller.polling
        assert fake_llm.ainvoke.await_count == 1
        await controller.aclose()

    @pytest.mark.asyncio
    async def test_poll_uses_stored_solution(self, asgi, sessions, fake_llm):
        controller = _controller(asgi)
        controller.start_as_partner1()
        controller.edit(perspective="I felt ignored")
        await controller.submit()
        code = controller.view.session_code

        sessions.join(code, SessionJoin(partner2_perspective="I was overwhelmed"))
        sessions.save_solution(code, "Already worked out.")
        view = await asyncio.wait_for(controller.wait_for_solution(), timeout=5)

        assert view.solution == "Already worked out."
        fake_llm.ainvoke.assert_not_called()
        await controller.aclose()

    @pytest.mark.asyncio
    async def test_start_over_cancels_poll(self, asgi):
        controller = _controller(asgi)
        controller.start_as_partner1()
        controller.edit(perspective="I felt ignored")
        await controller.submit()
        assert controller.polling

        controller.start_over()
        await asyncio.sleep(POLL * 5)

        assert controller.view == HomeView()
        assert not controller.polling
        await controller.aclose()

    @pytest.mark.asyncio
    async def test_code_collision_draws_new_code(self, asgi, sessions):
        sessions.create(SessionCreate(session_code="AB12CD", partner1_perspective="first couple"))
        controller = _controller(asgi)

        with patch("app.client.controller.generate_session_code", side_effect=["AB12CD", "QW34ER"]):
            controller.start_as_partner1()
            controller.edit(perspective="second couple")
            await controller.submit()

        assert isinstance(controller.view, WaitingView)
        assert controller.view.session_code == "QW34ER"
        assert sessions.get_by_code("QW34ER").partner1_perspective == "second couple"
        await controller.aclose()

    @pytest.mark.asyncio
    async def test_exhausted_code_collisions_show_generic_message(self, asgi, sessions):
        sessions.create(SessionCreate(session_code="AB12CD", partner1_perspective="first couple"))
        controller = MediationController(
            ApiClient("http://testserver", transport=asgi), poll_interval=POLL, code_attempts=2
        )

        with patch("app.client.controller.generate_session_code", return_value="AB12CD"):
            controller.start_as_partner1()
            controller.edit(perspective="second couple")
            await controller.submit()

        assert isinstance(controller.view, Partner1FormView)
        assert controller.view.error == GENERIC_ERROR_MESSAGE
        assert not controller.polling
        await controller.aclose()

    @pytest.mark.asyncio
    async def test_zero_code_attempts_still_inserts(self, asgi, sessions):
        controller = MediationController(
            ApiClient("http://testserver", transport=asgi), poll_interval=POLL, code_attempts=0
        )
        controller.start_as_partner1()
        controller.edit(perspective="I felt ignored")

        await controller.submit()

        assert isinstance(controller.view, WaitingView)
        assert sessions.get_by_code(controller.view.session_code) is not None
        await controller.aclose()

    @pytest.mark.asyncio
    async def test_empty_perspective_stays_on_form(self):
        controller = _controller(httpx.MockTransport(_unreachable))
        controller.start_as_partner1()
        controller.edit(perspective="   ")

        await controller.submit()

        assert isinstance(controller.view, Partner1FormView)
        assert controller.view.error == EMPTY_PERSPECTIVE_MESSAGE
        await controller.aclose()

    @pytest.mark.asyncio
    async def test_network_failure_shows_generic_message(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        controller = _controller(httpx.MockTransport(refuse))
        controller.start_as_partner1()
        controller.edit(perspective="I felt ignored")

        await controller.submit()

        assert isinstance(controller.view, Partner1FormView)
        assert controller.view.error == GENERIC_ERROR_MESSAGE
        assert not controller.polling
        await controller.aclose()


class TestPartner2:
    @pytest.mark.asyncio
    async def test_join_submit_and_get_solution(self, asgi, sessions, open_session):
        controller = _controller(asgi)

        await controller.join("ab12cd")
        assert isinstance(controller.view, Partner2FormView)

        controller.edit(name="Alex", perspective="I was overwhelmed")
        await controller.submit()

        assert controller.view == SolutionView(session_code="AB12CD", solution=MEDIATION_TEXT)
        assert sessions.get_by_code("AB12CD").solution == MEDIATION_TEXT
        await controller.aclose()

    @pytest.mark.asyncio
    async def test_wrong_length_fails_before_any_request(self):
        controller = _controller(httpx.MockTransport(_unreachable))

        await controller.join("AB12C")

        assert controller.view == HomeView(error=INVALID_CODE_MESSAGE)
        await controller.aclose()

    @pytest.mark.asyncio
    async def test_unknown_code(self, asgi):
        controller = _controller(asgi)

        await controller.join("ZZZZZZ")

        assert controller.view == HomeView(error=NOT_FOUND_MESSAGE)
        await controller.aclose()

    @pytest.mark.asyncio
    async def test_already_complete(self, asgi, sessions, open_session):
        sessions.join("AB12CD", SessionJoin(partner2_perspective="I was overwhelmed"))
        controller = _controller(asgi)

        await controller.join("AB12CD")

        assert controller.view == HomeView(error=ALREADY_COMPLETE_MESSAGE)
        await controller.aclose()

    @pytest.mark.asyncio
    async def test_generation_failure_keeps_form_with_generic_message(self, asgi, open_session, fake_llm):
        fake_llm.ainvoke.side_effect = RuntimeError("provider down")
        controller = _controller(asgi)
        await controller.join("AB12CD")
        controller.edit(perspective="I was overwhelmed")

        await controller.submit()

        assert isinstance(controller.view, Partner2FormView)
        assert controller.view.error == GENERIC_ERROR_MESSAGE
        await controller.aclose()

    @pytest.mark.asyncio
    async def test_save_failure_shows_generic_message(self, asgi, sessions, open_session):
        controller = _controller(asgi)
        await controller.join("AB12CD")
        controller.edit(perspective="I was overwhelmed")

        with patch.object(sessions, "save_solution", side_effect=PersistenceError()):
            await controller.submit()

        assert isinstance(controller.view, Partner2FormView)
        assert controller.view.error == GENERIC_ERROR_MESSAGE
        await controller.aclose()

    @pytest.mark.asyncio
    async def test_partner_joined_first_shows_server_message(self, asgi, sessions, open_session):
        controller = _controller(asgi)
        await controller.join("AB12CD")
        sessions.join("AB12CD", SessionJoin(partner2_perspective="I got here first"))
        controller.edit(perspective="I was overwhelmed")

        await controller.submit()

        assert controller.view.error == SessionAlreadyCompleteError.message
        await controller.aclose()


class TestPoller:
    @pytest.mark.asyncio
    async def test_stops_when_check_returns_true(self):
        calls = []

        async def check():
            calls.append(1)
            return len(calls) == 3

        poller = Poller(POLL, check)
        poller.start()
        await asyncio.wait_for(poller.wait(), timeout=5)

        assert len(calls) == 3
        assert not poller.running

    @pytest.mark.asyncio
    async def test_stop_cancels(self):
        calls = []

        async def check():
            calls.append(1)
            return False

        poller = Poller(POLL, check)
        poller.start()
        await asyncio.sleep(POLL * 3)
        poller.stop()
        seen = len(calls)
        await asyncio.sleep(POLL * 5)

        assert not poller.running
        assert len(calls) == seen
