"""Mediation client controller: applies reducers and performs the remote calls."""
import asyncio
import contextlib
import logging
from typing import Awaitable, Callable, Optional

import httpx

from app.models import generate_session_code
from .api import ApiClient, ApiError
from .state import (
    ALREADY_COMPLETE_MESSAGE,
    EMPTY_PERSPECTIVE_MESSAGE,
    GENERIC_ERROR_MESSAGE,
    NOT_FOUND_MESSAGE,
    HomeView,
    InvalidTransitionError,
    Partner1FormView,
    Partner2FormView,
    ViewState,
    WaitingView,
    clear_error,
    edit_form,
    fail,
    join_as_partner2,
    perspective_submitted,
    reassign_code,
    solution_ready,
    start_as_partner1,
    start_over,
)

logger = logging.getLogger(__name__)


class Poller:
    """Calls an async check every interval until it returns True or is stopped."""

    def __init__(self, interval: float, check: Callable[[], Awaitable[bool]]):
        self.interval = interval
        self._check = check
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run())
        logger.debug("Poller started (every %ss)", self.interval)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            if await self._check():
                break
        logger.debug("Poller finished")

    def stop(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        # The check itself may end polling; it finishes on its own.
        if task is asyncio.current_task():
            return
        task.cancel()
        logger.debug("Poller cancelled")

    async def wait(self) -> None:
        """Wait for the current polling run to end."""
        task = self._task
        if task is None:
            return
        with contextlib.suppress(asyncio.CancelledError):
            await task


class MediationController:
    """
    Drives one client through home -> form -> (waiting) -> solution.

    The current view is the only state. Leaving the waiting screen by any
    route stops the poller.
    """

    def __init__(self, api: ApiClient, poll_interval: float = 3.0, code_attempts: int = 5):
        self.api = api
        self.code_attempts = max(1, code_attempts)
        self._view: ViewState = HomeView()
        self._poller = Poller(poll_interval, self._poll_once)

    @property
    def view(self) -> ViewState:
        return self._view

    @property
    def polling(self) -> bool:
        return self._poller.running

    def _set_view(self, view: ViewState) -> None:
        if isinstance(self._view, WaitingView) and not isinstance(view, WaitingView):
            self._poller.stop()
        self._view = view

    def _fail(self, error: Exception, generic: bool = False) -> None:
        """Show a request failure. Only 4xx domain messages reach the user as-is."""
        if isinstance(error, ApiError) and error.status_code < 500 and not generic:
            message = error.message
        else:
            message = GENERIC_ERROR_MESSAGE
        logger.warning("Request failed on %s screen: %s", self._view.screen, error)
        self._view = fail(self._view, message)

    def start_as_partner1(self) -> None:
        self._set_view(start_as_partner1(self._view, generate_session_code()))

    async def join(self, code_input: str) -> None:
        """Check the code locally, then make sure the session exists and is open."""
        next_view = join_as_partner2(self._view, code_input)
        if not isinstance(next_view, Partner2FormView):
            self._set_view(next_view)
            return

        try:
            session = await self.api.get_session(next_view.session_code)
        except ApiError as e:
            if e.status_code == 404:
                self._set_view(fail(self._view, NOT_FOUND_MESSAGE))
            else:
                self._fail(e)
            return
        except httpx.HTTPError as e:
            self._fail(e)
            return

        if session.partner2_perspective:
            self._set_view(fail(self._view, ALREADY_COMPLETE_MESSAGE))
            return
        self._set_view(next_view)

    def edit(self, name: Optional[str] = None, perspective: Optional[str] = None) -> None:
        self._set_view(edit_form(self._view, name=name, perspective=perspective))

    async def submit(self) -> None:
        """Send the current form. Partner 1 then waits; partner 2 gets the solution."""
        view = self._view
        if not isinstance(view, (Partner1FormView, Partner2FormView)):
            raise InvalidTransitionError("submit a perspective", view)
        if not view.perspective.strip():
            self._set_view(fail(view, EMPTY_PERSPECTIVE_MESSAGE))
            return
        self._set_view(clear_error(view))

        if isinstance(view, Partner1FormView):
            await self._submit_as_partner1()
        else:
            await self._submit_as_partner2()

    async def _submit_as_partner1(self) -> None:
        for attempt in range(1, self.code_attempts + 1):
            view = self._view
            try:
                await self.api.create_session(view.session_code, view.perspective, name=view.name or None)
            except ApiError as e:
                if e.status_code == 409 and attempt < self.code_attempts:
                    logger.info("Session code %s is taken, drawing another", view.session_code)
                    self._set_view(reassign_code(view, generate_session_code()))
                    continue
                # Out of codes; reported like any other store write failure.
                self._fail(e, generic=e.status_code == 409)
                return
            except httpx.HTTPError as e:
                self._fail(e)
                return
            break

        self._set_view(perspective_submitted(self._view))
        self._poller.start()

    async def _submit_as_partner2(self) -> None:
        view = self._view
        try:
            await self.api.join_session(view.session_code, view.perspective, name=view.name or None)
        except (ApiError, httpx.HTTPError) as e:
            self._fail(e)
            return
        await self.request_solution()

    async def request_solution(self) -> None:
        """Ask the backend for the solution and show it."""
        view = self._view
        if not isinstance(view, (WaitingView, Partner2FormView)):
            raise InvalidTransitionError("request the solution", view)
        try:
            solution = await self.api.generate_solution(view.session_code)
        except (ApiError, httpx.HTTPError) as e:
            self._fail(e)
            return
        current = self._view
        if isinstance(current, (WaitingView, Partner2FormView)) and current.session_code == view.session_code:
            self._set_view(solution_ready(current, solution))

    async def _poll_once(self) -> bool:
        """One poll of the waiting screen. Returns True when polling should end."""
        view = self._view
        if not isinstance(view, WaitingView):
            return True
        try:
            session = await self.api.get_session(view.session_code)
        except (ApiError, httpx.HTTPError) as e:
            self._fail(e)
            return False

        if not session.partner2_perspective:
            if isinstance(self._view, WaitingView):
                self._view = clear_error(self._view)
            return False

        if session.solution:
            self._set_view(solution_ready(view, session.solution))
        else:
            await self.request_solution()
        return True

    async def wait_for_solution(self) -> ViewState:
        """Block until the waiting screen is left, then return the current view."""
        await self._poller.wait()
        return self._view

    def start_over(self) -> None:
        self._set_view(start_over(self._view))

    async def aclose(self) -> None:
        self._poller.stop()
        await self.api.aclose()

