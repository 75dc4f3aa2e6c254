"""View states for the mediation client and the pure reducers between them.

Each screen is its own frozen model carrying only what that screen needs.
Reducers take a view and return a new one; they never touch the network.
"""
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from app.models import MAX_PERSPECTIVE_LENGTH, is_valid_session_code, normalize_session_code


INVALID_CODE_MESSAGE = "Please enter a valid 6-character session code"
EMPTY_PERSPECTIVE_MESSAGE = "Please share your perspective"
NOT_FOUND_MESSAGE = "Session not found"
ALREADY_COMPLETE_MESSAGE = "This session already has both perspectives"
GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."


class InvalidTransitionError(Exception):
    """Raised when a reducer is applied to a screen it does not handle."""

    def __init__(self, action: str, view: "ViewState"):
        super().__init__(f"Cannot {action} from the {view.screen} screen")
        self.action = action
        self.view = view


class _View(BaseModel):
    model_config = ConfigDict(frozen=True)

    error: Optional[str] = None


class HomeView(_View):
    screen: Literal["home"] = "home"


class Partner1FormView(_View):
    screen: Literal["partner1-form"] = "partner1-form"
    session_code: str
    name: str = ""
    perspective: str = ""


class Partner2FormView(_View):
    screen: Literal["partner2-form"] = "partner2-form"
    session_code: str
    name: str = ""
    perspective: str = ""


class WaitingView(_View):
    screen: Literal["waiting"] = "waiting"
    session_code: str
    partner_name: str = ""


class SolutionView(_View):
    screen: Literal["solution"] = "solution"
    session_code: str
    solution: str


ViewState = Annotated[
    Union[HomeView, Partner1FormView, Partner2FormView, WaitingView, SolutionView],
    Field(discriminator="screen"),
]

FormView = Union[Partner1FormView, Partner2FormView]


def start_as_partner1(view: ViewState, session_code: str) -> Partner1FormView:
    """home -> partner1-form with a freshly drawn code."""
    if not isinstance(view, HomeView):
        raise InvalidTransitionError("start a session", view)
    return Partner1FormView(session_code=session_code)


def join_as_partner2(view: ViewState, code_input: str) -> Union[HomeView, Partner2FormView]:
    """home -> partner2-form, or back to home with an error for a malformed code."""
    if not isinstance(view, HomeView):
        raise InvalidTransitionError("join a session", view)
    code = normalize_session_code(code_input)
    if not is_valid_session_code(code):
        return HomeView(error=INVALID_CODE_MESSAGE)
    return Partner2FormView(session_code=code)


def edit_form(view: ViewState, name: Optional[str] = None, perspective: Optional[str] = None) -> FormView:
    if not isinstance(view, (Partner1FormView, Partner2FormView)):
        raise InvalidTransitionError("edit the form", view)
    update = {}
    if name is not None:
        update["name"] = name
    if perspective is not None:
        update["perspective"] = perspective[:MAX_PERSPECTIVE_LENGTH]
    return view.model_copy(update=update)


def reassign_code(view: ViewState, session_code: str) -> Partner1FormView:
    """Swap in a new code after the previous one turned out to be taken."""
    if not isinstance(view, Partner1FormView):
        raise InvalidTransitionError("change the session code", view)
    return view.model_copy(update={"session_code": session_code})


def perspective_submitted(view: ViewState) -> WaitingView:
    """partner1-form -> waiting. Partner 2 goes straight to the solution instead."""
    if not isinstance(view, Partner1FormView):
        raise InvalidTransitionError("wait for a partner", view)
    return WaitingView(session_code=view.session_code, partner_name=view.name)


def solution_ready(view: ViewState, solution: str) -> SolutionView:
    if not isinstance(view, (WaitingView, Partner2FormView)):
        raise InvalidTransitionError("show the solution", view)
    return SolutionView(session_code=view.session_code, solution=solution)


def fail(view: ViewState, message: str) -> ViewState:
    """Stay on the current screen and show an error."""
    return view.model_copy(update={"error": message})


def clear_error(view: ViewState) -> ViewState:
    if view.error is None:
        return view
    return view.model_copy(update={"error": None})


def start_over(view: ViewState) -> HomeView:
    """Any screen -> a blank home screen."""
    return HomeView()
