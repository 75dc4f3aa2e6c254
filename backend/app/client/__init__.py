"""Client package: view states, backend client and the controller tying them together."""
from .api import ApiClient, ApiError, ClientSettings
from .controller import MediationController, Poller
from .state import (
    HomeView,
    InvalidTransitionError,
    Partner1FormView,
    Partner2FormView,
    SolutionView,
    ViewState,
    WaitingView,
)

__all__ = [
    "ApiClient",
    "ApiError",
    "ClientSettings",
    "HomeView",
    "InvalidTransitionError",
    "MediationController",
    "Partner1FormView",
    "Partner2FormView",
    "Poller",
    "SolutionView",
    "ViewState",
    "WaitingView",
]
