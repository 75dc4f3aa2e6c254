"""API package."""
from .routes import get_session_service, get_solution_service, router

__all__ = [
    "get_session_service",
    "get_solution_service",
    "router",
]
