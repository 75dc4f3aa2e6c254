"""Agent package."""
from .mediator import build_messages, create_llm, mediate

__all__ = [
    "build_messages",
    "create_llm",
    "mediate",
]
