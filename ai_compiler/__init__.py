"""LLM-backed "compiler": a Streamlit page that asks a completion model to run code."""
from __future__ import annotations

from .modes import Mode, Stage
from .session import Session, transition
from .controller import SessionController
from .completion import CompletionError, OpenAICompleter

__all__ = [
    "Mode",
    "Stage",
    "Session",
    "transition",
    "SessionController",
    "CompletionError",
    "OpenAICompleter",
]

__version__ = "0.1.0"
