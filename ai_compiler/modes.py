from __future__ import annotations

from enum import Enum


class Mode(str, Enum):
    EDITING = "editing"
    RUNNING = "running"
    AWAITING_INPUT = "awaiting_input"


class Stage(str, Enum):
    """Which of the two round trips a completion call belongs to."""

    RUN = "run"
    INPUT = "input"
