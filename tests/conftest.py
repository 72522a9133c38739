from __future__ import annotations

from typing import List

import pytest

from ai_compiler.completion import CompletionError


class ScriptedCompleter:
    """Returns canned replies in order; records prompts and the busy flag seen during each call."""

    def __init__(self, *replies, controller=None):
        self.replies = list(replies)
        self.prompts: List[str] = []
        self.busy_seen: List[bool] = []
        self.controller = controller

    def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.controller is not None:
            self.busy_seen.append(self.controller.state.busy)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def scripted():
    return ScriptedCompleter


@pytest.fixture
def quota_error() -> CompletionError:
    return CompletionError("quota exceeded")
