from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Tuple, Union

from .classify import (
    classify_first_reply,
    classify_input_reply,
    extract_input_value,
    failure_outcome,
)
from .modes import Mode, Stage
from .prompts import build_input_prompt, build_run_prompt, build_simple_run_prompt

logger = logging.getLogger(__name__)


# ================================================================
# State
# ================================================================
@dataclass(frozen=True)
class Session:
    source_text: str = ""
    last_output: str = ""
    mode: Mode = Mode.EDITING
    busy: bool = False
    pending: Optional[Stage] = None  # stage of the outstanding call, None iff not busy

    @classmethod
    def initial(cls) -> "Session":
        return cls()


# ================================================================
# Events / Effects
# ================================================================
@dataclass(frozen=True)
class Edit:
    text: str


@dataclass(frozen=True)
class SubmitRun:
    pass


@dataclass(frozen=True)
class SubmitInput:
    committed_text: str


@dataclass(frozen=True)
class CompletionSucceeded:
    stage: Stage
    text: str


@dataclass(frozen=True)
class CompletionFailed:
    stage: Stage
    message: str


Event = Union[Edit, SubmitRun, SubmitInput, CompletionSucceeded, CompletionFailed]


@dataclass(frozen=True)
class RequestCompletion:
    stage: Stage
    prompt: str


Effect = RequestCompletion


# ================================================================
# Reducer
# ================================================================
def transition(state: Session, event: Event, *, interactive: bool = True) -> Tuple[Session, List[Effect]]:
    """
    Apply one event and return the next state plus the completion calls to issue.

    Events that are not allowed in the current state leave it untouched and
    produce no effects. ``interactive=False`` is the single round-trip page:
    the plain compiler prompt is used and the reply always ends the run.
    """
    if isinstance(event, Edit):
        if state.mode != Mode.EDITING or state.busy:
            return _ignored(state, event)
        return replace(state, source_text=event.text), []

    if isinstance(event, SubmitRun):
        if state.mode != Mode.EDITING or state.busy:
            return _ignored(state, event)
        build = build_run_prompt if interactive else build_simple_run_prompt
        prompt = build(state.source_text)
        nxt = replace(state, mode=Mode.RUNNING, busy=True, pending=Stage.RUN)
        return nxt, [RequestCompletion(Stage.RUN, prompt)]

    if isinstance(event, SubmitInput):
        if state.mode != Mode.AWAITING_INPUT or state.busy:
            return _ignored(state, event)
        value = extract_input_value(event.committed_text)
        prompt = build_input_prompt(state.source_text, value)
        # mode stays AWAITING_INPUT while the second call is outstanding
        nxt = replace(state, busy=True, pending=Stage.INPUT)
        return nxt, [RequestCompletion(Stage.INPUT, prompt)]

    if isinstance(event, CompletionSucceeded):
        if event.stage != state.pending:
            return _ignored(state, event)
        reply = event.text.strip()
        if event.stage == Stage.RUN:
            mode = classify_first_reply(reply) if interactive else Mode.EDITING
            output = reply
        else:
            mode = Mode.EDITING
            output = classify_input_reply(reply).render()
        return replace(state, last_output=output, mode=mode, busy=False, pending=None), []

    if isinstance(event, CompletionFailed):
        if event.stage != state.pending:
            return _ignored(state, event)
        output = failure_outcome(event.stage, event.message).render()
        return replace(state, last_output=output, mode=Mode.EDITING, busy=False, pending=None), []

    raise TypeError(f"Unknown session event: {event!r}")


def _ignored(state: Session, event: Event) -> Tuple[Session, List[Effect]]:
    logger.debug("Ignoring %s in mode=%s busy=%s", type(event).__name__, state.mode.value, state.busy)
    return state, []
