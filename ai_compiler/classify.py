"""
Heuristic classification of completion replies.

The model answers in free text, so whether a reply is an input prompt or an
input validation error is guessed from substrings. The tests here are loose
on purpose and known to misfire both ways (plain output such as
"Press enter: done" looks like a prompt, "Type a number>" does not); keep the
exact matching so the page behaves the same as before. A structured reply
format would replace these functions and nothing else.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .modes import Mode, Stage

INPUT_PROMPT_WORD = "enter"
ERROR_WORDS = ("error", "invalid")

RUN_ERROR_PREFIX = "Error:"
INPUT_ERROR_PREFIX = "Error processing input:"
INVALID_INPUT_PREFIX = "Invalid input:"


def classify_first_reply(text: str) -> Mode:
    lowered = text.lower()
    if INPUT_PROMPT_WORD in lowered and ":" in text:
        return Mode.AWAITING_INPUT
    return Mode.EDITING


def extract_input_value(committed_text: str) -> str:
    # "Enter your age: 42" -> "42"; no colon -> whole line
    return committed_text.split(":")[-1].strip()


# ================================================================
# Tagged outcomes
# ================================================================
@dataclass(frozen=True)
class Success:
    text: str

    def render(self) -> str:
        return self.text


@dataclass(frozen=True)
class ValidationError:
    """The model rejected the supplied input (reply content, not a failed call)."""

    text: str

    def render(self) -> str:
        return f"{INVALID_INPUT_PREFIX} {self.text}"


@dataclass(frozen=True)
class ExecutionError:
    """
    The completion call itself failed.

    Never produced from a reply: replies only classify as ``Success`` or
    ``ValidationError``. ``failure_outcome`` builds this from the message of
    the failed call so it renders through the same channel.
    """

    prefix: str
    text: str

    def render(self) -> str:
        return f"{self.prefix} {self.text}"


Outcome = Union[Success, ValidationError, ExecutionError]


def classify_input_reply(text: str) -> Outcome:
    lowered = text.lower()
    if any(word in lowered for word in ERROR_WORDS):
        return ValidationError(text)
    return Success(text)


def failure_outcome(stage: Stage, message: str) -> ExecutionError:
    prefix = RUN_ERROR_PREFIX if stage == Stage.RUN else INPUT_ERROR_PREFIX
    return ExecutionError(prefix, message)
