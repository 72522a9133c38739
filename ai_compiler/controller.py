from __future__ import annotations

import logging
import time
from collections import deque
from datetime import datetime, timezone
from typing import Any, Callable, Deque, Dict, List, Optional

from .session import (
    CompletionFailed,
    CompletionSucceeded,
    Edit,
    Effect,
    Event,
    RequestCompletion,
    Session,
    SubmitInput,
    SubmitRun,
    transition,
)

logger = logging.getLogger(__name__)

Complete = Callable[[str], str]


class SessionController:
    """
    Owns one page view's ``Session`` and performs the completion calls the
    reducer asks for.

    ``dispatch`` only moves state and queues effects, so a UI can render the
    busy state before ``drain`` blocks on the model. The convenience methods
    do both in one go.
    """

    def __init__(self, complete: Complete, *, interactive: bool = True, session: Optional[Session] = None):
        self.complete = complete
        self.interactive = interactive
        self.state = session or Session.initial()
        self.last_run: Dict[str, Any] = {}
        self._queue: Deque[Effect] = deque()

    @property
    def has_pending(self) -> bool:
        return bool(self._queue)

    def dispatch(self, event: Event) -> List[Effect]:
        before = self.state
        self.state, effects = transition(self.state, event, interactive=self.interactive)
        if self.state.mode != before.mode:
            logger.info("Session %s -> %s on %s", before.mode.value, self.state.mode.value, type(event).__name__)
        self._queue.extend(effects)
        return effects

    def drain(self) -> None:
        while self._queue:
            effect = self._queue.popleft()
            if isinstance(effect, RequestCompletion):
                self._perform(effect)

    def _perform(self, effect: RequestCompletion) -> None:
        started = time.monotonic()
        try:
            reply = self.complete(effect.prompt)
        except Exception as e:
            # CompletionError and anything the binding leaks: shown, never raised
            logger.exception("Completion failed (stage=%s)", effect.stage.value)
            ok = False
            self.dispatch(CompletionFailed(effect.stage, str(e) or type(e).__name__))
        else:
            ok = True
            self.dispatch(CompletionSucceeded(effect.stage, reply))
        self.last_run = {
            "stage": effect.stage.value,
            "time_utc": datetime.now(timezone.utc).isoformat(),
            "duration_s": round(time.monotonic() - started, 3),
            "ok": ok,
            "mode_after": self.state.mode.value,
        }

    # ------------------------------------------------------------
    # Convenience
    # ------------------------------------------------------------
    def edit(self, text: str) -> Session:
        self.dispatch(Edit(text))
        return self.state

    def submit_run(self) -> Session:
        self.dispatch(SubmitRun())
        self.drain()
        return self.state

    def submit_input(self, committed_text: str) -> Session:
        self.dispatch(SubmitInput(committed_text))
        self.drain()
        return self.state
