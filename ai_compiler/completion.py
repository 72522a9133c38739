from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional

from openai import BadRequestError, NotFoundError, OpenAI

from .config import Settings

logger = logging.getLogger(__name__)


class CompletionError(Exception):
    """The completion call failed (network, auth, quota, empty reply...)."""


# ================================================================
# Helpers (retries)
# ================================================================
def retry(fn: Callable[[], str], *, retries: int = 0, base_delay: float = 0.8) -> str:
    last_err: Optional[Exception] = None
    for attempt in range(retries + 1):
        try:
            return fn()
        except Exception as e:
            last_err = e
            if attempt == retries:
                break
            wait = base_delay * (2 ** attempt)
            logger.warning("Attempt %d failed: %s (waiting %.2fs)", attempt + 1, e, wait)
            time.sleep(wait)
    if retries == 0:
        raise CompletionError(str(last_err)) from last_err
    raise CompletionError(f"All retries failed: {last_err}") from last_err


def make_client(settings: Settings) -> OpenAI:
    if not settings.api_key:
        raise CompletionError("Missing OPENAI_API_KEY")
    # retry() is the only retry layer
    return OpenAI(api_key=settings.api_key, timeout=settings.timeout, max_retries=0)


# ================================================================
# LLM compatibility layer: Responses API -> fallback Chat Completions
# ================================================================
class OpenAICompleter:
    """``complete(prompt) -> str`` backed by an OpenAI client."""

    def __init__(self, client: OpenAI, model: str, *, retries: int = 0, base_delay: float = 0.8):
        self.client = client
        self.model = model
        self.retries = retries
        self.base_delay = base_delay

    def __call__(self, prompt: str) -> str:
        logger.info("LLM call model=%s len=%d", self.model, len(prompt))
        return retry(lambda: self._once(prompt), retries=self.retries, base_delay=self.base_delay)

    def _once(self, prompt: str) -> str:
        try:
            return self._call_via_responses(prompt)
        except (NotFoundError, BadRequestError) as e:
            # endpoint or model not served by the Responses API; quota, auth and
            # connection errors propagate without a second request
            logger.warning("Responses API unsupported: %s; falling back to Chat Completions", e)
            return self._call_via_chat(prompt)

    def _call_via_responses(self, prompt: str) -> str:
        resp = self.client.responses.create(model=self.model, input=prompt)
        out = getattr(resp, "output_text", None)
        if out is not None:
            return out
        chunks: List[str] = []
        for item in getattr(resp, "output", []) or []:
            if getattr(item, "type", "") == "message":
                for c in getattr(item, "content", []) or []:
                    if getattr(c, "type", "") == "output_text":
                        chunks.append(getattr(c, "text", ""))
        return "".join(chunks)

    def _call_via_chat(self, prompt: str) -> str:
        resp = self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
        )
        content = resp.choices[0].message.content
        if content is None:
            raise CompletionError("Model returned no content.")
        return content
