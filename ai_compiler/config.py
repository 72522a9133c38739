from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_OUTPUT_DIR = "outputs"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class Settings:
    api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    timeout: Optional[float] = None  # seconds; None waits for the reply indefinitely
    max_retries: int = 0
    interactive: bool = True
    output_dir: str = DEFAULT_OUTPUT_DIR

    @property
    def log_file(self) -> str:
        return os.path.join(self.output_dir, "app.log")


def load_settings(environ: Optional[Mapping[str, str]] = None, *, dotenv: bool = True) -> Settings:
    """Read settings from the environment, after loading ``.env`` if present."""
    if environ is None:
        if dotenv:
            load_dotenv()
        environ = os.environ

    timeout = _parse_float(environ.get("AI_COMPILER_TIMEOUT"), "AI_COMPILER_TIMEOUT")
    if timeout is not None and timeout <= 0:
        timeout = None

    max_retries = _parse_int(environ.get("AI_COMPILER_MAX_RETRIES"), "AI_COMPILER_MAX_RETRIES") or 0
    if max_retries < 0:
        raise ConfigError(f"AI_COMPILER_MAX_RETRIES must be >= 0, got {max_retries}")

    return Settings(
        api_key=environ.get("OPENAI_API_KEY") or None,
        model=(environ.get("AI_COMPILER_MODEL") or DEFAULT_MODEL).strip(),
        timeout=timeout,
        max_retries=max_retries,
        interactive=_parse_bool(environ.get("AI_COMPILER_INTERACTIVE"), "AI_COMPILER_INTERACTIVE", True),
        output_dir=environ.get("AI_COMPILER_OUTPUT_DIR") or DEFAULT_OUTPUT_DIR,
    )


def _parse_float(raw: Optional[str], name: str) -> Optional[float]:
    if raw is None or not raw.strip():
        return None
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None


def _parse_int(raw: Optional[str], name: str) -> Optional[int]:
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None


def _parse_bool(raw: Optional[str], name: str, default: bool) -> bool:
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")
