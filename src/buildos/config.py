# Runtime configuration for buildos.
# Settings are read from the environment on every call so that callers
# (and tests) can change them without reloading modules.

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

ENV_TMPDIR = "BUILDOS_TMPDIR"
ENV_POLL_INTERVAL = "BUILDOS_POLL_INTERVAL"
ENV_VERBOSE = "BUILDOS_VERBOSE"

DEFAULT_POLL_INTERVAL = 0.01

_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    # Root for temporary capture files; None means the system temp directory.
    tmpdir: Optional[str]

    # Seconds the scheduler waits before resuming a task blocked on a process.
    poll_interval: float

    verbose: bool


def _parse_interval(raw: Optional[str]) -> float:
    if raw is None or not raw.strip():
        return DEFAULT_POLL_INTERVAL
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{ENV_POLL_INTERVAL} must be a number, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"{ENV_POLL_INTERVAL} must not be negative, got {raw!r}")
    return value


def is_verbose() -> bool:
    return os.environ.get(ENV_VERBOSE, "").strip().lower() in _TRUE_VALUES


def get_settings() -> Settings:
    return Settings(
        tmpdir=os.environ.get(ENV_TMPDIR) or None,
        poll_interval=_parse_interval(os.environ.get(ENV_POLL_INTERVAL)),
        verbose=is_verbose(),
    )
