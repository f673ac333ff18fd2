# Exception types for buildos.
# Most operations report failures as (ok, message) results; the types here
# cover configuration errors and the explicit abort facility.

from __future__ import annotations

from typing import Optional


class BuildosError(Exception):
    """Base class for all buildos errors."""


class InvalidMatchMode(BuildosError, ValueError):
    """Raised when a match mode token is not one of 'a', 'f' or 'd'."""

    def __init__(self, mode: object):
        super().__init__(f"invalid match mode: {mode!r}")
        self.mode = mode


class ProcessError(BuildosError):
    """Raised when a process handle is misused, e.g. closed twice."""


def raise_error(msg: Optional[str] = None, *args: object) -> None:
    """Abort the current operation with a BuildosError.

    This is an explicit opt-in for callers; nothing inside buildos raises
    through it. Formatting follows the % operator, and a message whose
    arguments do not fit is raised verbatim.
    """
    if msg is None:
        raise BuildosError()
    if args:
        try:
            msg = msg % args
        except (TypeError, ValueError):
            msg = " ".join([msg, *(str(a) for a in args)])
    raise BuildosError(msg)
