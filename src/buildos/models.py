# Shared data models for buildos.
# Lives in its own module to avoid circular imports between the pattern,
# traversal and execution layers.

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum
from typing import NamedTuple, Optional, Tuple

# Exit outcome for "could not start" or "no usable wait status".
EXIT_FAILURE = -1
EXIT_SUCCESS = 0


class MatchMode(IntEnum):
    # Values follow the numeric codes handed to the directory walker.
    ANY = -1
    FILES = 0
    DIRS = 1


@dataclass(frozen=True)
class CompiledPattern:
    spec: str  # Normalized main spec, excludes stripped
    regex: re.Pattern  # Matched against "<rootdir>/<relative path>"
    rootdir: str  # Literal directory prefix anchoring the walk
    recurse: bool  # True if the spec contains "**"
    excludes: Tuple[re.Pattern, ...] = ()  # Matched against the path relative to rootdir
    depth: Optional[int] = None  # Levels below rootdir for non-recursive walks


class RunResult(NamedTuple):
    ok: bool
    errors: Optional[str]


class IORunResult(NamedTuple):
    ok: bool
    outdata: str
    errdata: str
