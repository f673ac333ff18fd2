# Wildcard pattern translation for buildos.
# Converts "src/**.c|test/*.c" style specs into compiled regexes plus the
# root directory and recursion flag the walker needs.
#
# This module is pure logic and must remain side-effect free.

from __future__ import annotations

import os
import re
from typing import List, Tuple

from buildos.errors import InvalidMatchMode
from buildos.models import CompiledPattern, MatchMode

EXCLUDE_SEP = "|"

# Private sentinels used between the "**" and "*" substitution passes.
# Literal occurrences in a spec are escaped to their \xNN form first.
_RECURSIVE_TOKEN = "\x01"
_SEGMENT_TOKEN = "\x02"

_MODES = {
    "a": MatchMode.ANY,
    "f": MatchMode.FILES,
    "d": MatchMode.DIRS,
}


def normalize_path(spec: str) -> str:
    # Translate both separator styles to os.sep and collapse redundant
    # separators and "." segments.
    if not spec:
        return spec
    spec = spec.replace("/", os.sep).replace("\\", os.sep)
    return os.path.normpath(spec)


def split_excludes(spec: str) -> Tuple[str, List[str]]:
    # Everything after the first "|" is an exclude list.
    main, sep, rest = spec.partition(EXCLUDE_SEP)
    if not sep:
        return main, []
    return main, [e for e in rest.split(EXCLUDE_SEP) if e]


def _escape_char(ch: str) -> str:
    if ch == "*":
        return ch
    if ch in (_RECURSIVE_TOKEN, _SEGMENT_TOKEN):
        return "\\x%02x" % ord(ch)
    return re.escape(ch)


def translate(spec: str) -> str:
    # Turn a normalized wildcard spec into a regex source string.
    # The order of the three passes matters: escaping first keeps literal
    # characters literal, and "**" must be claimed before "*".
    escaped = "".join(_escape_char(ch) for ch in spec)
    escaped = escaped.replace("**", _RECURSIVE_TOKEN)
    escaped = escaped.replace("*", _SEGMENT_TOKEN)
    escaped = escaped.replace(_RECURSIVE_TOKEN, ".*")
    return escaped.replace(_SEGMENT_TOKEN, "[^%s]*" % re.escape(os.sep))


def root_directory(spec: str) -> str:
    # Directory portion of everything before the first wildcard.
    star = spec.find("*")
    prefix = spec if star < 0 else spec[:star]
    return os.path.dirname(prefix) or os.curdir


def _walk_depth(spec: str, rootdir: str) -> int:
    # Number of path segments below rootdir a non-recursive spec spans.
    if rootdir == os.curdir:
        rest = spec
    else:
        rest = spec[len(rootdir):].lstrip(os.sep)
    return rest.count(os.sep) + 1


def compile_pattern(spec: str) -> CompiledPattern:
    main, raw_excludes = split_excludes(spec)
    main = normalize_path(main)

    excludes = tuple(
        re.compile(translate(normalize_path(e))) for e in raw_excludes
    )

    rootdir = root_directory(main)
    recurse = "**" in main

    source = translate(main)
    if rootdir == os.curdir:
        # The walker reports paths under "." as "./name"; anchor on that
        # so a relative spec cannot match an unrelated path by suffix.
        source = re.escape(os.curdir + os.sep) + source

    return CompiledPattern(
        spec=main,
        regex=re.compile(source),
        rootdir=rootdir,
        recurse=recurse,
        excludes=excludes,
        depth=None if recurse else _walk_depth(main, rootdir),
    )


def decode_mode(mode: object) -> MatchMode:
    # Accepted forms:
    # - "a" for files and directories
    # - "f", False or None for files only
    # - "d", True or any other truthy non-string for directories only
    if isinstance(mode, MatchMode):
        return mode
    if isinstance(mode, str):
        try:
            return _MODES[mode]
        except KeyError:
            raise InvalidMatchMode(mode) from None
    if mode:
        return MatchMode.DIRS
    return MatchMode.FILES
