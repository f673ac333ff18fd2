# Filesystem traversal and wildcard matching for buildos.
# This module centralizes all path discovery logic so that matching,
# argument expansion and the file helpers see the same results.
#
# No renaming or mutation is allowed here.

from __future__ import annotations

import os
import re
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from rich.console import Console
from rich.markup import escape

from buildos.config import is_verbose
from buildos.models import CompiledPattern, MatchMode
from buildos.pattern import compile_pattern, decode_mode, split_excludes

_err = Console(stderr=True)

_CURDIR_PREFIX = os.curdir + os.sep


def _excluded(relpath: str, excludes: Sequence[re.Pattern]) -> bool:
    return any(ex.fullmatch(relpath) for ex in excludes)


def _mode_accepts(mode: MatchMode, is_dir: bool) -> bool:
    if mode is MatchMode.ANY:
        return True
    return is_dir if mode is MatchMode.DIRS else not is_dir


def _iter_entries(
    rootdir: str,
    recurse: bool,
    depth: Optional[int],
) -> Iterator[Tuple[str, str, bool]]:
    # Yield (path, path relative to rootdir, is_dir) for every entry.
    # Entries of one directory come out in name order, before any of
    # its subdirectories are entered.
    limit = None if recurse else (depth or 1)

    for top, dirnames, filenames in os.walk(rootdir):
        dirnames.sort()
        reltop = os.path.relpath(top, rootdir)
        level = 0 if reltop == os.curdir else reltop.count(os.sep) + 1
        subdirs = set(dirnames)

        for name in sorted(subdirs.union(filenames)):
            relpath = name if level == 0 else os.path.join(reltop, name)
            yield os.path.join(top, name), relpath, name in subdirs

        if limit is not None and level + 1 >= limit:
            dirnames[:] = []


def find(
    rootdir: str,
    regex: re.Pattern,
    recurse: bool = False,
    mode: MatchMode = MatchMode.FILES,
    excludes: Sequence[re.Pattern] = (),
    depth: Optional[int] = None,
) -> List[str]:
    # Walk rootdir and return every entry whose full path matches regex,
    # matches none of the excludes and satisfies mode.
    if not os.path.isdir(rootdir):
        return []

    results = []
    for path, relpath, is_dir in _iter_entries(rootdir, recurse, depth):
        if not _mode_accepts(mode, is_dir):
            continue
        if not regex.fullmatch(path):
            continue
        if excludes and _excluded(relpath, excludes):
            continue
        results.append(path)
    return results


def _match_literal(spelling: str, compiled: CompiledPattern, mode: MatchMode) -> List[str]:
    # A spec without wildcards names at most one entry; check it directly.
    # The caller's spelling is returned as given ("sub/" stays "sub/");
    # the normalized form is only used when the spelling does not resolve,
    # e.g. "sub\\c.c" on POSIX.
    path = spelling
    if not os.path.lexists(path):
        path = compiled.spec
        if not os.path.lexists(path):
            return []
    if not _mode_accepts(mode, os.path.isdir(path)):
        return []
    if compiled.excludes and _excluded(os.path.basename(compiled.spec), compiled.excludes):
        return []
    return [path]


def match(pattern: str, mode: object = None) -> List[str]:
    """Return the paths matching a wildcard pattern.

    "*" matches within one path segment, "**" recurses into
    subdirectories, and a "|a|b" suffix lists patterns (relative to the
    root directory) to exclude. mode is "f" (default), "d" or "a".

    Examples:
    - match("src/*.c") lists the C files directly inside src
    - match("src/**.c|test/*.c") also recurses, skipping src/test/*.c
    - match("src", "d") returns ["src"] if src is a directory
    """
    mode = decode_mode(mode)
    if not pattern:
        return []

    compiled = compile_pattern(pattern)
    if "*" not in compiled.spec:
        results = _match_literal(split_excludes(pattern)[0], compiled, mode)
    else:
        results = find(
            compiled.rootdir,
            compiled.regex,
            recurse=compiled.recurse,
            mode=mode,
            excludes=compiled.excludes,
            depth=compiled.depth,
        )
        if compiled.rootdir == os.curdir:
            results = [p[len(_CURDIR_PREFIX):] for p in results]

    if is_verbose():
        _err.print(f"[dim]buildos: match {escape(pattern)} -> {len(results)} path(s)[/dim]")
    return results


def files(pattern: str) -> List[str]:
    return match(pattern, MatchMode.FILES)


def dirs(pattern: str) -> List[str]:
    return match(pattern, MatchMode.DIRS)


def filedirs(pattern: str) -> List[str]:
    return match(pattern, MatchMode.ANY)


def expand_args(args: Union[str, Iterable[str], None]) -> List[str]:
    # Replace each wildcard argument with the entries it matches.
    # Arguments without "*" and wildcards matching nothing are kept
    # verbatim, so "sub/" or "./script" reach the program as written.
    if args is None:
        return []
    if isinstance(args, str):
        args = [args]

    results: List[str] = []
    for arg in args:
        if "*" not in arg:
            results.append(arg)
            continue
        paths = match(arg, MatchMode.ANY)
        if paths:
            results.extend(paths)
        else:
            results.append(arg)
    return results
