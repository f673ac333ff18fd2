# File and directory helpers for buildos.
# Every operation reports failure as an (ok, message) pair instead of
# raising, so build scripts can decide whether a failure is fatal.
#
# The working directory is process-wide state; all changes to it go
# through the single WorkingDirectory instance below.

from __future__ import annotations

import os
import shutil
import sys
import tempfile
import uuid
from typing import Optional, Sequence, Tuple

from buildos.config import get_settings
from buildos.traverse import expand_args

Result = Tuple[bool, Optional[str]]

TMPDIR_NAME = ".buildos"


def _strerror(exc: OSError) -> str:
    return exc.strerror or str(exc)


class WorkingDirectory:
    # Current directory with a one-slot memory for cd("-").
    # Only one previous directory is remembered; toggling twice returns
    # to where you started, deeper history is lost.
    def __init__(self) -> None:
        self.previous: Optional[str] = None

    @staticmethod
    def current() -> str:
        return os.getcwd()

    def cd(self, directory: str) -> Result:
        if not directory:
            return False, "cannot change directory: no directory given"

        if directory == "-":
            if self.previous is None:
                return False, "not found the previous directory"
            directory = self.previous
            self.previous = None

        if not os.path.isdir(directory):
            return False, f"cannot change directory {directory}, not found this directory"

        current = os.getcwd()
        try:
            os.chdir(directory)
        except OSError as exc:
            return False, f"cannot change directory {directory} {_strerror(exc)}"

        self.previous = current
        return True, None

    def restore(self, directory: str) -> None:
        # Return to a saved directory without touching the cd("-") memory.
        if os.getcwd() != directory:
            os.chdir(directory)


workdir = WorkingDirectory()


def curdir() -> str:
    return workdir.current()


def cd(directory: str) -> Result:
    return workdir.cd(directory)


def _cp(src: str, dst: str) -> Result:
    # Copy one file or directory; an existing destination directory
    # receives the source under its own name.
    try:
        if os.path.isfile(src):
            if os.path.isdir(dst):
                dst = os.path.join(dst, os.path.basename(src))
            parent = os.path.dirname(dst)
            if parent:
                os.makedirs(parent, exist_ok=True)
            shutil.copy2(src, dst)
        elif os.path.isdir(src):
            if os.path.isdir(dst):
                dst = os.path.join(dst, os.path.basename(os.path.normpath(src)))
            shutil.copytree(src, dst, symlinks=True, dirs_exist_ok=True)
        else:
            return False, f"cannot copy file {src}, not found this file"
    except OSError as exc:
        kind = "directory" if os.path.isdir(src) else "file"
        return False, f"cannot copy {kind} {src} to {dst} {_strerror(exc)}"
    return True, None


def cp(*paths: str) -> Result:
    """Copy files or directories; the last argument is the destination.

    Source arguments may be wildcard patterns. Copying stops at the
    first failure.
    """
    if len(paths) < 2:
        return False, f"invalid arguments: {' '.join(paths)}"

    sources: Sequence[str] = paths[:-1]
    dst = paths[-1]
    for src in expand_args(sources):
        ok, err = _cp(src, dst)
        if not ok:
            return False, err
    return True, None


def mv(src: str, dst: str) -> Result:
    if not os.path.lexists(src):
        return False, f"cannot move {src} to {dst}, not found this file"
    try:
        shutil.move(src, dst)
    except OSError as exc:
        return False, f"cannot move {src} to {dst} {_strerror(exc)}"
    return True, None


def rm(path: str, rm_superdir_if_empty: bool = False) -> Result:
    # Remove a file or a whole directory tree.
    # A path that does not exist is not an error.
    try:
        if os.path.isfile(path) or os.path.islink(path):
            os.remove(path)
        elif os.path.isdir(path):
            shutil.rmtree(path)
    except OSError as exc:
        kind = "directory" if os.path.isdir(path) else "file"
        return False, f"cannot remove {kind} {path} {_strerror(exc)}"

    if rm_superdir_if_empty:
        superdir = os.path.dirname(os.path.normpath(path))
        if superdir and os.path.isdir(superdir) and not os.listdir(superdir):
            try:
                os.rmdir(superdir)
            except OSError as exc:
                return False, f"cannot remove directory {superdir} {_strerror(exc)}"
    return True, None


def tmpdir() -> str:
    # Scratch directory shared by all buildos temporary files.
    base = get_settings().tmpdir or tempfile.gettempdir()
    path = os.path.join(base, TMPDIR_NAME)
    os.makedirs(path, exist_ok=True)
    return path


def tmpfile() -> str:
    # A fresh path inside tmpdir(); the file itself is not created.
    return os.path.join(tmpdir(), uuid.uuid4().hex)


def isexec(filepath: str) -> bool:
    if sys.platform == "win32" and not filepath.lower().endswith(".exe"):
        filepath += ".exe"
    return os.path.isfile(filepath) and os.access(filepath, os.X_OK)


def find_program(name: str, paths: Optional[Sequence[str]] = None) -> Optional[str]:
    # Look a program up on PATH, or on the given directories instead.
    search = os.pathsep.join(paths) if paths else None
    return shutil.which(name, path=search)
