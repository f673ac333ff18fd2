# Program execution for buildos.
# Spawns external programs, waits for them either by blocking or by
# cooperative polling, and maps the result to the exit-code convention:
#   0 success, >0 the program's own exit code, -1 could not run or wait.
#
# Temporary capture files and process handles are always released
# before a result is returned.

from __future__ import annotations

import shlex
from typing import List, Optional, Sequence, Tuple

from rich.console import Console
from rich.markup import escape

from buildos.config import is_verbose
from buildos.fsops import rm, tmpfile, workdir
from buildos.models import EXIT_FAILURE, EXIT_SUCCESS, IORunResult, RunResult
from buildos.process import WAIT_DONE, WAIT_FAILED, WAIT_PENDING, Process, Sink
from buildos.scheduler import in_task, suspend
from buildos.traverse import expand_args

_err = Console(stderr=True)


def parse_command(cmd: str) -> Optional[List[str]]:
    # Split a command line with POSIX shell rules.
    # Returns None for an empty command or unbalanced quotes.
    try:
        argv = shlex.split(cmd or "")
    except ValueError:
        return None
    return argv or None


def _spawn(program: str, argv: Sequence[str], stdout: Sink, stderr: Sink) -> Optional[Process]:
    args = expand_args(argv)
    if is_verbose():
        _err.print(f"[dim]buildos: exec {escape(shlex.join([program, *args]))}[/dim]")
    return Process.open(program, args, stdout, stderr)


def _wait(proc: Process, timeout: float) -> Tuple[int, Optional[int]]:
    try:
        return proc.wait(timeout)
    except Exception as exc:
        # Any failure of the wait itself counts as "no usable status".
        _err.print(f"[dim]buildos: wait failed for {escape(proc.program)}: {escape(str(exc))}[/dim]")
        return WAIT_FAILED, None


def _outcome(waitok: int, status: Optional[int]) -> int:
    if waitok == WAIT_DONE and status is not None:
        return status
    return EXIT_FAILURE


def executev(
    program: str,
    argv: Sequence[str] = (),
    stdout: Sink = None,
    stderr: Sink = None,
) -> int:
    """Run program and block the calling thread until it exits.

    Arguments are wildcard-expanded first. Returns the exit code, or -1
    if the program could not be started or waited for.
    """
    proc = _spawn(program, argv, stdout, stderr)
    if proc is None:
        return EXIT_FAILURE

    try:
        if in_task():
            _err.print(
                f"[yellow]buildos: blocking wait for {escape(program)} inside a "
                "cooperative task; use executev_async to keep other tasks running[/yellow]"
            )
        waitok, status = _wait(proc, -1)
    finally:
        proc.close()
    return _outcome(waitok, status)


async def executev_async(
    program: str,
    argv: Sequence[str] = (),
    stdout: Sink = None,
    stderr: Sink = None,
) -> int:
    """Run program and poll it cooperatively until it exits.

    Between polls the task suspends so that other tasks can run. Those
    tasks may change the working directory; it is put back to what it
    was before the wait loop once the program has finished.
    """
    proc = _spawn(program, argv, stdout, stderr)
    if proc is None:
        return EXIT_FAILURE

    try:
        saved = workdir.current()
        try:
            while True:
                waitok, status = _wait(proc, 0)
                if waitok != WAIT_PENDING:
                    break
                await suspend(proc)
        finally:
            try:
                workdir.restore(saved)
            except OSError as exc:
                _err.print(f"[dim]buildos: cannot restore directory {escape(saved)}: {escape(str(exc))}[/dim]")
    finally:
        proc.close()
    return _outcome(waitok, status)


def execute(cmd: str, stdout: Sink = None, stderr: Sink = None) -> int:
    argv = parse_command(cmd)
    if argv is None:
        return EXIT_FAILURE
    return executev(argv[0], argv[1:], stdout, stderr)


async def execute_async(cmd: str, stdout: Sink = None, stderr: Sink = None) -> int:
    argv = parse_command(cmd)
    if argv is None:
        return EXIT_FAILURE
    return await executev_async(argv[0], argv[1:], stdout, stderr)


def _read(path: str) -> str:
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as fh:
            return fh.read()
    except FileNotFoundError:
        return ""


def _run_result(code: int, output: str) -> RunResult:
    if code != EXIT_SUCCESS:
        return RunResult(False, output)
    return RunResult(True, None)


def capturev(program: str, argv: Sequence[str] = ()) -> Tuple[int, str]:
    # Run with stdout and stderr sharing one temp file.
    # Returns (exit code, combined output).
    log = tmpfile()
    try:
        code = executev(program, argv, log, log)
        return code, _read(log)
    finally:
        rm(log)


async def capturev_async(program: str, argv: Sequence[str] = ()) -> Tuple[int, str]:
    log = tmpfile()
    try:
        code = await executev_async(program, argv, log, log)
        return code, _read(log)
    finally:
        rm(log)


def capture(cmd: str) -> Tuple[int, str]:
    argv = parse_command(cmd)
    if argv is None:
        return EXIT_FAILURE, f"invalid command: {cmd}"
    return capturev(argv[0], argv[1:])


def runv(program: str, argv: Sequence[str] = ()) -> RunResult:
    # Run and discard output; on failure return the combined output.
    return _run_result(*capturev(program, argv))


async def runv_async(program: str, argv: Sequence[str] = ()) -> RunResult:
    return _run_result(*await capturev_async(program, argv))


def run(cmd: str) -> RunResult:
    argv = parse_command(cmd)
    if argv is None:
        return RunResult(False, f"invalid command: {cmd}")
    return runv(argv[0], argv[1:])


async def run_async(cmd: str) -> RunResult:
    argv = parse_command(cmd)
    if argv is None:
        return RunResult(False, f"invalid command: {cmd}")
    return await runv_async(argv[0], argv[1:])


def iorunv(program: str, argv: Sequence[str] = ()) -> IORunResult:
    # Run and return (ok, stdout text, stderr text).
    outfile, errfile = tmpfile(), tmpfile()
    try:
        code = executev(program, argv, outfile, errfile)
        return IORunResult(code == EXIT_SUCCESS, _read(outfile), _read(errfile))
    finally:
        rm(outfile)
        rm(errfile)


async def iorunv_async(program: str, argv: Sequence[str] = ()) -> IORunResult:
    outfile, errfile = tmpfile(), tmpfile()
    try:
        code = await executev_async(program, argv, outfile, errfile)
        return IORunResult(code == EXIT_SUCCESS, _read(outfile), _read(errfile))
    finally:
        rm(outfile)
        rm(errfile)


def iorun(cmd: str) -> IORunResult:
    argv = parse_command(cmd)
    if argv is None:
        return IORunResult(False, "", f"invalid command: {cmd}")
    return iorunv(argv[0], argv[1:])


async def iorun_async(cmd: str) -> IORunResult:
    argv = parse_command(cmd)
    if argv is None:
        return IORunResult(False, "", f"invalid command: {cmd}")
    return await iorunv_async(argv[0], argv[1:])
