# Core orchestration logic for buildos.
# This file coordinates matching, job execution, file operations and the
# summary output used by the command line.
#
# It intentionally contains no CLI parsing and no low-level process logic.

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from rich.console import Console
from rich.markup import escape

from buildos.executor import capture, iorun, run_async
from buildos.fsops import find_program
from buildos.models import EXIT_SUCCESS, IORunResult
from buildos.scheduler import run_tasks
from buildos.traverse import match

console = Console()

# Programs a build commonly needs; reported by diagnose.
DIAGNOSE_PROGRAMS = ("cc", "gcc", "clang", "ar", "make", "ninja", "windres")


# Simple counters used for the mandatory summary block.
@dataclass
class Counters:
    succeeded: int = 0
    failed: int = 0


def run_diagnose(programs: Sequence[str] = DIAGNOSE_PROGRAMS) -> None:
    # Report availability of external build programs.
    # Missing programs must never be fatal.
    console.print("[bold]buildos diagnose[/bold]")
    for name in programs:
        path = find_program(name)
        console.print(f"{name}: {escape(path) if path else 'missing'}")


def run_match(pattern: str, mode: object = None) -> List[str]:
    paths = match(pattern, mode)
    for path in paths:
        console.out(path, highlight=False)
    return paths


def run_command(cmd: str) -> int:
    # Returns the mapped exit code; output is shown only on failure.
    code, output = capture(cmd)
    if code != EXIT_SUCCESS:
        _print_failure(cmd, output)
    return code


def run_iocommand(cmd: str) -> IORunResult:
    result = iorun(cmd)
    if result.outdata:
        console.out(result.outdata, end="", highlight=False)
    if result.errdata:
        Console(stderr=True).out(result.errdata, end="", highlight=False)
    return result


def run_jobs(commands: Iterable[str], jobs: Optional[int] = None) -> Counters:
    # Run commands as cooperative tasks, at most `jobs` at a time.
    # A failing command never stops the others.
    commands = list(commands)
    counters = Counters()

    results = run_tasks((run_async(cmd) for cmd in commands), limit=jobs)

    for cmd, result in zip(commands, results):
        if result.ok:
            counters.succeeded += 1
            console.print(f"[green]OK:[/green] {escape(cmd)}")
        else:
            counters.failed += 1
            _print_failure(cmd, result.errors)

    _print_summary(counters)
    return counters


def _print_failure(cmd: str, errors: Optional[str]) -> None:
    console.print(f"[red]FAILED:[/red] {escape(cmd)}")
    if errors:
        console.out(errors.rstrip(), highlight=False)


def _print_summary(counters: Counters) -> None:
    # Summary block printed at the end of every jobs run.
    console.print()
    console.print("[bold]Summary[/bold]")
    console.print(f"Succeeded: {counters.succeeded}")
    console.print(f"Failed:    {counters.failed}")
