# Command-line interface definition for buildos.
# This file is responsible only for argument parsing, validation,
# and dispatch into core application logic.
#
# No filesystem mutation or business logic should live here.

from __future__ import annotations

import os
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape

from buildos import __version__
from buildos.config import ENV_VERBOSE
from buildos.core import run_command, run_diagnose, run_iocommand, run_jobs, run_match
from buildos.errors import InvalidMatchMode
from buildos.fsops import cp as fs_cp
from buildos.fsops import mv as fs_mv
from buildos.fsops import rm as fs_rm

app = typer.Typer(
    add_completion=False,
    help="Match wildcard paths and run build programs the way the build tool does.",
)
console = Console()
err_console = Console(stderr=True)


def _version_callback(value: bool) -> None:
    if value:
        console.print(__version__)
        raise typer.Exit(code=0)


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Trace matched patterns and spawned programs on stderr.",
    ),
    version: Optional[bool] = typer.Option(
        None, "--version",
        callback=_version_callback, is_eager=True,
        help="Show version and exit.",
    ),
):
    # Settings are read from the environment, so the flag is passed on there.
    if verbose:
        os.environ[ENV_VERBOSE] = "1"


def _fail(message: Optional[str]) -> None:
    err_console.print(f"[red]Error:[/red] {escape(message or 'unknown error')}")
    raise typer.Exit(code=1)


@app.command(help="List paths matching a wildcard pattern ('*', '**', '|exclude').")
def match(
    pattern: str = typer.Argument(..., help="Pattern such as 'src/**.c|test/*.c'."),
    mode: str = typer.Option(
        "f", "--mode", "-m",
        help="f: files only, d: directories only, a: both.",
    ),
):
    try:
        paths = run_match(pattern, mode)
    except InvalidMatchMode as exc:
        raise typer.BadParameter(str(exc), param_hint="--mode") from None
    if not paths:
        raise typer.Exit(code=1)


@app.command(help="Run a command line; print its output only if it fails. Exits with its status.")
def run(cmd: str = typer.Argument(..., help="Command line, quoted as one argument.")):
    raise typer.Exit(code=run_command(cmd))


@app.command(help="Run a command line and print its captured output.")
def iorun(cmd: str = typer.Argument(..., help="Command line, quoted as one argument.")):
    result = run_iocommand(cmd)
    raise typer.Exit(code=0 if result.ok else 1)


@app.command(help="Run several command lines concurrently and summarize.")
def jobs(
    commands: List[str] = typer.Argument(..., help="Command lines, one per argument."),
    limit: int = typer.Option(
        0, "--jobs", "-j",
        help="Maximum number of commands running at once (0: no limit).",
    ),
):
    if limit < 0:
        raise typer.BadParameter("must not be negative", param_hint="--jobs")
    counters = run_jobs(commands, jobs=limit or None)
    raise typer.Exit(code=1 if counters.failed else 0)


@app.command(help="Copy files or directories; sources may be patterns.")
def cp(paths: List[str] = typer.Argument(..., help="Sources followed by the destination.")):
    ok, errors = fs_cp(*paths)
    if not ok:
        _fail(errors)


@app.command(help="Move or rename a file or directory.")
def mv(
    src: str = typer.Argument(..., help="Existing path."),
    dst: str = typer.Argument(..., help="New path."),
):
    ok, errors = fs_mv(src, dst)
    if not ok:
        _fail(errors)


@app.command(help="Remove files or directory trees.")
def rm(
    paths: List[str] = typer.Argument(..., help="Paths to remove."),
    prune: bool = typer.Option(
        False, "--prune-empty",
        help="Also remove each parent directory left empty.",
    ),
):
    for path in paths:
        ok, errors = fs_rm(path, rm_superdir_if_empty=prune)
        if not ok:
            _fail(errors)


@app.command(help="Check availability of common build programs.")
def diagnose():
    run_diagnose()


if __name__ == "__main__":
    app()
