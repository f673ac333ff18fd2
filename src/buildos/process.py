# Process handles for buildos.
# Wraps subprocess.Popen behind the open/wait/close contract the executor
# relies on. A handle owns any sink files it opened and must be closed
# exactly once.

from __future__ import annotations

import subprocess
from typing import IO, List, Optional, Sequence, Tuple, Union

from rich.console import Console
from rich.markup import escape

from buildos.errors import ProcessError

_err = Console(stderr=True)

# Outcomes reported by Process.wait().
WAIT_DONE = 1
WAIT_PENDING = 0
WAIT_FAILED = -1

# A sink is inherited (None), a path to create, or an already open file.
Sink = Union[None, str, IO]


def _open_sink(sink: Sink, owned: List[IO]) -> Optional[IO]:
    if isinstance(sink, str):
        fh = open(sink, "wb")
        owned.append(fh)
        return fh
    return sink


class Process:
    def __init__(self, popen: subprocess.Popen, program: str, owned: List[IO]):
        self._popen = popen
        self._owned = owned
        self.program = program
        self.closed = False

    def __repr__(self) -> str:
        return f"<Process {self.program!r} pid={self.pid}>"

    @property
    def pid(self) -> int:
        return self._popen.pid

    @classmethod
    def open(
        cls,
        program: str,
        argv: Sequence[str] = (),
        stdout: Sink = None,
        stderr: Sink = None,
    ) -> Optional["Process"]:
        """Start program with argv, or return None if it cannot be started.

        When stdout and stderr name the same path both streams share one
        file, so combined output keeps its order.
        """
        owned: List[IO] = []
        try:
            out = _open_sink(stdout, owned)
            if isinstance(stderr, str) and stderr == stdout:
                err = out
            else:
                err = _open_sink(stderr, owned)
            popen = subprocess.Popen([program, *argv], stdout=out, stderr=err)
        except (OSError, ValueError, TypeError) as exc:
            # ValueError and TypeError come from unusable arguments, such as
            # an embedded NUL byte.
            for fh in owned:
                fh.close()
            _err.print(f"[dim]buildos: cannot start {escape(program)}: {escape(str(exc))}[/dim]")
            return None
        return cls(popen, program, owned)

    def wait(self, timeout: float = -1) -> Tuple[int, Optional[int]]:
        # Returns (outcome, status):
        # - (WAIT_DONE, code) once the program has exited
        # - (WAIT_PENDING, None) if it is still running after timeout
        # - (WAIT_FAILED, ...) if waiting failed or a signal killed it
        # A negative timeout blocks, zero polls.
        if self.closed:
            raise ProcessError(f"wait on closed process {self.program!r}")
        try:
            if timeout == 0:
                code = self._popen.poll()
                if code is None:
                    return WAIT_PENDING, None
            elif timeout < 0:
                code = self._popen.wait()
            else:
                code = self._popen.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            return WAIT_PENDING, None
        except OSError as exc:
            _err.print(f"[dim]buildos: wait failed for {escape(self.program)}: {escape(str(exc))}[/dim]")
            return WAIT_FAILED, None

        # Popen reports death by signal N as -N.
        if code < 0:
            return WAIT_FAILED, code
        return WAIT_DONE, code

    def close(self) -> None:
        if self.closed:
            raise ProcessError(f"process {self.program!r} already closed")
        self.closed = True
        for fh in self._owned:
            fh.close()
        self._owned = []
