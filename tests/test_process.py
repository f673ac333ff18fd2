# Unit tests for buildos.process.
# These tests validate the open/wait/close contract of process handles.

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from buildos.errors import ProcessError
from buildos.process import WAIT_DONE, WAIT_FAILED, WAIT_PENDING, Process

PY = sys.executable


def test_open_missing_program_returns_none() -> None:
    assert Process.open("definitely-not-a-program-xyz", []) is None


def test_open_unusable_arguments_returns_none(tmp_path: Path) -> None:
    out = tmp_path / "out.txt"
    assert Process.open(PY, ["-c", "pass", "a\x00b"], stdout=str(out)) is None
    assert Process.open(PY, ["-c", "pass", 3]) is None


def test_blocking_wait_reports_exit_code() -> None:
    proc = Process.open(PY, ["-c", "import sys; sys.exit(3)"])
    assert proc is not None
    try:
        assert proc.wait(-1) == (WAIT_DONE, 3)
    finally:
        proc.close()


def test_zero_timeout_polls_without_blocking() -> None:
    proc = Process.open(PY, ["-c", "import time; time.sleep(0.5)"])
    assert proc is not None
    try:
        assert proc.wait(0) == (WAIT_PENDING, None)
        assert proc.wait(0.01) == (WAIT_PENDING, None)
        assert proc.wait(-1) == (WAIT_DONE, 0)
    finally:
        proc.close()


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals")
def test_signal_termination_is_a_failed_wait() -> None:
    proc = Process.open(PY, ["-c", "import time; time.sleep(30)"])
    assert proc is not None
    try:
        proc._popen.kill()
        outcome, _ = proc.wait(-1)
        assert outcome == WAIT_FAILED
    finally:
        proc.close()


def test_path_sinks_are_created_and_may_be_shared(tmp_path: Path) -> None:
    log = tmp_path / "log.txt"
    code = "import sys; sys.stdout.write('out'); sys.stdout.flush(); sys.stderr.write('err')"
    proc = Process.open(PY, ["-c", code], str(log), str(log))
    assert proc is not None
    try:
        assert proc.wait(-1) == (WAIT_DONE, 0)
    finally:
        proc.close()
    assert log.read_text(encoding="utf-8") == "outerr"


def test_close_is_allowed_exactly_once() -> None:
    proc = Process.open(PY, ["-c", "pass"])
    assert proc is not None
    proc.wait(-1)
    proc.close()
    assert proc.closed is True

    with pytest.raises(ProcessError):
        proc.close()
    with pytest.raises(ProcessError):
        proc.wait(0)
