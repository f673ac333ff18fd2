# Unit tests for buildos.config and buildos.errors.

from __future__ import annotations

import pytest

from buildos.config import DEFAULT_POLL_INTERVAL, get_settings
from buildos.errors import BuildosError, raise_error


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("BUILDOS_TMPDIR", "BUILDOS_POLL_INTERVAL", "BUILDOS_VERBOSE"):
        monkeypatch.delenv(name, raising=False)

    settings = get_settings()
    assert settings.tmpdir is None
    assert settings.poll_interval == DEFAULT_POLL_INTERVAL
    assert settings.verbose is False


def test_settings_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BUILDOS_TMPDIR", "/scratch")
    monkeypatch.setenv("BUILDOS_POLL_INTERVAL", "0.5")
    monkeypatch.setenv("BUILDOS_VERBOSE", "yes")

    settings = get_settings()
    assert settings.tmpdir == "/scratch"
    assert settings.poll_interval == 0.5
    assert settings.verbose is True


def test_negative_poll_interval_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BUILDOS_POLL_INTERVAL", "-1")
    with pytest.raises(ValueError):
        get_settings()


def test_raise_error_formats_message() -> None:
    with pytest.raises(BuildosError, match="cannot build foo: 2 errors"):
        raise_error("cannot build %s: %d errors", "foo", 2)


def test_raise_error_keeps_unformattable_message() -> None:
    with pytest.raises(BuildosError, match="100% done extra"):
        raise_error("100% done", "extra")


def test_raise_error_without_message() -> None:
    with pytest.raises(BuildosError):
        raise_error()
