"""Pytest configuration and shared fixtures for scpomatic tests."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
import structlog


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo ``setup_logging`` calls made by the code under test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    structlog.reset_defaults()
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


@pytest.fixture
def make_storescp(tmp_path: Path):
    """Return a factory writing a stub ``storescp`` shell script.

    The stub records its arguments (one per line) in ``tmp_path/storescp.args``
    and then runs *body*.
    """

    def _make(body: str = "exit 0", name: str = "storescp") -> Path:
        bindir = tmp_path / "bin"
        bindir.mkdir(exist_ok=True)
        script = bindir / name
        args_file = tmp_path / "storescp.args"
        script.write_text(
            "#!/bin/sh\n"
            f"printf '%s\\n' \"$@\" > '{args_file}'\n"
            f"{body}\n"
        )
        script.chmod(0o755)
        return script

    return _make


