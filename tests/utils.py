"""Test helpers for scpomatic modules."""

from __future__ import annotations

import asyncio
from pathlib import Path


def read_args(tmp_path: Path) -> list[str]:
    """Return the arguments recorded by the stub created with ``make_storescp``."""
    return (tmp_path / "storescp.args").read_text().splitlines()


class FakeHandle:
    """In-memory stand-in for :class:`scpomatic.process.ProcessHandle`.

    Records every signal it receives.  ``exit_on_terminate`` models a
    cooperative child; otherwise only :meth:`kill` ends it.
    """

    def __init__(self, *, exit_on_terminate: bool = False, pid: int = 4242) -> None:
        self.pid = pid
        self.returncode: int | None = None
        self.exit_on_terminate = exit_on_terminate
        self.signals: list[str] = []
        self._exited = asyncio.Event()

    def exit(self, code: int) -> None:
        if self.returncode is None:
            self.returncode = code
            self._exited.set()

    def terminate(self) -> bool:
        self.signals.append("SIGTERM")
        if self.exit_on_terminate:
            self.exit(-15)
        return True

    def kill(self) -> bool:
        self.signals.append("SIGKILL")
        self.exit(-9)
        return True

    async def wait(self) -> int:
        await self._exited.wait()
        return self.returncode


class FakeClock:
    """Replacement for :func:`asyncio.sleep` recording requested delays.

    With ``block=True`` the sleep never finishes on its own, as if the grace
    period had not elapsed yet.
    """

    def __init__(self, *, block: bool = False) -> None:
        self.block = block
        self.sleeps: list[float] = []

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        if self.block:
            await asyncio.Event().wait()
