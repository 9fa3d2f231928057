"""
Data-model declarations for *scpomatic*.

The supervisor reports the end of the child process through a single
:class:`ExitReport`.  The classification itself is a small three-way table
kept in :func:`scpomatic.supervisor.classify_exit`.
"""

from __future__ import annotations

import enum
import signal
from dataclasses import dataclass


class ExitStatus(str, enum.Enum):
    """How the supervised ``storescp`` process ended."""

    CLEAN = "clean"
    CANCELLED_SHUTDOWN = "cancelled"
    UNEXPECTED_FAILURE = "failed"


@dataclass(slots=True, frozen=True)
class ExitReport:
    """Outcome of a supervised run.

    Attributes:
        status: Classification of the exit.
        returncode: Return code as reported by :mod:`asyncio`.  Negative
            values mean the child was terminated by that signal number.
        cancelled: Whether a shutdown had been requested when the child
            exited.
    """

    status: ExitStatus
    returncode: int
    cancelled: bool = False

    @property
    def signal_name(self) -> str | None:
        """Name of the terminating signal, or ``None`` for a normal exit."""
        if self.returncode >= 0:
            return None
        try:
            return signal.Signals(-self.returncode).name
        except ValueError:
            return f"signal {-self.returncode}"

    @property
    def exit_code(self) -> int:
        """Exit code the supervisor itself should terminate with."""
        if self.status is not ExitStatus.UNEXPECTED_FAILURE:
            return 0
        return self.returncode if self.returncode > 0 else 1

    def describe(self) -> str:
        """Return a short description such as ``exit status 2``."""
        name = self.signal_name
        if name is not None:
            return name if name.startswith("signal ") else f"signal {name}"
        return f"exit status {self.returncode}"
