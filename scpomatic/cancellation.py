"""One-shot cancellation token shared by the supervisor tasks."""

from __future__ import annotations

import asyncio

import structlog

log = structlog.get_logger()


class CancellationToken:
    """Process-wide, single-use shutdown marker.

    The token is created once at start-up, triggered at most once and never
    reset.  Observers either poll :attr:`cancelled` or ``await`` :meth:`wait`;
    both read the same :class:`asyncio.Event`, so an observer arriving after
    the trigger still sees it.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        """Reason recorded by the first :meth:`cancel` call."""
        return self._reason

    def cancel(self, reason: str | None = None) -> bool:
        """Trigger the token.

        Args:
            reason: Free-form label, usually the name of the signal that
                requested the shutdown.

        Returns:
            ``True`` for the call that triggered the token, ``False`` for
            every later call (which has no further effect).
        """
        if self._event.is_set():
            log.debug("cancel.ignored", reason=reason, first=self._reason)
            return False
        self._reason = reason
        self._event.set()
        log.debug("cancel.triggered", reason=reason)
        return True

    async def wait(self) -> str | None:
        """Block until the token is triggered and return its reason."""
        await self._event.wait()
        return self._reason

    def __repr__(self) -> str:
        state = f"cancelled reason={self._reason!r}" if self.cancelled else "active"
        return f"<CancellationToken {state}>"
