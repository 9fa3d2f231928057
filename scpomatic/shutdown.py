"""Sources of operator shutdown requests.

The supervisor never talks to :mod:`signal` directly.  It awaits a
:class:`ShutdownSource`, which lets tests (and embedding code) request a
stop without delivering real operating-system signals.
"""

from __future__ import annotations

import asyncio
import signal
from abc import ABC, abstractmethod
from typing import Iterable

import structlog

log = structlog.get_logger()

DEFAULT_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)


class ShutdownSource(ABC):
    """Abstract producer of a single shutdown request.

    Implementations resolve :meth:`wait` once a stop has been requested.
    Further requests after the first one must not resolve anything new.
    """

    def install(self) -> None:
        """Start listening.  Called from inside the running event loop."""

    def close(self) -> None:
        """Stop listening and release any hooks installed by :meth:`install`."""

    @abstractmethod
    async def wait(self) -> str:
        """Suspend until a shutdown is requested.

        Returns:
            Label describing the request (for example ``"SIGINT"``).
        """
        raise NotImplementedError


class ManualShutdownSource(ShutdownSource):
    """Shutdown source triggered programmatically through :meth:`request`."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason = ""
        self.requests = 0

    def request(self, reason: str = "manual") -> None:
        """Ask for a shutdown.  Only the first reason is kept."""
        self.requests += 1
        if not self._event.is_set():
            self._reason = reason
            self._event.set()

    async def wait(self) -> str:
        await self._event.wait()
        return self._reason


class SignalShutdownSource(ShutdownSource):
    """Translate SIGINT/SIGTERM into a shutdown request.

    Handlers are registered on the running loop with
    :meth:`asyncio.AbstractEventLoop.add_signal_handler`, so they run as
    ordinary callbacks inside the loop rather than interrupting arbitrary
    code.  The first signal resolves :meth:`wait`; later ones are logged and
    otherwise ignored while the handlers stay installed.
    """

    def __init__(self, signals: Iterable[signal.Signals] = DEFAULT_SIGNALS) -> None:
        self._signals = tuple(signals)
        self._installed: list[signal.Signals] = []
        self._event = asyncio.Event()
        self._reason = ""
        self._loop: asyncio.AbstractEventLoop | None = None

    def install(self) -> None:
        self._loop = asyncio.get_running_loop()
        for sig in self._signals:
            try:
                self._loop.add_signal_handler(sig, self._on_signal, sig)
            except (NotImplementedError, RuntimeError, ValueError) as exc:
                # Windows event loops and non-main threads cannot hook signals.
                log.warning("signal.unsupported", signal=sig.name, error=str(exc))
                continue
            self._installed.append(sig)
        log.debug("signal.installed", signals=[s.name for s in self._installed])

    def _on_signal(self, sig: signal.Signals) -> None:
        if self._event.is_set():
            log.debug("signal.repeated", signal=sig.name)
            return
        log.info("signal.received", signal=sig.name)
        self._reason = sig.name
        self._event.set()

    def close(self) -> None:
        if self._loop is None:
            return
        for sig in self._installed:
            self._loop.remove_signal_handler(sig)
        self._installed.clear()
        self._loop = None

    async def wait(self) -> str:
        await self._event.wait()
        return self._reason
