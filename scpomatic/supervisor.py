"""Lifecycle supervision of a single ``storescp`` child.

Flow::

    config -> storage dir -> argument list -> launch
           -> (wait task | shutdown listener task)
           -> classification -> log

The wait task only observes the child.  The listener task is the only code
that signals it: on the first shutdown request it triggers the cancellation
token, sends SIGTERM and schedules a SIGKILL after the grace period.  The
supervisor is single-shot and never restarts the child.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

import structlog

from scpomatic.cancellation import CancellationToken
from scpomatic.config.schema import ServerConfig
from scpomatic.models import ExitReport, ExitStatus
from scpomatic.process import (
    ProcessHandle,
    build_storescp_args,
    ensure_storage_dir,
    launch,
    resolve_storage_dir,
)
from scpomatic.shutdown import ShutdownSource

log = structlog.get_logger()

GRACE_PERIOD = 3.0

Sleep = Callable[[float], Awaitable[object]]


def classify_exit(returncode: int, cancelled: bool) -> ExitStatus:
    """Map a child return code to an :class:`ExitStatus`.

    A zero exit is always clean.  Any other exit (non-zero status or a
    terminating signal) counts as a requested shutdown when the token was
    already triggered, and as a failure otherwise.
    """
    if returncode == 0:
        return ExitStatus.CLEAN
    if cancelled:
        return ExitStatus.CANCELLED_SHUTDOWN
    return ExitStatus.UNEXPECTED_FAILURE


class ProcessSupervisor:
    """Start ``storescp`` and drive its graceful-then-forced shutdown.

    Args:
        config: Frozen server configuration.
        token: Shared one-shot cancellation token.
        shutdown_source: Producer of operator shutdown requests.
        grace_period: Seconds between SIGTERM and SIGKILL.
        sleep: Coroutine used to wait out the grace period.  Tests inject a
            fake clock here.
    """

    def __init__(
        self,
        config: ServerConfig,
        token: CancellationToken,
        shutdown_source: ShutdownSource,
        *,
        grace_period: float = GRACE_PERIOD,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.config = config
        self.token = token
        self.shutdown_source = shutdown_source
        self.grace_period = grace_period
        self._sleep = sleep
        self._kill_task: asyncio.Task | None = None

    # ------------------------------------------------------------------ #
    # start                                                              #
    # ------------------------------------------------------------------ #
    async def start(self) -> ProcessHandle:
        """Prepare the storage directory and launch ``storescp``.

        Returns:
            Handle on the running child.

        Raises:
            PathResolutionError: The storage path cannot be made absolute.
            StorageDirError: The storage directory cannot be created.
            LaunchError: The binary cannot be spawned.
        """
        cfg = self.config
        storage_dir = resolve_storage_dir(cfg.storage_dir)
        ensure_storage_dir(storage_dir)

        args = build_storescp_args(cfg, storage_dir)
        log.info("storescp.exec", cmd=" ".join([cfg.storescp, *args]))

        handle = await launch(cfg.storescp, args)
        log.info(
            "storescp.started",
            pid=handle.pid,
            port=cfg.port,
            aet=cfg.ae_title,
            storage=str(storage_dir),
        )
        return handle

    # ------------------------------------------------------------------ #
    # shutdown                                                           #
    # ------------------------------------------------------------------ #
    async def _force_kill(self, handle: ProcessHandle) -> None:
        await self._sleep(self.grace_period)
        log.warning("storescp.kill", pid=handle.pid, grace_period=self.grace_period)
        handle.kill()

    async def _listen(self, handle: ProcessHandle) -> None:
        reason = await self.shutdown_source.wait()
        log.info("shutdown.requested", reason=reason)

        # Cancellation must be visible before the child can exit on SIGTERM.
        self.token.cancel(reason)
        if handle.returncode is None:
            log.info("storescp.terminate", pid=handle.pid)
            handle.terminate()
        self._kill_task = asyncio.create_task(self._force_kill(handle))

    async def await_shutdown(self, handle: ProcessHandle) -> ExitReport:
        """Wait for *handle* to exit while honouring shutdown requests.

        Returns:
            Classified :class:`ExitReport`.
        """
        listener = asyncio.create_task(self._listen(handle))
        try:
            returncode = await handle.wait()
        finally:
            listener.cancel()
            if self._kill_task is not None:
                self._kill_task.cancel()
            await asyncio.gather(
                listener,
                *([self._kill_task] if self._kill_task else []),
                return_exceptions=True,
            )
            self._kill_task = None

        report = ExitReport(
            status=classify_exit(returncode, self.token.cancelled),
            returncode=returncode,
            cancelled=self.token.cancelled,
        )
        self._log_report(report)
        return report

    def _log_report(self, report: ExitReport) -> None:
        if report.status is ExitStatus.CLEAN:
            log.info("storescp.exited", status=report.status.value)
        elif report.status is ExitStatus.CANCELLED_SHUTDOWN:
            log.info(
                "storescp.stopped",
                status=report.status.value,
                cause=report.describe(),
                reason=self.token.reason,
            )
        else:
            log.error(
                "storescp.failed",
                status=report.status.value,
                cause=report.describe(),
            )

    # ------------------------------------------------------------------ #
    # full lifecycle                                                     #
    # ------------------------------------------------------------------ #
    async def run(self) -> ExitReport:
        """Install the shutdown source, start the child and supervise it."""
        self.shutdown_source.install()
        try:
            handle = await self.start()
            return await self.await_shutdown(handle)
        finally:
            self.shutdown_source.close()
            log.info("supervisor.closed")
