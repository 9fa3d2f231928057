"""Build the ``storescp`` command line and launch the child process.

The argument order produced by :func:`build_storescp_args` is a contract with
DCMTK's ``storescp``::

    storescp -d -aet <AE title> -od <absolute storage dir> <port>

``-d`` turns on debug output, ``-aet`` sets the called AE title, ``-od`` the
output directory for received objects and the trailing positional argument is
the listening port.
"""

from __future__ import annotations

import asyncio
import os
import subprocess
from pathlib import Path
from typing import List, Sequence

import structlog

from scpomatic.config.schema import ServerConfig
from scpomatic.errors import LaunchError, PathResolutionError, StorageDirError

log = structlog.get_logger()

VERBOSE_FLAG = "-d"
AET_FLAG = "-aet"
OUTPUT_DIR_FLAG = "-od"


def resolve_storage_dir(path: str | os.PathLike[str]) -> Path:
    """Return *path* as an absolute path.

    Symlinks are left alone; only the working directory is prepended to
    relative paths.

    Raises:
        PathResolutionError: The current working directory cannot be
            determined (for example because it was deleted).
    """
    try:
        return Path(path).expanduser().absolute()
    except (OSError, RuntimeError) as exc:
        raise PathResolutionError(
            f"cannot resolve storage path {os.fspath(path)!r}: {exc}"
        ) from exc


def ensure_storage_dir(path: Path) -> Path:
    """Create *path* and any missing parents.

    Existing directories are left untouched.

    Raises:
        StorageDirError: The directory cannot be created, e.g. permission
            denied or *path* is an existing regular file.
    """
    try:
        path.mkdir(mode=0o755, parents=True, exist_ok=True)
    except OSError as exc:
        raise StorageDirError(f"cannot create storage directory {path}: {exc}") from exc
    return path


def build_storescp_args(config: ServerConfig, storage_dir: Path) -> List[str]:
    """Return the ``storescp`` arguments (without the binary itself).

    Args:
        config: Validated server configuration.
        storage_dir: Absolute storage directory.

    Returns:
        ``["-d", "-aet", <aet>, "-od", <dir>, <port>]`` in exactly that order.
    """
    return [
        VERBOSE_FLAG,
        AET_FLAG, config.ae_title,
        OUTPUT_DIR_FLAG, str(storage_dir),
        config.port,
    ]


class ProcessHandle:
    """Thin wrapper around the running ``storescp`` child.

    Only the supervisor owns a handle.  Signalling a child that has already
    been reaped is a no-op, so :meth:`terminate` and :meth:`kill` may race
    :meth:`wait` safely.
    """

    def __init__(self, process: asyncio.subprocess.Process, argv: Sequence[str]) -> None:
        self._process = process
        self.argv = list(argv)

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def returncode(self) -> int | None:
        return self._process.returncode

    def _send(self, name: str, send) -> bool:
        if self._process.returncode is not None:
            log.debug("storescp.signal_skipped", signal=name, pid=self.pid)
            return False
        try:
            send()
        except ProcessLookupError:
            log.debug("storescp.signal_skipped", signal=name, pid=self.pid)
            return False
        return True

    def terminate(self) -> bool:
        """Send SIGTERM.  Returns ``False`` when the child is already gone."""
        return self._send("SIGTERM", self._process.terminate)

    def kill(self) -> bool:
        """Send SIGKILL.  Returns ``False`` when the child is already gone."""
        return self._send("SIGKILL", self._process.kill)

    async def wait(self) -> int:
        """Wait for the child to exit and return its return code."""
        return await self._process.wait()

    def __repr__(self) -> str:
        return f"<ProcessHandle pid={self.pid} returncode={self.returncode}>"


async def launch(binary: str, args: Sequence[str]) -> ProcessHandle:
    """Spawn *binary* with *args* without waiting for it.

    Standard output and error are inherited from the supervisor so the
    child's log lines are merged into ours unbuffered.

    Raises:
        LaunchError: The binary is missing, not executable or fails to spawn.
    """
    argv = [binary, *args]
    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            stdin=subprocess.DEVNULL,
            stdout=None,
            stderr=None,
        )
    except OSError as exc:
        raise LaunchError(f"cannot start {binary}: {exc}") from exc
    return ProcessHandle(process, argv)
