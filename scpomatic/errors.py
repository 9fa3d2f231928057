"""Startup errors raised while preparing or launching ``storescp``.

All three are fatal: the CLI logs them and exits without retrying or probing
for an alternative binary.
"""

from __future__ import annotations


class SupervisorError(RuntimeError):
    """Base class for unrecoverable supervisor start-up failures."""

    pass


class PathResolutionError(SupervisorError):
    """Raised when the storage path cannot be turned into an absolute path."""

    pass


class StorageDirError(SupervisorError):
    """Raised when the storage directory cannot be created."""

    pass


class LaunchError(SupervisorError):
    """Raised when the ``storescp`` binary cannot be found or spawned."""

    pass
