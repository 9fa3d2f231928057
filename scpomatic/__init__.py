"""
Public interface for *scpomatic*.

Re-exports the objects needed to embed the supervisor in other code::

    from scpomatic import ProcessSupervisor, ServerConfig
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__: str = version("scpomatic")
except PackageNotFoundError:
    __version__ = "0.0.0"

from .cancellation import CancellationToken  # noqa: E402
from .config import ServerConfig, load_config  # noqa: E402
from .models import ExitReport, ExitStatus  # noqa: E402
from .supervisor import ProcessSupervisor  # noqa: E402

__all__: list[str] = [
    "CancellationToken",
    "ExitReport",
    "ExitStatus",
    "ProcessSupervisor",
    "ServerConfig",
    "load_config",
    "__version__",
]
