"""
Pydantic model for the supervisor configuration.

The model is frozen: it is built once from CLI flags, environment variables
and the optional YAML file, then shared read-only by every component.
"""

from __future__ import annotations

import sys
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_AE_TITLE = "MYPACS"
DEFAULT_PORT = "3000"
DEFAULT_STORAGE_DIR = "./dicom-inbox"
DEFAULT_STORESCP = "storescp"

# Ports below this value need elevated privileges on Linux/macOS.
PRIVILEGED_PORT_LIMIT = 1024


class ServerConfig(BaseModel):
    """Settings for a single supervised ``storescp`` instance.

    Attributes:
        ae_title: AE title advertised by ``storescp``.  Passed through
            unchanged.
        port: Listening port as a numeric string.
        storage_dir: Directory receiving the stored objects.  Made absolute
            and created when the supervisor starts.
        storescp: Name or path of the ``storescp`` binary.  Looked up on
            ``PATH`` at launch time, never validated in advance.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    ae_title: str = Field(DEFAULT_AE_TITLE, min_length=1)
    port: str = DEFAULT_PORT
    storage_dir: Path = Path(DEFAULT_STORAGE_DIR)
    storescp: str = Field(DEFAULT_STORESCP, min_length=1)

    @field_validator("port", mode="before")
    @classmethod
    def _port_is_numeric(cls, value):
        """Accept integers or digit strings in the TCP port range."""
        text = str(value).strip()
        if not text.isdigit():
            raise ValueError(f"port must be numeric, got {value!r}")
        if not 0 < int(text) <= 65535:
            raise ValueError(f"port must be between 1 and 65535, got {text}")
        return text

    @property
    def requires_privileges(self) -> bool:
        """``True`` when binding :attr:`port` needs root on this platform."""
        posix = sys.platform.startswith("linux") or sys.platform == "darwin"
        return posix and int(self.port) < PRIVILEGED_PORT_LIMIT
