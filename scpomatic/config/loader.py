"""
Configuration loader.

Each setting is resolved independently, first match wins:

1. An explicit command-line flag.
2. The matching ``SCPOMATIC_*`` environment variable.
3. The optional YAML file passed with ``--config``.
4. The built-in default declared on :class:`ServerConfig`.

Steps 1 and 2 are handled by Click; this module only overlays the YAML file
on whatever Click reported as a default.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from .schema import ServerConfig

# YAML keys mirror the CLI flag names; values are ServerConfig field names.
YAML_KEYS: dict[str, str] = {
    "aet": "ae_title",
    "port": "port",
    "storage": "storage_dir",
    "storescp": "storescp",
}


def _load_yaml(path: Path) -> dict:
    """Read a YAML mapping; an empty document yields an empty dict.

    Raises:
        ValueError: The document is not a mapping or contains unknown keys.
    """
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")
    unknown = set(data) - set(YAML_KEYS)
    if unknown:
        raise ValueError(f"{path}: unknown key(s): " + ", ".join(sorted(unknown)))
    return data


def load_config(
    *,
    explicit: Mapping[str, Any] | None = None,
    defaults: Mapping[str, Any] | None = None,
    config_path: Optional[str | Path] = None,
) -> ServerConfig:
    """Return a validated :class:`ServerConfig`.

    Args:
        explicit: Values supplied on the command line or through the
            environment, keyed by YAML/flag name (``aet``, ``port``, …).
            These always win.
        defaults: Values that came from flag defaults.  The YAML file
            overrides them.
        config_path: Optional YAML file.

    Returns:
        Frozen configuration object.

    Raises:
        ValueError: The YAML file is malformed.
        pydantic.ValidationError: A merged value fails validation.
    """
    merged: dict[str, Any] = dict(defaults or {})
    if config_path is not None:
        merged.update(_load_yaml(Path(config_path).expanduser()))
    merged.update(explicit or {})

    fields = {YAML_KEYS[key]: value for key, value in merged.items() if value is not None}
    return ServerConfig(**fields)
