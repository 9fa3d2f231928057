"""\b
Command-line entry point for *scpomatic*.

The command resolves the configuration (flags, ``SCPOMATIC_*`` environment
variables, optional YAML file), configures logging, then hands control to
:class:`scpomatic.supervisor.ProcessSupervisor` until ``storescp`` exits.

The single-dash long flags (``-aet``, ``-port``, ``-storage``,
``-storescp``) match the historical wrapper; the ``--`` spellings work too.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Dict

import click
import structlog
import yaml
from click.core import ParameterSource

from scpomatic import __version__
from scpomatic.cancellation import CancellationToken
from scpomatic.config import load_config
from scpomatic.config.schema import (
    DEFAULT_AE_TITLE,
    DEFAULT_PORT,
    DEFAULT_STORAGE_DIR,
    DEFAULT_STORESCP,
)
from scpomatic.errors import SupervisorError
from scpomatic.shutdown import SignalShutdownSource
from scpomatic.supervisor import ProcessSupervisor
from scpomatic.utils.display import echo_banner, echo_setting
from scpomatic.utils.logging import setup_logging

log = structlog.get_logger()

_CTX: Dict[str, Any] = dict(
    help_option_names=["-h", "--help"],
    show_default=True,
    max_content_width=120,
)

# Parameter names of the four settings; they double as YAML keys.
_SETTINGS = ("aet", "port", "storage", "storescp")


def _split_by_source(ctx: click.Context, params: Dict[str, Any]):
    """Separate user-supplied values from flag defaults.

    Values typed on the command line or taken from the environment must beat
    the YAML file, defaults must not.
    """
    explicit: Dict[str, Any] = {}
    defaults: Dict[str, Any] = {}
    for name in _SETTINGS:
        source = ctx.get_parameter_source(name)
        if source in (ParameterSource.DEFAULT, ParameterSource.DEFAULT_MAP):
            defaults[name] = params[name]
        else:
            explicit[name] = params[name]
    return explicit, defaults


@click.command(
    name="scpomatic-cli",
    context_settings=_CTX,
    help="Run DCMTK storescp under a supervisor with graceful shutdown.",
)
@click.version_option(__version__)
@click.option("-aet", "--aet", "aet", default=DEFAULT_AE_TITLE, envvar="SCPOMATIC_AET",
              help="AE title advertised by storescp.")
@click.option("-port", "--port", "port", default=DEFAULT_PORT, envvar="SCPOMATIC_PORT",
              help="Listening port passed to storescp.")
@click.option("-storage", "--storage", "storage", default=DEFAULT_STORAGE_DIR,
              envvar="SCPOMATIC_STORAGE",
              help="Directory for received files; created if absent.")
@click.option("-storescp", "--storescp", "storescp", default=DEFAULT_STORESCP,
              envvar="SCPOMATIC_STORESCP",
              help="Path or name of the storescp binary.")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML file with aet/port/storage/storescp keys.",
)
@click.option("--debug", is_flag=True, help="DEBUG-level console output.")
@click.option(
    "--save-logfile",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Mirror log output into this plain-text file.",
)
@click.pass_context
def main(  # noqa: D401 – Click callback
    ctx: click.Context,
    aet: str,
    port: str,
    storage: str,
    storescp: str,
    config_path: Path | None,
    debug: bool,
    save_logfile: Path | None,
) -> None:
    """Supervise ``storescp`` until it exits.

    Raises:
        click.UsageError: The merged configuration is invalid.
        click.ClickException: ``storescp`` could not be started.
    """
    setup_logging(debug=debug, extra_text_log=save_logfile)

    explicit, defaults = _split_by_source(
        ctx, dict(aet=aet, port=port, storage=storage, storescp=storescp)
    )
    try:
        cfg = load_config(explicit=explicit, defaults=defaults, config_path=config_path)
    except (ValueError, yaml.YAMLError) as exc:
        raise click.UsageError(f"Invalid configuration: {exc}", ctx=ctx) from exc

    echo_banner("scpomatic - DIMSE server (storescp wrapper)")
    echo_setting("AE Title", cfg.ae_title)
    echo_setting("Port", cfg.port)
    echo_setting("Storage", cfg.storage_dir)
    echo_setting("storescp", cfg.storescp)

    if cfg.requires_privileges:
        log.warning(
            "port.privileged",
            port=cfg.port,
            hint="ports below 1024 need elevated privileges (use sudo or pick another port)",
        )

    supervisor = ProcessSupervisor(cfg, CancellationToken(), SignalShutdownSource())
    try:
        report = asyncio.run(supervisor.run())
    except SupervisorError as exc:
        log.error("supervisor.startup_failed", error=str(exc))
        raise click.ClickException(str(exc)) from exc

    ctx.exit(report.exit_code)


__all__: list[str] = ["main"]
