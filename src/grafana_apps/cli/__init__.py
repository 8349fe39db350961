"""CLI application for grafana-apps."""

from __future__ import annotations

import logging
import os
import sys

import typer

from grafana_apps import __version__

app = typer.Typer(
    name="grafana-apps",
    no_args_is_help=True,
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"grafana-apps {__version__}")
        raise typer.Exit


_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"
_VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
_PACKAGE_LOGGER = "grafana_apps"
# Named as is in GRAFANA_APPS_LOG; every other name is relative to the package.
_EXTERNAL_LOGGERS = {"urllib3"}

logger = logging.getLogger(__name__)


def _logger_name(name: str) -> str:
    root = name.split(".", 1)[0]
    if root == _PACKAGE_LOGGER or root in _EXTERNAL_LOGGERS:
        return name
    return f"{_PACKAGE_LOGGER}.{name}"


def _parse_log_levels(value: str) -> dict[str, int]:
    """Parse ``GRAFANA_APPS_LOG``: comma-separated ``[logger=]LEVEL`` entries.

    A bare level applies to the whole package, ``client.rest=DEBUG`` to
    ``grafana_apps.client.rest``. Invalid levels fall back to INFO.
    """
    levels: dict[str, int] = {}
    for entry in value.split(","):
        name, _, level_name = entry.strip().rpartition("=")
        level_name = level_name.strip().upper()
        if not level_name:
            continue
        if level_name not in _VALID_LEVELS:
            print(
                f"WARNING: invalid GRAFANA_APPS_LOG level '{level_name}', "
                f"expected one of {', '.join(sorted(_VALID_LEVELS))}; defaulting to INFO",
                file=sys.stderr,
            )
            level_name = "INFO"
        target = _logger_name(name.strip()) if name.strip() else _PACKAGE_LOGGER
        levels[target] = getattr(logging, level_name)
    return levels


def _verbose_levels(verbose: int) -> dict[str, int]:
    if verbose >= 2:
        # -vv also shows each HTTP connection the transport opens.
        return {_PACKAGE_LOGGER: logging.DEBUG, "urllib3": logging.DEBUG}
    if verbose >= 1:
        return {_PACKAGE_LOGGER: logging.INFO}
    return {}


def _configure_logging(verbose: int) -> None:
    """Set up stdlib logging from ``-v`` flags, or ``GRAFANA_APPS_LOG`` when set."""
    env_value = os.environ.get("GRAFANA_APPS_LOG", "")
    levels = _parse_log_levels(env_value) if env_value.strip() else _verbose_levels(verbose)
    if not levels:
        return  # no flag → stay unconfigured
    logging.basicConfig(
        level=logging.WARNING,
        format=_LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)
    logger.debug(
        "Log levels: %s",
        ", ".join(f"{name}={logging.getLevelName(level)}" for name, level in levels.items()),
    )


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase log verbosity (-v info, -vv debug including HTTP connections).",
    ),
) -> None:
    """Manage Grafana App Platform resources (dashboards, playlists) from YAML."""
    _ = version
    _configure_logging(verbose)


# Register commands after app is created to avoid circular imports.
from grafana_apps.cli import commands as _commands  # noqa: E402, F401
