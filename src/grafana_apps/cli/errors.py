"""Map exceptions to clean stderr messages and exit codes."""

from __future__ import annotations

import typer


def _err(msg: str, *, fg: str | None) -> None:
    """Print a styled message to stderr."""
    typer.echo(typer.style(msg, fg=fg), err=True)


def handle_error(
    exc: Exception,
    *,
    color: bool = True,
    action: str = "apply",
    name: str = "",
    resource_type: str = "",
) -> int:
    """Print a clean error message to stderr and return an exit code.

    All errors map to exit code 1.  No tracebacks are printed.  API errors
    are described per resource; pass ``action``/``name``/``resource_type``
    when the failing resource is known to the caller.
    """
    from grafana_apps.client.errors import APIStatusError, CanceledError
    from grafana_apps.config.loader import ConfigError
    from grafana_apps.engine.diagnostics import describe_error
    from grafana_apps.engine.errors import ApplyCanceled, ApplyError

    fg = typer.colors.RED if color else None

    if isinstance(exc, ConfigError):
        _err(f"Configuration error: {exc}", fg=fg)
    elif isinstance(exc, ApplyError):
        cause = exc.__cause__
        if isinstance(cause, APIStatusError):
            resource_type, _, name = exc.address.partition(".")
            _err(f"Apply failed on {exc.address}:", fg=fg)
            for msg in describe_error(action, name, resource_type, cause):
                _err(f"  {msg}", fg=fg)
        else:
            _err(str(exc), fg=fg)
        s = exc.result.summary()
        parts = [
            f"{n} {verb}"
            for n, verb in (
                (s["create"], "added"),
                (s["update"], "changed"),
                (s["delete"], "destroyed"),
            )
            if n
        ]
        if parts:
            _err(f"  Partial result: {', '.join(parts)}.", fg=fg)
    elif isinstance(exc, ApplyCanceled):
        _err("Apply canceled.", fg=fg)
    elif isinstance(exc, CanceledError):
        _err(f"Canceled: {exc}", fg=fg)
    elif isinstance(exc, APIStatusError) and name:
        for msg in describe_error(action, name, resource_type, exc):
            _err(msg, fg=fg)
    else:
        _err(f"Error: {exc}", fg=fg)

    return 1
