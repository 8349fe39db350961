"""CLI command implementations."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Literal

import typer

from grafana_apps.cli import app
from grafana_apps.cli.errors import handle_error

if TYPE_CHECKING:
    from grafana_apps.config.schema import Config
    from grafana_apps.engine.engine import AppsEngine
    from grafana_apps.engine.registry import ResourceTypeRegistration
    from grafana_apps.engine.types import ApplyResult

ConfigPath = Annotated[
    Path,
    typer.Option("--config", "-c", help="Path to the configuration file."),
]

NoColor = Annotated[
    bool,
    typer.Option("--no-color", help="Disable colored output."),
]

AutoApprove = Annotated[
    bool,
    typer.Option("--auto-approve", help="Skip interactive approval."),
]

Kind = Annotated[
    str,
    typer.Argument(help="Resource kind, e.g. 'dashboard' or 'playlist'."),
]

Uid = Annotated[str, typer.Argument(help="Resource uid.")]

Timeout = Annotated[
    float | None,
    typer.Option("--timeout", help="Give up after this many seconds."),
]

_DEFAULT_CONFIG = Path("grafana-apps.yaml")


def _use_color(no_color: bool) -> bool:
    """Determine whether to use color output."""
    return not (no_color or os.environ.get("NO_COLOR"))


def _engine_and_kind(config: Path, kind: str) -> tuple[AppsEngine, ResourceTypeRegistration]:
    from grafana_apps.config import engine_from_config, load

    engine = engine_from_config(load(config))
    return engine, engine.registry.find_by_type_name(kind)


def _run_with_progress(
    cfg: Config, *, color: bool, destroy: bool = False, overwrite: bool = False
) -> ApplyResult:
    """Apply (or destroy) with a Rich progress bar and per-resource status lines."""
    from rich.console import Console
    from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

    from grafana_apps.cli.formatting import _ACTION_STYLES
    from grafana_apps.config import apply
    from grafana_apps.config import destroy as destroy_fn
    from grafana_apps.engine.types import ResourceChange

    console = Console(no_color=not color)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Applying", total=len(cfg.resources))

        def on_progress(change: ResourceChange, event: Literal["start", "done"]) -> None:
            s = _ACTION_STYLES[change.action.value]
            if event == "start":
                progress.update(task, description=f"{change.address}: {s.progress_verb}...")
            elif event == "done":
                progress.console.print(f"  {change.address}: {s.done_verb}")
                progress.advance(task)

        if destroy:
            return destroy_fn(cfg, progress=on_progress)
        return apply(cfg, overwrite=overwrite, progress=on_progress)


@app.command()
def namespace(
    config: ConfigPath = _DEFAULT_CONFIG,
    no_color: NoColor = False,
) -> None:
    """Print the namespace resources are managed in."""
    from grafana_apps.config import load
    from grafana_apps.core.namespace import namespace_for_client

    color = _use_color(no_color)
    try:
        cfg = load(config)
        ns = namespace_for_client(cfg.provider.org_id, cfg.provider.stack_id)
    except Exception as exc:
        raise typer.Exit(handle_error(exc, color=color)) from exc

    typer.echo(ns)


@app.command(name="apply")
def apply_cmd(
    config: ConfigPath = _DEFAULT_CONFIG,
    overwrite: Annotated[
        bool,
        typer.Option("--overwrite", help="Skip the resource version check (last writer wins)."),
    ] = False,
    no_color: NoColor = False,
) -> None:
    """Create or update every resource in the configuration."""
    from grafana_apps.cli.formatting import format_apply_summary
    from grafana_apps.config import load

    color = _use_color(no_color)
    try:
        cfg = load(config)
    except Exception as exc:
        raise typer.Exit(handle_error(exc, color=color)) from exc

    if not cfg.resources:
        typer.echo("No resources declared.")
        raise typer.Exit(0)

    try:
        result = _run_with_progress(cfg, color=color, overwrite=overwrite)
    except Exception as exc:
        raise typer.Exit(handle_error(exc, color=color)) from exc

    typer.echo()
    typer.echo(format_apply_summary(result.summary(), color=color))


@app.command()
def destroy(
    config: ConfigPath = _DEFAULT_CONFIG,
    auto_approve: AutoApprove = False,
    no_color: NoColor = False,
) -> None:
    """Delete every resource in the configuration."""
    from grafana_apps.cli.formatting import format_apply_summary
    from grafana_apps.config import load

    color = _use_color(no_color)
    try:
        cfg = load(config)
    except Exception as exc:
        raise typer.Exit(handle_error(exc, color=color)) from exc

    if not cfg.resources:
        typer.echo("No resources to destroy.")
        raise typer.Exit(0)

    if not auto_approve:
        try:
            typer.confirm("Do you really want to destroy all resources?", abort=True)
        except typer.Abort as e:
            typer.echo("Destroy canceled.", err=True)
            raise typer.Exit(1) from e

    try:
        result = _run_with_progress(cfg, color=color, destroy=True)
    except Exception as exc:
        raise typer.Exit(handle_error(exc, color=color, action="delete")) from exc

    typer.echo()
    typer.echo(format_apply_summary(result.summary(), color=color))


@app.command()
def validate(
    config: ConfigPath = _DEFAULT_CONFIG,
    no_color: NoColor = False,
) -> None:
    """Validate the configuration file."""
    from grafana_apps.cli.formatting import styler
    from grafana_apps.config import load
    from grafana_apps.core.namespace import namespace_for_client

    color = _use_color(no_color)
    try:
        cfg = load(config)
        namespace_for_client(cfg.provider.org_id, cfg.provider.stack_id)
    except Exception as exc:
        raise typer.Exit(handle_error(exc, color=color)) from exc

    typer.echo(styler(color)("Configuration is valid.", fg="green"))


@app.command()
def get(
    kind: Kind,
    uid: Uid,
    config: ConfigPath = _DEFAULT_CONFIG,
    timeout: Timeout = None,
    no_color: NoColor = False,
) -> None:
    """Print an object as JSON."""
    from grafana_apps.core.context import CallContext

    color = _use_color(no_color)
    resource_type = kind
    try:
        engine, reg = _engine_and_kind(config, kind)
        resource_type = reg.resource_type
        obj = engine.handler_for(resource_type).client.get(CallContext(timeout), uid)
    except Exception as exc:
        raise typer.Exit(
            handle_error(exc, color=color, action="read", name=uid, resource_type=resource_type)
        ) from exc

    typer.echo(json.dumps(obj.to_wire(), indent=2, sort_keys=True))


@app.command(name="list")
def list_cmd(
    kind: Kind,
    config: ConfigPath = _DEFAULT_CONFIG,
    limit: Annotated[
        int | None,
        typer.Option("--limit", help="Maximum number of objects to return."),
    ] = None,
    timeout: Timeout = None,
    no_color: NoColor = False,
) -> None:
    """List objects of a kind: name, version and folder."""
    from grafana_apps.cli.formatting import format_object_row
    from grafana_apps.client.options import ListOptions
    from grafana_apps.core.context import CallContext

    color = _use_color(no_color)
    try:
        engine, reg = _engine_and_kind(config, kind)
        client = engine.handler_for(reg.resource_type).client
        res = client.list(CallContext(timeout), ListOptions(limit=limit or 0))
    except Exception as exc:
        raise typer.Exit(handle_error(exc, color=color)) from exc

    if not res.items:
        typer.echo(f"No {reg.handler.kind.plural} found in {client.namespace}.")
        return
    for obj in res.items:
        typer.echo(format_object_row(obj))


@app.command()
def delete(
    kind: Kind,
    uid: Uid,
    config: ConfigPath = _DEFAULT_CONFIG,
    timeout: Timeout = None,
    no_color: NoColor = False,
) -> None:
    """Delete one object."""
    from grafana_apps.core.context import CallContext

    color = _use_color(no_color)
    resource_type = kind
    try:
        engine, reg = _engine_and_kind(config, kind)
        resource_type = reg.resource_type
        engine.handler_for(resource_type).client.delete(CallContext(timeout), uid)
    except Exception as exc:
        raise typer.Exit(
            handle_error(exc, color=color, action="delete", name=uid, resource_type=resource_type)
        ) from exc

    typer.echo(f"Deleted {kind} {uid}.")


@app.command(name="import")
def import_cmd(
    kind: Kind,
    uid: Uid,
    config: ConfigPath = _DEFAULT_CONFIG,
    timeout: Timeout = None,
    no_color: NoColor = False,
) -> None:
    """Print an existing object as a resource entry for the configuration."""
    import sys

    from ruamel.yaml import YAML

    from grafana_apps.core.context import CallContext

    color = _use_color(no_color)
    resource_type = kind
    try:
        engine, reg = _engine_and_kind(config, kind)
        resource_type = reg.resource_type
        model = engine.import_resource(resource_type, uid, ctx=CallContext(timeout))
    except Exception as exc:
        raise typer.Exit(
            handle_error(exc, color=color, action="read", name=uid, resource_type=resource_type)
        ) from exc

    entry = model.model_dump(
        mode="json",
        by_alias=True,
        exclude_none=True,
        exclude={"address": True, "id": True, "metadata": {"uuid", "url", "annotations"}},
    )
    yaml = YAML(typ="safe")
    yaml.default_flow_style = False
    yaml.dump([entry], sys.stdout)
