"""YAML configuration loading and convenience apply API."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import SecretStr

from grafana_apps.config.loader import ConfigError, load_config
from grafana_apps.config.registry import default_registry
from grafana_apps.config.schema import Config, ProviderConfig
from grafana_apps.core.provider import BasicAuth, GrafanaProvider, TokenAuth
from grafana_apps.engine.engine import AppsEngine, ProgressCallback

if TYPE_CHECKING:
    from pathlib import Path

    from grafana_apps.engine.types import ApplyResult

__all__ = [
    "Config",
    "ConfigError",
    "ProviderConfig",
    "apply",
    "default_registry",
    "destroy",
    "engine_from_config",
    "load",
    "load_config",
    "parse_auth",
    "provider_from_config",
]


def load(path: Path | str) -> Config:
    """Load a YAML configuration file."""
    return load_config(path)


def parse_auth(auth: str) -> TokenAuth | BasicAuth:
    """``user:password`` is basic auth; anything else is a bearer token."""
    username, sep, password = auth.partition(":")
    if sep:
        return BasicAuth(username=username, password=SecretStr(password))
    return TokenAuth(token=SecretStr(auth))


def provider_from_config(config: Config) -> GrafanaProvider:
    """Build a ``GrafanaProvider`` from the provider section of a config."""
    cfg = config.provider
    if not cfg.url:
        raise ConfigError("provider.url is required (set in YAML or GRAFANA_URL env var)")
    if not cfg.auth:
        raise ConfigError("provider.auth is required (set GRAFANA_AUTH env var)")

    auth = parse_auth(cfg.auth)
    if isinstance(auth, TokenAuth) and cfg.org_id > 1:
        raise ConfigError(
            "org_id is only supported with basic auth; API tokens are already org-scoped"
        )

    verify: bool | str = True
    if cfg.insecure_skip_verify:
        verify = False
    elif cfg.ca_cert:
        verify = cfg.ca_cert

    return GrafanaProvider(
        url=cfg.url,
        auth=auth,
        org_id=cfg.org_id,
        stack_id=cfg.stack_id,
        user_agent=cfg.user_agent,
        verify=verify,
        timeout=cfg.timeout,
    )


def engine_from_config(config: Config) -> AppsEngine:
    """Build an ``AppsEngine`` from a ``Config`` instance."""
    return AppsEngine(provider=provider_from_config(config), registry=default_registry())


def apply(
    config: Config, *, overwrite: bool = False, progress: ProgressCallback | None = None
) -> ApplyResult:
    """Create or update every resource declared in ``config``."""
    engine = engine_from_config(config)
    return engine.apply(config.resources, overwrite=overwrite, progress=progress)


def destroy(config: Config, *, progress: ProgressCallback | None = None) -> ApplyResult:
    """Delete every resource declared in ``config``."""
    engine = engine_from_config(config)
    return engine.destroy(config.resources, progress=progress)
