"""Configuration models for YAML-based provisioning."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Discriminator
from pydantic_settings import BaseSettings, SettingsConfigDict

from grafana_apps.resources.dashboard import DashboardResource
from grafana_apps.resources.playlist import PlaylistResource


class ProviderConfig(BaseSettings):
    """Grafana connection settings.

    Fields can be set via YAML (constructor kwargs) or environment variables
    with the ``GRAFANA_`` prefix.  Constructor kwargs take precedence.

    ``auth`` is typically provided via the ``GRAFANA_AUTH`` environment
    variable rather than YAML to avoid committing secrets to version control.
    It is either a service account token or ``user:password``.
    """

    model_config = SettingsConfigDict(env_prefix="GRAFANA_")

    url: str | None = None
    auth: str | None = None
    org_id: int = 1
    stack_id: int = 0
    user_agent: str = "grafana-apps"
    insecure_skip_verify: bool = False
    ca_cert: str | None = None
    timeout: float | None = None


def _none_to_list(v: Any) -> Any:
    return v if v is not None else []


_ResourceEntry = Annotated[
    DashboardResource | PlaylistResource,
    Discriminator("type"),
]


class Config(BaseModel):
    """Provisioning configuration, validated straight from YAML."""

    provider: ProviderConfig
    resources: Annotated[list[_ResourceEntry], BeforeValidator(_none_to_list)] = []
    config_dir: Path = Path()
