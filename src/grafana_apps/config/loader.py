"""YAML configuration file loader."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

from dotenv import dotenv_values
from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.constructor import SafeConstructor

from grafana_apps.config.schema import Config

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from grafana_apps.resources.base import ResourceModel


class ConfigError(Exception):
    """Raised for configuration loading / validation errors."""


# Field name → environment variable.
_PROVIDER_ENV_MAP: dict[str, str] = {
    "url": "GRAFANA_URL",
    "auth": "GRAFANA_AUTH",
    "org_id": "GRAFANA_ORG_ID",
    "stack_id": "GRAFANA_STACK_ID",
    "insecure_skip_verify": "GRAFANA_INSECURE_SKIP_VERIFY",
    "ca_cert": "GRAFANA_CA_CERT",
}

_PROVIDER_BOOL_FIELDS: frozenset[str] = frozenset({"insecure_skip_verify"})

# Fields only settable from YAML.
_PROVIDER_YAML_ONLY: tuple[str, ...] = ("user_agent", "timeout")


def _resolve_provider(raw_provider: dict[str, Any], config_dir: Path) -> dict[str, Any]:
    """Resolve provider fields from YAML, env vars, and ``.env`` file.

    Priority (highest wins): YAML value > env var > ``.env`` file.
    """
    env_file = config_dir / ".env"
    dotenv_vals = dotenv_values(env_file, encoding="utf-8-sig") if env_file.is_file() else {}

    resolved: dict[str, Any] = {}
    for field, env_key in _PROVIDER_ENV_MAP.items():
        val = raw_provider.get(field)
        if val is None:
            val = os.environ.get(env_key)
        if val is None:
            val = dotenv_vals.get(env_key)
        if val is not None:
            if field in _PROVIDER_BOOL_FIELDS and isinstance(val, str):
                if val.lower() not in SafeConstructor.bool_values:
                    raise ConfigError(f"Invalid boolean for {env_key}: {val!r}")
                val = SafeConstructor.bool_values[val.lower()]
            resolved[field] = val

    for field in _PROVIDER_YAML_ONLY:
        if raw_provider.get(field) is not None:
            resolved[field] = raw_provider[field]

    return resolved


def _validate_unique_uids(resources: list[ResourceModel[Any]]) -> list[str]:
    """Check that no two resources of the same kind share a uid."""
    groups: dict[str, dict[str, int]] = {}  # resource_type → {uid: first index}
    errors: list[str] = []
    for i, r in enumerate(resources):
        seen = groups.setdefault(r.resource_type, {})
        uid = r.metadata.uid
        if uid in seen:
            errors.append(
                f"Duplicate {r.resource_type} uid '{uid}': "
                f"found in both resources[{seen[uid]}] and resources[{i}]"
            )
        else:
            seen[uid] = i
    return errors


def load_config(path: Path | str) -> Config:
    """Load a YAML configuration file and return a ``Config`` object.

    Raises:
        ConfigError: On YAML parse errors, missing sections, or validation failures.
    """
    path = Path(path)

    try:
        raw = YAML(typ="safe").load(path)
    except Exception as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"{path}: expected a mapping at the top level")

    try:
        raw["provider"] = _resolve_provider(raw.get("provider") or {}, path.parent)
        config = Config.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc

    config.config_dir = path.parent

    errors = _validate_unique_uids(config.resources)
    if errors:
        raise ConfigError("\n".join(errors))

    logger.info("Loaded config from %s (%d resources)", path, len(config.resources))
    return config
