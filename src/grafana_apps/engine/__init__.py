"""Reconciliation engine for App Platform resources."""

from grafana_apps.engine.diagnostics import (
    FieldError,
    ResourceAction,
    describe_error,
    parse_field_path,
)
from grafana_apps.engine.engine import AppsEngine
from grafana_apps.engine.errors import (
    ApplyCanceled,
    ApplyError,
    EngineError,
    HandlerNotConfiguredError,
    UnknownResourceTypeError,
)
from grafana_apps.engine.handlers import (
    AppResourceHandler,
    ResourceConfig,
    save_resource_to_model,
    set_manager_properties,
)
from grafana_apps.engine.registry import ResourceTypeRegistration, ResourceTypeRegistry
from grafana_apps.engine.types import Action, ApplyResult, ResourceChange

__all__ = [
    "Action",
    "AppResourceHandler",
    "ApplyCanceled",
    "ApplyError",
    "ApplyResult",
    "AppsEngine",
    "EngineError",
    "FieldError",
    "HandlerNotConfiguredError",
    "ResourceAction",
    "ResourceChange",
    "ResourceConfig",
    "ResourceTypeRegistration",
    "ResourceTypeRegistry",
    "UnknownResourceTypeError",
    "describe_error",
    "parse_field_path",
    "save_resource_to_model",
    "set_manager_properties",
]
