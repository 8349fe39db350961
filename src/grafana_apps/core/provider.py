"""Grafana Provider - Connection configuration for a Grafana instance."""

from functools import cached_property
from typing import Self

from pydantic import BaseModel, ConfigDict, SecretStr

from grafana_apps.client.registry import ClientRegistry
from grafana_apps.client.rest import RestTransport
from grafana_apps.core.kind import ResourceKind
from grafana_apps.core.namespace import TenantRef, tenant_for_client


class TokenAuth(BaseModel):
    """Service account token (or API key) authentication."""

    token: SecretStr


class BasicAuth(BaseModel):
    """Username/password authentication."""

    username: str
    password: SecretStr


class GrafanaProvider(BaseModel):
    """Connection configuration for a Grafana instance.

    For external use, provide url and auth. For testing, or to reuse an
    existing set of transports, use `from_registry` to inject a registry.

    Examples:
        # Local Grafana, org 2
        provider = GrafanaProvider(
            url="https://grafana.company.com",
            auth=TokenAuth(token="glsa_..."),
            org_id=2,
        )

        # Grafana Cloud stack
        provider = GrafanaProvider(
            url="https://mystack.grafana.net",
            auth=TokenAuth(token="glsa_..."),
            stack_id=1234,
        )
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    url: str | None = None
    auth: TokenAuth | BasicAuth | None = None
    org_id: int = 1
    stack_id: int = 0
    user_agent: str = "grafana-apps"
    verify: bool | str = True
    timeout: float | None = None

    # Injected registry (for testing)
    _injected_registry: ClientRegistry | None = None

    @classmethod
    def from_registry(
        cls, registry: ClientRegistry, *, org_id: int = 1, stack_id: int = 0
    ) -> Self:
        """Create a provider with an injected client registry.

        Args:
            registry: A pre-populated ClientRegistry
            org_id: Organization the clients act on
            stack_id: Grafana Cloud stack the clients act on (wins over org_id)
        """
        provider = cls.model_construct(org_id=org_id, stack_id=stack_id)
        provider._injected_registry = registry
        return provider

    @property
    def client_id(self) -> str:
        """Identity recorded in the manager annotations of written objects."""
        return self.user_agent

    @cached_property
    def tenant(self) -> TenantRef:
        return tenant_for_client(self.org_id, self.stack_id)

    @cached_property
    def transport(self) -> RestTransport:
        """The single HTTP transport shared by every kind."""
        if self.url is None:
            raise ValueError(
                "Either provide url+auth, or use GrafanaProvider.from_registry() "
                "to inject a registry"
            )

        token = None
        basic = None
        if isinstance(self.auth, TokenAuth):
            token = self.auth.token.get_secret_value()
        elif isinstance(self.auth, BasicAuth):
            basic = (self.auth.username, self.auth.password.get_secret_value())

        return RestTransport(
            self.url,
            token=token,
            basic_auth=basic,
            user_agent=self.user_agent,
            verify=self.verify,
            timeout=self.timeout,
        )

    @cached_property
    def registry(self) -> ClientRegistry:
        """Get the client registry."""
        if self._injected_registry is not None:
            return self._injected_registry

        def _factory(kind: ResourceKind) -> RestTransport:
            _ = kind
            return self.transport

        return ClientRegistry(factory=_factory)
