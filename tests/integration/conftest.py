"""Pytest fixtures for integration tests."""

import time
from collections.abc import Generator

import pytest
import requests
from pydantic import SecretStr
from testcontainers.core.container import DockerContainer
from testcontainers.core.waiting_utils import wait_for_logs

from grafana_apps.core.provider import BasicAuth, GrafanaProvider


class GrafanaContainer(DockerContainer):
    """Testcontainer for Grafana with the App Platform APIs enabled."""

    GRAFANA_PORT = 3000
    ADMIN_PASSWORD = "admin"

    def __init__(self, image: str = "grafana/grafana:latest") -> None:
        super().__init__(image)
        self.with_exposed_ports(self.GRAFANA_PORT)
        self.with_env("GF_SECURITY_ADMIN_PASSWORD", self.ADMIN_PASSWORD)
        self.with_env("GF_FEATURE_TOGGLES_ENABLE", "kubernetesDashboards,kubernetesPlaylists")

    def get_connection_url(self) -> str:
        host = self.get_container_host_ip()
        port = self.get_exposed_port(self.GRAFANA_PORT)
        return f"http://{host}:{port}"

    def _wait_for_http(self, timeout: int = 60) -> None:
        """Wait for the Grafana health endpoint to be ready."""
        url = f"{self.get_connection_url()}/api/health"
        deadline = time.time() + timeout
        while time.time() < deadline:
            try:
                resp = requests.get(url, timeout=5)
                if resp.status_code == 200:
                    return
            except requests.RequestException:
                pass
            time.sleep(2)
        raise TimeoutError(f"Grafana did not become ready at {url}")

    def start(self) -> "GrafanaContainer":
        super().start()
        wait_for_logs(self, "HTTP Server Listen", timeout=120)
        self._wait_for_http(timeout=60)
        return self


@pytest.fixture(scope="session")
def grafana_container() -> Generator[GrafanaContainer]:
    """Start a Grafana container for the test session."""
    with GrafanaContainer() as container:
        yield container


@pytest.fixture(scope="session")
def grafana_provider(grafana_container: GrafanaContainer) -> GrafanaProvider:
    """Provide a GrafanaProvider logged in as the container's admin."""
    return GrafanaProvider(
        url=grafana_container.get_connection_url(),
        auth=BasicAuth(
            username="admin", password=SecretStr(GrafanaContainer.ADMIN_PASSWORD)
        ),
        timeout=30,
    )
