"""DI provider for HTTP infrastructure."""

from typing import AsyncIterable

import httpx
from dishka import provide

from imgsrc.config import Config
from imgsrc.domain.resolution.port import (
    DockerHubClient,
    RegistryManifestClient,
    SourceRepositoryClient,
)
from imgsrc.infrastructure.http.docker_hub import HttpDockerHubClient
from imgsrc.infrastructure.http.github import GitHubRepositoryClient
from imgsrc.infrastructure.http.registry import OciRegistryClient
from imgsrc.util.di.base import Provider
from imgsrc.util.di.scope import Scope


class HttpProvider(Provider):
    """DI provider for the GitHub, Docker Hub and registry adapters."""

    @provide(scope=Scope.APP)
    async def get_http_client(self, config: Config) -> AsyncIterable[httpx.AsyncClient]:
        """Shared HTTP client for every backend (connection pooling)."""
        client = httpx.AsyncClient(timeout=config.http.timeout())
        yield client
        await client.aclose()

    @provide(scope=Scope.APP, provides=SourceRepositoryClient)
    def get_source_repository(
        self, config: Config, http_client: httpx.AsyncClient
    ) -> GitHubRepositoryClient:
        return GitHubRepositoryClient(config=config.github, http_client=http_client)

    @provide(scope=Scope.APP, provides=DockerHubClient)
    def get_docker_hub(self, config: Config, http_client: httpx.AsyncClient) -> HttpDockerHubClient:
        return HttpDockerHubClient(config=config.docker_hub, http_client=http_client)

    @provide(scope=Scope.APP, provides=RegistryManifestClient)
    def get_registry(self, config: Config, http_client: httpx.AsyncClient) -> OciRegistryClient:
        return OciRegistryClient(config=config.registry, http_client=http_client)
