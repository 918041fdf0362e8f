"""Docker Hub adapter for the DockerHubClient port."""

import logging

import httpx

from imgsrc.config import DockerHubConfig
from imgsrc.domain.resolution.port.docker_hub import DockerHubClient
from imgsrc.domain.resolution.util.links import docker_hub_url
from imgsrc.domain.shared.error import ExternalServiceError

logger = logging.getLogger(__name__)


class HttpDockerHubClient(DockerHubClient):
    def __init__(self, config: DockerHubConfig, http_client: httpx.AsyncClient) -> None:
        self._config = config
        self._http = http_client

    async def exists(self, namespace: str, repo: str) -> bool:
        url = f"{self._config.api_url}/repositories/{namespace}/{repo}/"
        try:
            response = await self._http.get(url)
        except httpx.HTTPError as e:
            raise ExternalServiceError(
                f"Docker Hub request failed: {e}", code="docker_hub_unavailable"
            ) from e

        logger.debug("Docker Hub %s/%s: status=%d", namespace, repo, response.status_code)
        return response.is_success

    def url(self, namespace: str | None, repo: str) -> str:
        return docker_hub_url(namespace, repo, base=self._config.web_url)
