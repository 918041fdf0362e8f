"""GitHub adapter for the SourceRepositoryClient port."""

import logging
from urllib.parse import quote

import httpx

from imgsrc.config import GitHubConfig
from imgsrc.domain.resolution.port.source_repository import SourceRepositoryClient
from imgsrc.domain.resolution.util.links import source_file_url
from imgsrc.domain.shared.error import ExternalServiceError

logger = logging.getLogger(__name__)


class GitHubRepositoryClient(SourceRepositoryClient):
    """SourceRepositoryClient backed by the GitHub REST API."""

    def __init__(self, config: GitHubConfig, http_client: httpx.AsyncClient) -> None:
        self._config = config
        self._http = http_client

    @property
    def web_host(self) -> str:
        return httpx.URL(self._config.web_url).host

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": self._config.user_agent,
        }
        if self._config.token is not None:
            headers["Authorization"] = f"Bearer {self._config.token.get_secret_value()}"
        return headers

    async def _get(self, url: str, params: dict[str, str] | None = None) -> httpx.Response:
        try:
            return await self._http.get(url, params=params, headers=self._headers())
        except httpx.HTTPError as e:
            raise ExternalServiceError(
                f"GitHub request failed: {e}", code="github_unavailable"
            ) from e

    async def default_branch(self, owner: str, repo: str) -> str | None:
        response = await self._get(f"{self._config.api_url}/repos/{owner}/{repo}")
        if not response.is_success:
            logger.debug(
                "GitHub repository %s/%s not found: status=%d",
                owner,
                repo,
                response.status_code,
            )
            return None

        try:
            data = response.json()
        except ValueError as e:
            raise ExternalServiceError(
                "GitHub returned invalid JSON", code="github_bad_response"
            ) from e
        if not isinstance(data, dict):
            raise ExternalServiceError(
                "GitHub returned unexpected JSON", code="github_bad_response"
            )

        # Every repository has a default branch; older ones use master
        branch = data.get("default_branch") or "master"
        if not isinstance(branch, str):
            raise ExternalServiceError(
                f"GitHub returned a non-string default branch for {owner}/{repo}",
                code="github_bad_response",
            )
        return branch

    async def file_exists(self, owner: str, repo: str, path: str, ref: str) -> bool:
        url = f"{self._config.api_url}/repos/{owner}/{repo}/contents/{quote(path)}"
        response = await self._get(url, params={"ref": ref})
        logger.debug(
            "GitHub contents %s/%s/%s@%s: status=%d",
            owner,
            repo,
            path,
            ref,
            response.status_code,
        )
        return response.is_success

    def file_url(self, owner: str, repo: str, path: str, ref: str) -> str:
        return source_file_url(owner, repo, path, ref, base=self._config.web_url)
