"""OCI distribution-API adapter for the RegistryManifestClient port.

Maps ``owner/repo:reference`` on a GHCR-style registry to the source revision
recorded in the image config labels:

    GET /token?scope=repository:<owner>/<repo>:pull       -> bearer token
    GET /v2/<owner>/<repo>/manifests/<reference>          -> manifest or index
    GET /v2/<owner>/<repo>/manifests/<first index digest> -> manifest (index only)
    GET /v2/<owner>/<repo>/blobs/<config digest>          -> image config
"""

import logging

import httpx
from pydantic import ValidationError

from imgsrc.config import RegistryConfig
from imgsrc.domain.resolution.model.value import (
    ImageConfig,
    Manifest,
    ManifestDescriptor,
    ManifestList,
    RegistryCredentials,
)
from imgsrc.domain.resolution.port.registry import RegistryManifestClient
from imgsrc.domain.shared.error import ExternalServiceError, ManifestNotFoundError

logger = logging.getLogger(__name__)

OCI_INDEX = "application/vnd.oci.image.index.v1+json"
DOCKER_MANIFEST_LIST = "application/vnd.docker.distribution.manifest.list.v2+json"
OCI_MANIFEST = "application/vnd.oci.image.manifest.v1+json"
DOCKER_MANIFEST = "application/vnd.docker.distribution.manifest.v2+json"

MANIFEST_LIST_TYPES = frozenset({OCI_INDEX, DOCKER_MANIFEST_LIST})
ACCEPT_MANIFESTS = ", ".join((OCI_INDEX, DOCKER_MANIFEST_LIST, OCI_MANIFEST, DOCKER_MANIFEST))


class OciRegistryClient(RegistryManifestClient):
    """RegistryManifestClient for registries speaking the OCI distribution API."""

    def __init__(self, config: RegistryConfig, http_client: httpx.AsyncClient) -> None:
        self._config = config
        self._http = http_client

    @property
    def _base_url(self) -> str:
        return self._config.url.rstrip("/")

    async def revision(
        self,
        owner: str,
        repo: str,
        reference: str,
        credentials: RegistryCredentials,
        default_branch: str,
    ) -> str:
        try:
            token = await self.token(owner, repo, credentials)
            manifest = await self.manifest(owner, repo, reference, token)
            if isinstance(manifest, ManifestList):
                manifest = await self.manifest(owner, repo, manifest.first.digest, token)
            if isinstance(manifest, ManifestList):
                raise ExternalServiceError(
                    f"Nested manifest list for {owner}/{repo}", code="registry_bad_response"
                )
            config = await self.blob(owner, repo, manifest.config.digest, token)
        except ManifestNotFoundError:
            logger.debug("No manifest for %s/%s:%s, using it as a ref", owner, repo, reference)
            return reference
        except ExternalServiceError as e:
            logger.debug("Registry lookup for %s/%s failed: %s", owner, repo, e.message)
            return default_branch

        revision = config.revision
        if not revision:
            logger.debug("Image %s/%s:%s has no revision label", owner, repo, reference)
            return default_branch
        return revision

    async def token(self, owner: str, repo: str, credentials: RegistryCredentials) -> str:
        """Exchange credentials for a pull-scoped bearer token."""
        params = {
            "scope": f"repository:{owner}/{repo}:pull",
            "service": self._config.host,
        }
        response = await self._request(
            "GET",
            f"{self._base_url}/token",
            params=params,
            auth=credentials.basic_auth(),
        )
        data = self._json(response)
        token = data.get("token") or data.get("access_token")
        if not token:
            raise ExternalServiceError(
                "Registry token response has no token", code="registry_bad_response"
            )
        return token

    async def manifest(
        self, owner: str, repo: str, reference: str, token: str
    ) -> Manifest | ManifestList:
        """Fetch the manifest or manifest list for a tag or digest."""
        response = await self._request(
            "GET",
            f"{self._base_url}/v2/{owner}/{repo}/manifests/{reference}",
            headers={"Accept": ACCEPT_MANIFESTS, "Authorization": f"Bearer {token}"},
            missing_ok=True,
        )
        data = self._json(response)
        media_type = response.headers.get("content-type", "").split(";")[0].strip()

        try:
            if media_type in MANIFEST_LIST_TYPES or "manifests" in data:
                return ManifestList(
                    manifests=tuple(
                        ManifestDescriptor(digest=m["digest"]) for m in data.get("manifests", [])
                    )
                )
            return Manifest(config=ManifestDescriptor(digest=data["config"]["digest"]))
        except (KeyError, TypeError, ValidationError) as e:
            raise ExternalServiceError(
                f"Malformed manifest for {owner}/{repo}:{reference}",
                code="registry_bad_response",
            ) from e

    async def blob(self, owner: str, repo: str, digest: str, token: str) -> ImageConfig:
        """Fetch an image config blob and extract its labels."""
        response = await self._request(
            "GET",
            f"{self._base_url}/v2/{owner}/{repo}/blobs/{digest}",
            headers={"Authorization": f"Bearer {token}"},
            follow_redirects=True,
        )
        data = self._json(response)
        config = data.get("config") or {}
        labels = (config.get("Labels") or {}) if isinstance(config, dict) else None
        if not isinstance(labels, dict):
            raise ExternalServiceError(
                f"Malformed image config {digest}", code="registry_bad_response"
            )
        try:
            return ImageConfig(labels=labels)
        except ValidationError as e:
            raise ExternalServiceError(
                f"Malformed image config {digest}", code="registry_bad_response"
            ) from e

    async def _request(
        self, method: str, url: str, *, missing_ok: bool = False, **kwargs
    ) -> httpx.Response:
        """Send a request; non-2xx is an ExternalServiceError.

        With ``missing_ok``, a 404 raises ManifestNotFoundError instead.
        """
        try:
            response = await self._http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise ExternalServiceError(
                f"Registry request failed: {e}", code="registry_unavailable"
            ) from e

        if missing_ok and response.status_code == 404:
            raise ManifestNotFoundError(f"Not found: {url}")
        if not response.is_success:
            raise ExternalServiceError(
                f"Registry request failed: status={response.status_code}",
                code="registry_unavailable",
            )
        return response

    @staticmethod
    def _json(response: httpx.Response) -> dict:
        try:
            data = response.json()
        except ValueError as e:
            raise ExternalServiceError(
                "Registry returned invalid JSON", code="registry_bad_response"
            ) from e
        if not isinstance(data, dict):
            raise ExternalServiceError(
                "Registry returned unexpected JSON", code="registry_bad_response"
            )
        return data
