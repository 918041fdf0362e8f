"""Unit tests for OciRegistryClient.

Requests are routed by URL to canned responses so each test describes the
registry it talks to as a small table.
"""

from unittest.mock import AsyncMock

import httpx
import pytest
from pydantic import SecretStr

from imgsrc.config import RegistryConfig
from imgsrc.domain.resolution.model.value import (
    Manifest,
    ManifestList,
    RegistryCredentials,
)
from imgsrc.domain.shared.error import ExternalServiceError, ManifestNotFoundError
from imgsrc.infrastructure.http.registry import (
    ACCEPT_MANIFESTS,
    OCI_INDEX,
    OCI_MANIFEST,
    OciRegistryClient,
)

SHA = "0123456789abcdef0123456789abcdef01234567"
BASE = "https://ghcr.io"
TOKEN_URL = f"{BASE}/token"
MANIFEST_URL = f"{BASE}/v2/acme/widget/manifests"
BLOB_URL = f"{BASE}/v2/acme/widget/blobs"


def _response(status: int, url: str, **kwargs) -> httpx.Response:
    return httpx.Response(status, request=httpx.Request("GET", url), **kwargs)


def _router(routes: dict[str, httpx.Response | Exception]):
    async def request(method: str, url: str, **kwargs) -> httpx.Response:
        result = routes.get(url)
        if result is None:
            return _response(404, url)
        if isinstance(result, Exception):
            raise result
        return result

    return request


def _token() -> httpx.Response:
    return _response(200, TOKEN_URL, json={"token": "t0k3n"})


def _manifest(config_digest: str = "sha256:config") -> httpx.Response:
    return _response(
        200,
        f"{MANIFEST_URL}/1.2",
        json={"config": {"digest": config_digest, "mediaType": "application/json"}},
        headers={"content-type": OCI_MANIFEST},
    )


def _index(*digests: str) -> httpx.Response:
    return _response(
        200,
        f"{MANIFEST_URL}/1.2",
        json={"manifests": [{"digest": d, "mediaType": OCI_MANIFEST} for d in digests]},
        headers={"content-type": OCI_INDEX},
    )


def _blob(labels: dict[str, str] | None) -> httpx.Response:
    return _response(200, f"{BLOB_URL}/sha256:config", json={"config": {"Labels": labels}})


@pytest.fixture
def http_client() -> AsyncMock:
    return AsyncMock(spec=httpx.AsyncClient)


@pytest.fixture
def client(http_client: AsyncMock) -> OciRegistryClient:
    return OciRegistryClient(config=RegistryConfig(), http_client=http_client)


@pytest.fixture
def anonymous() -> RegistryCredentials:
    return RegistryCredentials.anonymous()


class TestRevision:
    @pytest.mark.asyncio
    async def test_single_manifest(self, client, http_client, anonymous):
        http_client.request.side_effect = _router(
            {
                TOKEN_URL: _token(),
                f"{MANIFEST_URL}/1.2": _manifest(),
                f"{BLOB_URL}/sha256:config": _blob({"org.opencontainers.image.revision": SHA}),
            }
        )

        assert await client.revision("acme", "widget", "1.2", anonymous, "main") == SHA

    @pytest.mark.asyncio
    async def test_index_uses_first_manifest(self, client, http_client, anonymous):
        http_client.request.side_effect = _router(
            {
                TOKEN_URL: _token(),
                f"{MANIFEST_URL}/1.2": _index("sha256:amd64", "sha256:arm64"),
                f"{MANIFEST_URL}/sha256:amd64": _manifest(),
                f"{BLOB_URL}/sha256:config": _blob({"org.opencontainers.image.revision": SHA}),
            }
        )

        assert await client.revision("acme", "widget", "1.2", anonymous, "main") == SHA

        urls = [call.args[1] for call in http_client.request.await_args_list]
        assert f"{MANIFEST_URL}/sha256:amd64" in urls
        assert f"{MANIFEST_URL}/sha256:arm64" not in urls

    @pytest.mark.asyncio
    async def test_legacy_revision_label(self, client, http_client, anonymous):
        http_client.request.side_effect = _router(
            {
                TOKEN_URL: _token(),
                f"{MANIFEST_URL}/1.2": _manifest(),
                f"{BLOB_URL}/sha256:config": _blob({"org.label-schema.vcs-ref": SHA}),
            }
        )

        assert await client.revision("acme", "widget", "1.2", anonymous, "main") == SHA

    @pytest.mark.asyncio
    async def test_missing_manifest_returns_reference(self, client, http_client, anonymous):
        http_client.request.side_effect = _router({TOKEN_URL: _token()})

        assert await client.revision("acme", "widget", "v1.2", anonymous, "main") == "v1.2"

    @pytest.mark.asyncio
    async def test_missing_label_returns_default_branch(self, client, http_client, anonymous):
        http_client.request.side_effect = _router(
            {
                TOKEN_URL: _token(),
                f"{MANIFEST_URL}/1.2": _manifest(),
                f"{BLOB_URL}/sha256:config": _blob(None),
            }
        )

        assert await client.revision("acme", "widget", "1.2", anonymous, "main") == "main"

    @pytest.mark.asyncio
    async def test_token_failure_returns_default_branch(self, client, http_client, anonymous):
        http_client.request.side_effect = _router(
            {TOKEN_URL: _response(401, TOKEN_URL, json={"errors": []})}
        )

        assert await client.revision("acme", "widget", "1.2", anonymous, "main") == "main"

    @pytest.mark.asyncio
    async def test_missing_token_endpoint_is_not_a_missing_manifest(
        self, client, http_client, anonymous
    ):
        http_client.request.side_effect = _router({})

        assert await client.revision("acme", "widget", "1.2", anonymous, "main") == "main"

    @pytest.mark.asyncio
    async def test_network_error_returns_default_branch(self, client, http_client, anonymous):
        http_client.request.side_effect = httpx.ConnectError("connection refused")

        assert await client.revision("acme", "widget", "1.2", anonymous, "main") == "main"

    @pytest.mark.asyncio
    async def test_nested_index_returns_default_branch(self, client, http_client, anonymous):
        http_client.request.side_effect = _router(
            {
                TOKEN_URL: _token(),
                f"{MANIFEST_URL}/1.2": _index("sha256:nested"),
                f"{MANIFEST_URL}/sha256:nested": _index("sha256:deeper"),
            }
        )

        assert await client.revision("acme", "widget", "1.2", anonymous, "main") == "main"


class TestToken:
    @pytest.mark.asyncio
    async def test_anonymous_exchange(self, client, http_client, anonymous):
        http_client.request.side_effect = _router({TOKEN_URL: _token()})

        assert await client.token("acme", "widget", anonymous) == "t0k3n"

        kwargs = http_client.request.await_args.kwargs
        assert kwargs["params"] == {"scope": "repository:acme/widget:pull", "service": "ghcr.io"}
        assert kwargs["auth"] is None

    @pytest.mark.asyncio
    async def test_basic_auth(self, client, http_client):
        http_client.request.side_effect = _router({TOKEN_URL: _token()})
        credentials = RegistryCredentials(user="octocat", token=SecretStr("pat"))

        await client.token("acme", "widget", credentials)

        assert http_client.request.await_args.kwargs["auth"] == ("octocat", "pat")

    @pytest.mark.asyncio
    async def test_access_token_field(self, client, http_client, anonymous):
        http_client.request.side_effect = _router(
            {TOKEN_URL: _response(200, TOKEN_URL, json={"access_token": "a"})}
        )

        assert await client.token("acme", "widget", anonymous) == "a"

    @pytest.mark.asyncio
    async def test_no_token_in_response(self, client, http_client, anonymous):
        http_client.request.side_effect = _router({TOKEN_URL: _response(200, TOKEN_URL, json={})})

        with pytest.raises(ExternalServiceError):
            await client.token("acme", "widget", anonymous)


class TestManifest:
    @pytest.mark.asyncio
    async def test_sends_accept_and_bearer(self, client, http_client):
        http_client.request.side_effect = _router({f"{MANIFEST_URL}/1.2": _manifest()})

        manifest = await client.manifest("acme", "widget", "1.2", "t0k3n")

        assert isinstance(manifest, Manifest)
        assert manifest.config.digest == "sha256:config"
        headers = http_client.request.await_args.kwargs["headers"]
        assert headers == {"Accept": ACCEPT_MANIFESTS, "Authorization": "Bearer t0k3n"}

    @pytest.mark.asyncio
    async def test_index_detected_by_body(self, client, http_client):
        http_client.request.side_effect = _router(
            {
                f"{MANIFEST_URL}/1.2": _response(
                    200,
                    f"{MANIFEST_URL}/1.2",
                    json={"manifests": [{"digest": "sha256:a"}]},
                    headers={"content-type": "application/json"},
                )
            }
        )

        manifest = await client.manifest("acme", "widget", "1.2", "t0k3n")

        assert isinstance(manifest, ManifestList)
        assert manifest.first.digest == "sha256:a"

    @pytest.mark.asyncio
    async def test_not_found(self, client, http_client):
        http_client.request.side_effect = _router({})

        with pytest.raises(ManifestNotFoundError):
            await client.manifest("acme", "widget", "nope", "t0k3n")

    @pytest.mark.asyncio
    async def test_malformed(self, client, http_client):
        http_client.request.side_effect = _router(
            {f"{MANIFEST_URL}/1.2": _response(200, f"{MANIFEST_URL}/1.2", json={"schemaVersion": 2})}
        )

        with pytest.raises(ExternalServiceError):
            await client.manifest("acme", "widget", "1.2", "t0k3n")

    @pytest.mark.asyncio
    async def test_empty_index_is_malformed(self, client, http_client):
        http_client.request.side_effect = _router({f"{MANIFEST_URL}/1.2": _index()})

        with pytest.raises(ExternalServiceError):
            await client.manifest("acme", "widget", "1.2", "t0k3n")


class TestBlob:
    @pytest.mark.asyncio
    async def test_follows_redirects(self, client, http_client):
        http_client.request.side_effect = _router(
            {f"{BLOB_URL}/sha256:config": _blob({"a": "b"})}
        )

        config = await client.blob("acme", "widget", "sha256:config", "t0k3n")

        assert config.labels == {"a": "b"}
        assert http_client.request.await_args.kwargs["follow_redirects"] is True

    @pytest.mark.asyncio
    async def test_missing_config_section(self, client, http_client):
        http_client.request.side_effect = _router(
            {f"{BLOB_URL}/sha256:config": _response(200, BLOB_URL, json={"architecture": "amd64"})}
        )

        config = await client.blob("acme", "widget", "sha256:config", "t0k3n")

        assert config.labels == {}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [{"config": "oops"}, {"config": ["a"]}, {"config": {"Labels": "oops"}}],
    )
    async def test_malformed_config_is_a_service_error(self, client, http_client, body):
        http_client.request.side_effect = _router(
            {f"{BLOB_URL}/sha256:config": _response(200, BLOB_URL, json=body)}
        )

        with pytest.raises(ExternalServiceError):
            await client.blob("acme", "widget", "sha256:config", "t0k3n")


class TestRevisionMalformedBlob:
    @pytest.mark.asyncio
    async def test_non_object_config_returns_default_branch(self, client, http_client, anonymous):
        http_client.request.side_effect = _router(
            {
                TOKEN_URL: _token(),
                f"{MANIFEST_URL}/1.2": _manifest(),
                f"{BLOB_URL}/sha256:config": _response(200, BLOB_URL, json={"config": "oops"}),
            }
        )

        assert await client.revision("acme", "widget", "1.2", anonymous, "main") == "main"
