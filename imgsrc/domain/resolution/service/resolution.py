"""Resolve an image reference to the most specific URL available.

Order of preference:
1. A Dockerfile at the exact commit recorded in a local image's labels.
2. A Dockerfile in the GitHub repository matching ``namespace/repository``,
   at the revision the published image was built from.
3. The Docker Hub listing page.
4. A best-effort page on an explicit registry host.

Individual probes never end a resolution. Their failures count as "not
found" and the next fallback runs; only running out of fallbacks is fatal.
"""

import logging
from collections.abc import Awaitable
from typing import TypeVar

import httpx
import logfire

from imgsrc.domain.reference.model.value import LIBRARY_NAMESPACE, TagOrDigest
from imgsrc.domain.reference.service.parser import parse
from imgsrc.domain.resolution.model.value import (
    DOCKERFILE,
    DOCKERFILE_PATHS,
    REVISION_LABELS,
    SOURCE_LABELS,
    RegistryCredentials,
    Resolution,
    ResolutionTarget,
    is_commit_sha,
)
from imgsrc.domain.resolution.port import (
    DockerHubClient,
    LabelInspector,
    RegistryManifestClient,
    SourceRepositoryClient,
)
from imgsrc.domain.resolution.util.links import registry_url
from imgsrc.domain.shared.error import (
    ExternalServiceError,
    IncompleteReferenceError,
    RepositoryNotFoundError,
)
from imgsrc.domain.shared.service import Service

logger = logging.getLogger(__name__)

T = TypeVar("T")

SSH_GITHUB_PREFIX = "git@github.com:"
HTTPS_GITHUB_PREFIX = "https://github.com/"


async def soft(probe: Awaitable[T], default: T) -> T:
    """Await a fallback-eligible probe, treating any service failure as ``default``."""
    try:
        return await probe
    except ExternalServiceError as e:
        logger.debug("Probe failed, treating as absent: %s", e.message)
        return default


def normalize_source_url(source: str) -> str:
    """Turn an SSH GitHub remote into HTTPS and drop a trailing ``.git``."""
    if source.startswith(SSH_GITHUB_PREFIX):
        source = HTTPS_GITHUB_PREFIX + source.removeprefix(SSH_GITHUB_PREFIX)
    return source.removesuffix(".git")


class ResolutionService(Service):
    label_inspector: LabelInspector
    source_repository: SourceRepositoryClient
    registry: RegistryManifestClient
    docker_hub: DockerHubClient

    async def resolve(self, raw: str, credentials: RegistryCredentials) -> Resolution:
        """Resolve ``raw`` to a single URL.

        Raises:
            ResolutionError: the reference is malformed, has an unsupported
                shape, or no backend knows the repository.
        """
        raw = raw.strip()
        with logfire.span("ResolveImage", image=raw):
            if raw and (resolution := await self.resolve_from_labels(raw)):
                return resolution

            image = parse(raw)

            if image.registry is not None:
                return self._resolve_registry(image.registry, image.namespace, image.repository)

            if image.is_library or image.namespace is None:
                return await self._resolve_docker_hub(LIBRARY_NAMESPACE, image.repository)

            namespace = image.namespace
            if resolution := await self.resolve_from_source(
                namespace, image.repository, image.reference, credentials
            ):
                return resolution
            return await self._resolve_docker_hub(namespace, image.repository)

    # -------------------------------------------------------------------------
    # Local image labels
    # -------------------------------------------------------------------------

    async def resolve_from_labels(self, image: str) -> Resolution | None:
        """Link the Dockerfile at the commit recorded in a local image's labels."""
        source = await self._first_label(image, SOURCE_LABELS)
        revision = await self._first_label(image, REVISION_LABELS)
        if source is None or revision is None:
            return None

        if not is_commit_sha(revision):
            logger.debug("Ignoring revision label %r: not a commit SHA", revision)
            return None

        repository = self._split_source_url(normalize_source_url(source))
        if repository is None:
            logger.debug("Ignoring source label %r: not a repository URL", source)
            return None
        owner, repo = repository

        if not await soft(
            self.source_repository.file_exists(owner, repo, DOCKERFILE, revision), False
        ):
            logger.debug("No %s in %s/%s at %s", DOCKERFILE, owner, repo, revision)
            return None

        logfire.info("Resolved from image labels", owner=owner, repo=repo, revision=revision)
        return Resolution(
            target=ResolutionTarget.SOURCE,
            url=self.source_repository.file_url(owner, repo, DOCKERFILE, revision),
        )

    async def _first_label(self, image: str, keys: tuple[str, ...]) -> str | None:
        for key in keys:
            if value := await soft(self.label_inspector.label(image, key), None):
                return value
        return None

    def _split_source_url(self, source: str) -> tuple[str, str] | None:
        try:
            url = httpx.URL(source)
        except httpx.InvalidURL:
            return None
        if url.scheme not in ("http", "https") or url.host != self.source_repository.web_host:
            return None

        segments = url.path.strip("/").split("/")
        if len(segments) != 2 or not all(segments):
            return None
        return segments[0], segments[1]

    # -------------------------------------------------------------------------
    # Source repository
    # -------------------------------------------------------------------------

    async def resolve_from_source(
        self,
        owner: str,
        repo: str,
        reference: TagOrDigest | None,
        credentials: RegistryCredentials,
    ) -> Resolution | None:
        """Find the Dockerfile for ``owner/repo`` on the source host."""

        default_branch = await soft(self.source_repository.default_branch(owner, repo), None)
        if default_branch is None:
            logger.debug("No source repository %s/%s", owner, repo)
            return None

        revision = default_branch
        if reference is not None:
            revision = await soft(
                self.registry.revision(owner, repo, str(reference), credentials, default_branch),
                default_branch,
            )

        path = await self._find_dockerfile(owner, repo, revision)
        if path is None:
            logger.debug("No Dockerfile in %s/%s at %s", owner, repo, revision)
            return None

        logfire.info("Resolved from source repository", owner=owner, repo=repo, revision=revision)
        return Resolution(
            target=ResolutionTarget.SOURCE,
            url=self.source_repository.file_url(owner, repo, path, revision),
        )

    async def _find_dockerfile(self, owner: str, repo: str, ref: str) -> str | None:
        for path in DOCKERFILE_PATHS:
            if await soft(self.source_repository.file_exists(owner, repo, path, ref), False):
                return path
        return None

    # -------------------------------------------------------------------------
    # Registries
    # -------------------------------------------------------------------------

    async def _resolve_docker_hub(self, namespace: str, repository: str) -> Resolution:
        if not await soft(self.docker_hub.exists(namespace, repository), False):
            raise RepositoryNotFoundError(
                f"Docker Hub repo does not exist: {namespace}/{repository}",
                code="repository_not_found",
            )

        official = namespace == LIBRARY_NAMESPACE
        return Resolution(
            target=ResolutionTarget.DOCKER_HUB,
            url=self.docker_hub.url(None if official else namespace, repository),
        )

    def _resolve_registry(
        self, registry: str, namespace: str | None, repository: str
    ) -> Resolution:
        if namespace is None:
            raise IncompleteReferenceError(
                f"Registry reference {registry}/{repository} has no repository",
                code="incomplete_reference",
            )

        return Resolution(
            target=ResolutionTarget.REGISTRY,
            url=registry_url(registry, namespace, repository),
        )
