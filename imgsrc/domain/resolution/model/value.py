"""Value objects used while resolving an image to a URL."""

import re
from collections.abc import Mapping
from enum import Enum

from pydantic import Field, SecretStr

from imgsrc.domain.shared.model.value import ValueObject

# Label keys, current key first, legacy label-schema.org key second.
SOURCE_LABELS = ("org.opencontainers.image.source", "org.label-schema.vcs-url")
REVISION_LABELS = ("org.opencontainers.image.revision", "org.label-schema.vcs-ref")

# Candidate Dockerfile locations, probed in this order.
DOCKERFILE = "Dockerfile"
DOCKERFILE_PATHS = (DOCKERFILE, "docker/Dockerfile")

_COMMIT_SHA = re.compile(r"[0-9a-fA-F]{40}")


def is_commit_sha(revision: str) -> bool:
    """True if ``revision`` looks like a full SHA-1 commit hash."""
    return _COMMIT_SHA.fullmatch(revision) is not None


def first_label(labels: Mapping[str, str], keys: tuple[str, ...]) -> str | None:
    """Return the first non-empty label value among ``keys``."""
    for key in keys:
        if value := labels.get(key):
            return value
    return None


class RegistryCredentials(ValueObject):
    """User/token pair for the registry token exchange.

    The token is a SecretStr so it never shows up in reprs or logs.
    """

    user: str = ""
    token: SecretStr = SecretStr("")

    @classmethod
    def anonymous(cls) -> "RegistryCredentials":
        return cls()

    @property
    def is_anonymous(self) -> bool:
        return not (self.user and self.token.get_secret_value())

    def basic_auth(self) -> tuple[str, str] | None:
        if self.is_anonymous:
            return None
        return self.user, self.token.get_secret_value()


class ManifestDescriptor(ValueObject):
    digest: str


class Manifest(ValueObject):
    """A single-platform image manifest; only the config blob matters here."""

    config: ManifestDescriptor


class ManifestList(ValueObject):
    """A multi-platform manifest list / OCI index.

    No platform matching is done: the first entry is the one used.
    """

    manifests: tuple[ManifestDescriptor, ...] = Field(min_length=1)

    @property
    def first(self) -> ManifestDescriptor:
        return self.manifests[0]


class ImageConfig(ValueObject):
    labels: dict[str, str] = {}

    @property
    def revision(self) -> str | None:
        return first_label(self.labels, REVISION_LABELS)


class ResolutionTarget(str, Enum):
    SOURCE = "source"
    DOCKER_HUB = "docker_hub"
    REGISTRY = "registry"

    @property
    def display_name(self) -> str:
        return {
            ResolutionTarget.SOURCE: "GitHub",
            ResolutionTarget.DOCKER_HUB: "Docker Hub",
            ResolutionTarget.REGISTRY: "registry",
        }[self]


class Resolution(ValueObject):
    """The outcome of a successful resolution."""

    target: ResolutionTarget
    url: str
