"""Image reference value objects.

An image reference decomposes into an optional registry host, a namespace, a
repository and an optional tag or digest:

    [registry/][namespace/]repository[:tag|@digest]
"""

from typing import Literal

from pydantic import Field

from imgsrc.domain.shared.model.value import ValueObject

LIBRARY_NAMESPACE = "library"


class Tag(ValueObject):
    """Mutable, human-readable pointer to an image version (e.g. ``latest``)."""

    kind: Literal["tag"] = "tag"
    value: str

    def __str__(self) -> str:
        return self.value


class Digest(ValueObject):
    """Immutable content-addressed pointer (e.g. ``sha256:deadbeef``)."""

    kind: Literal["digest"] = "digest"
    value: str

    def __str__(self) -> str:
        return self.value


TagOrDigest = Tag | Digest


class ImageReference(ValueObject):
    """A parsed image reference.

    ``registry`` is None for Docker Hub (``docker.io`` is normalized away).
    ``namespace`` is ``"library"`` for single-segment Docker Hub references and
    None only for the unresolvable "registry + single segment" shape.
    """

    registry: str | None = None
    namespace: str | None = None
    repository: str = Field(min_length=1)
    reference: TagOrDigest | None = None

    @property
    def is_library(self) -> bool:
        """True for Docker Hub official images (``nginx``, ``library/nginx``)."""
        return self.registry is None and self.namespace == LIBRARY_NAMESPACE

    @property
    def path(self) -> str:
        if self.namespace is None:
            return self.repository
        return f"{self.namespace}/{self.repository}"

    def __str__(self) -> str:
        name = self.path if self.registry is None else f"{self.registry}/{self.path}"
        match self.reference:
            case Tag(value=tag):
                return f"{name}:{tag}"
            case Digest(value=digest):
                return f"{name}@{digest}"
            case _:
                return name
