"""Image reference parser.

Grammar handled here (a pragmatic subset of the distribution reference grammar):

    reference  := name [ ":" tag | "@" digest ]
    name       := [ registry "/" ] [ namespace "/" ] repository

A ``:`` is only a tag separator when no ``/`` follows it, so the port in
``localhost:5000/app`` stays part of the registry host.
"""

import logging

from imgsrc.domain.reference.model.value import (
    LIBRARY_NAMESPACE,
    Digest,
    ImageReference,
    Tag,
    TagOrDigest,
)
from imgsrc.domain.shared.error import InvalidReferenceError, UnsupportedReferenceError

logger = logging.getLogger(__name__)

DOCKER_HUB_HOST = "docker.io"
MAX_SEGMENTS = 3  # registry + namespace + repository


def split_reference(raw: str) -> tuple[str, TagOrDigest | None]:
    """Split ``raw`` into its name and optional tag or digest."""
    name, sep, digest = raw.rpartition("@")
    if sep:
        return name, Digest(value=digest) if digest else None

    name, sep, tag = raw.rpartition(":")
    if sep and "/" not in tag:
        return name, Tag(value=tag) if tag else None

    return raw, None


def is_registry_host(segment: str) -> bool:
    return "." in segment or ":" in segment or segment == "localhost"


def parse(raw: str) -> ImageReference:
    """Parse an image reference string.

    Examples:
        nginx                  -> (None, "library", "nginx", None)
        acme/widget:1.2        -> (None, "acme", "widget", Tag("1.2"))
        docker.io/acme/widget  -> (None, "acme", "widget", None)
        ghcr.io/acme/widget@sha256:ab -> ("ghcr.io", "acme", "widget", Digest("sha256:ab"))
        localhost:5000/app     -> ("localhost:5000", None, "app", None)

    Raises:
        InvalidReferenceError: empty input or empty path segments.
        UnsupportedReferenceError: more than registry/namespace/repository.
    """
    raw = raw.strip()
    if not raw:
        raise InvalidReferenceError("Image reference is empty", reference=raw)

    name, reference = split_reference(raw)
    segments = name.split("/")

    if any(not segment for segment in segments):
        raise InvalidReferenceError(f"Invalid image reference: {raw!r}", reference=raw)
    if len(segments) > MAX_SEGMENTS:
        raise UnsupportedReferenceError(
            f"Unsupported image reference {raw!r}: "
            f"expected at most {MAX_SEGMENTS} path segments, got {len(segments)}",
            reference=raw,
        )

    registry: str | None = None
    if len(segments) == MAX_SEGMENTS or (len(segments) > 1 and is_registry_host(segments[0])):
        registry = segments.pop(0)
        if registry == DOCKER_HUB_HOST:
            registry = None

    if registry is None and len(segments) == 1:
        segments.insert(0, LIBRARY_NAMESPACE)

    namespace = segments[0] if len(segments) == 2 else None
    parsed = ImageReference(
        registry=registry,
        namespace=namespace,
        repository=segments[-1],
        reference=reference,
    )
    logger.debug("Parsed %r as %r", raw, parsed)
    return parsed
