"""URL builders, one per backend.

Tags and digests are never part of a link: every URL points at the default
view of the repository or at a file at an explicit revision.
"""

DOCKER_HUB_WEB_URL = "https://hub.docker.com"
GITHUB_WEB_URL = "https://github.com"


def docker_hub_url(namespace: str | None, repository: str, base: str = DOCKER_HUB_WEB_URL) -> str:
    """Docker Hub listing page.

    Official images (no namespace, or the implicit ``library``) live under
    ``/_/``; everything else under ``/r/<namespace>/``.
    """
    base = base.rstrip("/")
    if namespace is None or namespace == "library":
        return f"{base}/_/{repository}"
    return f"{base}/r/{namespace}/{repository}"


def source_file_url(
    owner: str, repo: str, path: str, ref: str, base: str = GITHUB_WEB_URL
) -> str:
    """Browsable view of ``path`` at ``ref`` on the source host."""
    return f"{base.rstrip('/')}/{owner}/{repo}/blob/{ref}/{path}"


def registry_url(registry: str, namespace: str, repository: str) -> str:
    """Best-effort page for an image on an arbitrary registry (not validated)."""
    return f"https://{registry}/{namespace}/{repository}"
