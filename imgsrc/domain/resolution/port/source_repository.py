"""Port for the source-hosting service (GitHub)."""

from abc import abstractmethod
from typing import Protocol

from imgsrc.domain.shared.port import Port


class SourceRepositoryClient(Port, Protocol):
    """Repository lookups against a source-hosting API.

    Network failures are raised as ExternalServiceError; callers decide how to
    degrade.
    """

    @property
    @abstractmethod
    def web_host(self) -> str:
        """Host name of the browsable site (e.g. ``github.com``)."""
        ...

    @abstractmethod
    async def default_branch(self, owner: str, repo: str) -> str | None:
        """Default branch of ``owner/repo``, or None if the repository does not exist."""
        ...

    @abstractmethod
    async def file_exists(self, owner: str, repo: str, path: str, ref: str) -> bool: ...

    @abstractmethod
    def file_url(self, owner: str, repo: str, path: str, ref: str) -> str: ...
