"""Port for Docker Hub repository lookups."""

from abc import abstractmethod
from typing import Protocol

from imgsrc.domain.shared.port import Port


class DockerHubClient(Port, Protocol):
    @abstractmethod
    async def exists(self, namespace: str, repo: str) -> bool: ...

    @abstractmethod
    def url(self, namespace: str | None, repo: str) -> str:
        """Listing URL; a None namespace formats an official ("library") image URL."""
        ...
