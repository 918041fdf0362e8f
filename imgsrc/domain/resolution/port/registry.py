"""Port for OCI registry manifest lookups."""

from abc import abstractmethod
from typing import Protocol

from imgsrc.domain.resolution.model.value import RegistryCredentials
from imgsrc.domain.shared.port import Port


class RegistryManifestClient(Port, Protocol):
    """Maps a published image tag or digest back to a source revision."""

    @abstractmethod
    async def revision(
        self,
        owner: str,
        repo: str,
        reference: str,
        credentials: RegistryCredentials,
        default_branch: str,
    ) -> str:
        """Source revision the image ``owner/repo:reference`` was built from.

        Never raises for remote failures:
        - manifest not found -> ``reference`` unchanged
        - no revision label, or any other failure -> ``default_branch``
        """
        ...
