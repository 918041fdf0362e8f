"""Port for reading metadata labels from a locally present image."""

from abc import abstractmethod
from typing import Protocol

from imgsrc.domain.shared.port import Port


class LabelInspector(Port, Protocol):
    """Reads OCI config labels of an image available to the local runtime."""

    @abstractmethod
    async def label(self, image: str, key: str) -> str | None:
        """Return the non-empty value of ``key``, or None if the image or label is missing."""
        ...
