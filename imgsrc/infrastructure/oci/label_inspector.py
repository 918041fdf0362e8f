"""Local image label inspection using aiodocker."""

import logging

import aiodocker

from imgsrc.domain.resolution.port.label_inspector import LabelInspector

logger = logging.getLogger(__name__)


class DockerLabelInspector(LabelInspector):
    """Reads labels of images known to the local Docker daemon."""

    def __init__(self, docker: aiodocker.Docker):
        self._docker = docker

    async def label(self, image: str, key: str) -> str | None:
        try:
            inspect_data = await self._docker.images.inspect(image)
        except aiodocker.DockerError as e:
            # 404 for images that were never pulled, 900 when the daemon is unreachable
            logger.debug("Cannot inspect local image %s: %s", image, e.message)
            return None

        labels = (inspect_data.get("Config") or {}).get("Labels") or {}
        return labels.get(key) or None


class NullLabelInspector(LabelInspector):
    """Used when no container runtime is available: every label is absent."""

    async def label(self, image: str, key: str) -> str | None:
        return None
