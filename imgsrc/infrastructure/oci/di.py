import logging
from typing import AsyncIterable

import aiodocker
from dishka import provide

from imgsrc.domain.resolution.port.label_inspector import LabelInspector
from imgsrc.infrastructure.oci.label_inspector import DockerLabelInspector, NullLabelInspector
from imgsrc.util.di.base import Provider
from imgsrc.util.di.scope import Scope

logger = logging.getLogger(__name__)


class OciProvider(Provider):
    @provide(scope=Scope.APP)
    async def get_label_inspector(self) -> AsyncIterable[LabelInspector]:
        try:
            docker = aiodocker.Docker()
        except ValueError as e:
            # No DOCKER_HOST and no local socket: skip the local-label shortcut
            logger.debug("Docker is not available: %s", e)
            yield NullLabelInspector()
            return

        yield DockerLabelInspector(docker=docker)
        await docker.close()
