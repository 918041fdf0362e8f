from imgsrc.domain.resolution.port.docker_hub import DockerHubClient
from imgsrc.domain.resolution.port.label_inspector import LabelInspector
from imgsrc.domain.resolution.port.registry import RegistryManifestClient
from imgsrc.domain.resolution.port.source_repository import SourceRepositoryClient

__all__ = [
    "DockerHubClient",
    "LabelInspector",
    "RegistryManifestClient",
    "SourceRepositoryClient",
]
