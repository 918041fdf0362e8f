from dishka import AsyncContainer, from_context, make_async_container

from imgsrc.config import Config
from imgsrc.domain.resolution.util.di import ResolutionProvider
from imgsrc.infrastructure.http import HttpProvider
from imgsrc.infrastructure.oci import OciProvider
from imgsrc.util.di.base import Provider
from imgsrc.util.di.scope import Scope


class ConfigProvider(Provider):
    config = from_context(provides=Config, scope=Scope.APP)


def create_container(config: Config | None = None) -> AsyncContainer:
    if config is None:
        # Pydantic Settings populates from env vars at runtime
        config = Config()  # type: ignore[call-arg]

    return make_async_container(
        ConfigProvider(),
        HttpProvider(),
        OciProvider(),
        ResolutionProvider(),
        context={Config: config},
        scopes=Scope,  # type: ignore[arg-type]  # Custom scope class
    )
