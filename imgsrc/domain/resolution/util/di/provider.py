from dishka import provide

from imgsrc.domain.resolution.service.resolution import ResolutionService
from imgsrc.util.di.base import Provider
from imgsrc.util.di.scope import Scope


class ResolutionProvider(Provider):
    service = provide(ResolutionService, scope=Scope.UOW)
