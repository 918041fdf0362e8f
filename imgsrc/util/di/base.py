from dishka import Provider as DishkaProvider

from imgsrc.util.di.scope import Scope


class Provider(DishkaProvider):
    """Base for all imgsrc DI providers. Unscoped factories live for the app."""

    scope = Scope.APP
