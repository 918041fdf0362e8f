from imgsrc.util.di.base import Provider
from imgsrc.util.di.scope import Scope

__all__ = ["Provider", "Scope"]
