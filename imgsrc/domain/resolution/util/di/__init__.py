from imgsrc.domain.resolution.util.di.provider import ResolutionProvider

__all__ = ["ResolutionProvider"]
