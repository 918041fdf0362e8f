"""Error hierarchy for imgsrc.

Error layers:
- ImgsrcError: Base class for all imgsrc errors
- DomainError: Reference and resolution failures that end a run (shown to the user)
- InfrastructureError: Network, daemon and configuration failures

Only ResolutionError subclasses escape ResolutionService.resolve(). Adapters raise
ExternalServiceError, which the service downgrades to "not found".
"""


class ImgsrcError(Exception):
    """Base class for all imgsrc errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)


# =============================================================================
# Domain Errors
# =============================================================================


class DomainError(ImgsrcError):
    """Base class for domain errors."""


class NotFoundError(DomainError):
    """Resource not found."""


class ManifestNotFoundError(NotFoundError):
    """The registry has no manifest for the requested tag or digest."""


class ResolutionError(DomainError):
    """A reference could not be resolved to any URL."""


class InvalidReferenceError(ResolutionError):
    """The reference is empty or has empty path segments."""

    def __init__(self, message: str, reference: str | None = None) -> None:
        super().__init__(message, code="invalid_reference")
        self.reference = reference


class UnsupportedReferenceError(ResolutionError):
    """The reference has more path segments than registry/namespace/repository."""

    def __init__(self, message: str, reference: str | None = None) -> None:
        super().__init__(message, code="unsupported_reference")
        self.reference = reference


class IncompleteReferenceError(ResolutionError):
    """A registry host followed by a namespace but no repository."""


class RepositoryNotFoundError(ResolutionError):
    """Every backend was tried and none knows the repository."""


# =============================================================================
# Infrastructure Errors
# =============================================================================


class InfrastructureError(ImgsrcError):
    """Base class for infrastructure/system errors."""


class ExternalServiceError(InfrastructureError):
    """External service (GitHub, Docker Hub, registry, Docker daemon) failed."""


class ConfigurationError(InfrastructureError):
    """System misconfiguration detected."""
