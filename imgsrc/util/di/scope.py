"""Custom Dishka scopes for imgsrc."""

from dishka import BaseScope, new_scope


class Scope(BaseScope):  # type: ignore[misc]  # BaseScope is designed to be subclassed
    """imgsrc dependency injection scopes.

    Hierarchy: APP -> UOW

    - APP: Process lifetime (config, HTTP and Docker clients, adapters)
    - UOW: One resolution
    """

    APP = new_scope("APP")
    UOW = new_scope("UOW")
