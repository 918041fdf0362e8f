"""Hand a URL to the desktop's default browser."""

import logging
import webbrowser

logger = logging.getLogger(__name__)


class BrowserError(Exception):
    """Raised when no browser could be launched."""


def open_url(url: str) -> None:
    try:
        opened = webbrowser.open(url)
    except webbrowser.Error as e:
        raise BrowserError(f"Failed to open URL: {e}") from e
    if not opened:
        raise BrowserError("Failed to open URL: no usable browser found")
    logger.debug("Opened %s", url)
