from imgsrc.cli.util.browser import BrowserError, open_url

__all__ = ["BrowserError", "open_url"]
