"""Console output for the CLI.

Provides a Console class that wraps rich for consistent output. The resolved
URL goes to stdout; errors and hints go to stderr.
"""

from rich.console import Console as RichConsole


class Console:
    """CLI output manager wrapping rich."""

    def __init__(self, *, force_terminal: bool | None = None) -> None:
        """Initialize the console.

        Args:
            force_terminal: Force terminal mode (True/False) or auto-detect (None).
        """
        self._console = RichConsole(
            force_terminal=force_terminal,
            stderr=False,
            highlight=False,
        )
        self._err_console = RichConsole(
            force_terminal=force_terminal,
            stderr=True,
            highlight=False,
        )

    # -------------------------------------------------------------------------
    # Status messages
    # -------------------------------------------------------------------------

    def opening(self, backend: str, url: str) -> None:
        """Announce the URL about to be opened."""
        self._console.print(f"Opening {backend} → {url}", soft_wrap=True)

    def error(self, message: str, *, hint: str | None = None) -> None:
        """Print an error message to stderr."""
        self._err_console.print(f"[red]✗[/red] {message}")
        if hint:
            self._err_console.print(f"  [dim]{hint}[/dim]")

    def status(self, message: str):
        """Return a status context manager for long operations.

        Usage:
            with console.status("Resolving..."):
                do_something()
        """
        return self._err_console.status(message)


# Module-level default instance for convenience
_default: Console | None = None


def get_console() -> Console:
    """Get the default console instance."""
    global _default
    if _default is None:
        _default = Console()
    return _default
