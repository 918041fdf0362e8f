"""Main CLI application using Cyclopts.

The CLI is a thin shell around ResolutionService: it reads configuration,
builds the DI container, resolves one image reference and opens the result.
"""

import asyncio
import sys

import cyclopts
import logfire

from imgsrc.application.di import create_container
from imgsrc.cli.console import get_console
from imgsrc.cli.util import BrowserError, open_url
from imgsrc.config import Config, configure_logging, load_config
from imgsrc.domain.resolution.model.value import RegistryCredentials, Resolution
from imgsrc.domain.resolution.service.resolution import ResolutionService
from imgsrc.domain.shared.error import (
    ConfigurationError,
    ImgsrcError,
    IncompleteReferenceError,
    InvalidReferenceError,
    RepositoryNotFoundError,
    UnsupportedReferenceError,
)

app = cyclopts.App(
    name="imgsrc",
    help="Jump from a container image reference to its Dockerfile or registry page.",
)

_HINTS: dict[type[ImgsrcError], str] = {
    ConfigurationError: "Check the IMGSRC_* environment variables and IMGSRC_CONFIG_FILE",
    InvalidReferenceError: "Expected [registry/][namespace/]repository[:tag|@digest]",
    UnsupportedReferenceError: "At most registry/namespace/repository is supported",
    IncompleteReferenceError: "Add the repository name, e.g. ghcr.io/owner/repo",
    RepositoryNotFoundError: "Check the spelling, or pull the image so its labels can be read",
}


async def resolve_image(
    image: str, credentials: RegistryCredentials, config: Config
) -> Resolution:
    """Resolve ``image`` using a freshly built container."""
    container = create_container(config)
    try:
        async with container() as uow:
            service = await uow.get(ResolutionService)
            return await service.resolve(image, credentials)
    finally:
        await container.close()


def _credentials(config: Config, user: str | None, token: str | None) -> RegistryCredentials:
    credentials = config.registry.credentials()
    if user is None and token is None:
        return credentials
    return RegistryCredentials(
        user=user if user is not None else credentials.user,
        token=token if token is not None else credentials.token,
    )


def _configure_telemetry() -> None:
    logfire.configure(send_to_logfire="if-token-present", console=False)
    logfire.instrument_httpx()


@app.default
def jump(
    image: str = "",
    /,
    *,
    user: str | None = None,
    token: str | None = None,
    browser: bool = True,
    verbose: bool = False,
) -> None:
    """Resolve an image reference and open it in the browser.

    Args:
        image: Image reference, e.g. nginx, acme/widget:1.2, ghcr.io/acme/widget
        user: Registry user for the token exchange (default: IMGSRC_REGISTRY__USER)
        token: Registry token for the token exchange (default: IMGSRC_REGISTRY__TOKEN)
        browser: Open the resolved URL in the default browser
        verbose: Log every probe to stderr
    """
    console = get_console()

    if not image.strip():
        app.help_print()
        sys.exit(1)

    try:
        config = load_config()
    except ConfigurationError as e:
        console.error(e.message, hint=_HINTS.get(type(e)))
        sys.exit(1)

    if verbose:
        config.logging.level = "DEBUG"
    configure_logging(config.logging)
    _configure_telemetry()

    try:
        with console.status(f"Resolving {image}..."):
            resolution = asyncio.run(
                resolve_image(image, _credentials(config, user, token), config)
            )
    except ImgsrcError as e:
        console.error(e.message, hint=_HINTS.get(type(e)))
        sys.exit(1)

    console.opening(resolution.target.display_name, resolution.url)

    if browser and config.open_browser:
        try:
            open_url(resolution.url)
        except BrowserError as e:
            console.error(str(e))
            sys.exit(1)
