import logging
import os
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml
from pydantic import BaseModel, SecretStr, ValidationError
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    SettingsError,
)

from imgsrc.domain.resolution.model.value import RegistryCredentials
from imgsrc.domain.shared.error import ConfigurationError


# =============================================================================
# Backend Configuration
# =============================================================================


class GitHubConfig(BaseModel):
    """Source host (nested in Config, uses env_nested_delimiter)."""

    api_url: str = "https://api.github.com"
    web_url: str = "https://github.com"
    token: SecretStr | None = None  # Optional: raises the API rate limit
    user_agent: str = "imgsrc"


class DockerHubConfig(BaseModel):
    api_url: str = "https://hub.docker.com/v2"
    web_url: str = "https://hub.docker.com"


class RegistryConfig(BaseModel):
    """OCI registry used to map image tags back to source revisions."""

    url: str = "https://ghcr.io"
    user: str = ""
    token: SecretStr = SecretStr("")

    @property
    def host(self) -> str:
        return httpx.URL(self.url).host

    def credentials(self) -> RegistryCredentials:
        return RegistryCredentials(user=self.user, token=self.token)


class HttpConfig(BaseModel):
    connect_timeout: float = 5.0
    read_timeout: float = 10.0

    def timeout(self) -> httpx.Timeout:
        return httpx.Timeout(
            connect=self.connect_timeout,
            read=self.read_timeout,
            write=self.connect_timeout,
            pool=self.connect_timeout,
        )


class LoggingConfig(BaseModel):
    """Logging configuration (nested in Config, uses env_nested_delimiter)."""

    level: str = "WARNING"  # Root log level; --verbose switches to DEBUG
    format: str = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    file: str | None = None


# =============================================================================
# Application Configuration
# =============================================================================


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Load settings from YAML file specified by IMGSRC_CONFIG_FILE env var."""

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Get the value for a field from the YAML config."""
        yaml_data = self._load_yaml_config()
        field_value = yaml_data.get(field_name)
        return field_value, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return all settings from YAML file."""
        return self._load_yaml_config()

    def _load_yaml_config(self) -> dict[str, Any]:
        """Load config from YAML file if specified."""
        config_file = os.environ.get("IMGSRC_CONFIG_FILE")
        if config_file:
            path = Path(config_file).expanduser()
            if path.exists():
                return yaml.safe_load(path.read_text()) or {}
        return {}


class Config(BaseSettings):
    github: GitHubConfig = GitHubConfig()
    docker_hub: DockerHubConfig = DockerHubConfig()
    registry: RegistryConfig = RegistryConfig()
    http: HttpConfig = HttpConfig()
    logging: LoggingConfig = LoggingConfig()
    open_browser: bool = True

    model_config = SettingsConfigDict(
        env_prefix="IMGSRC_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",  # Allows IMGSRC_REGISTRY__TOKEN override
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to include YAML config.

        Priority (highest to lowest):
        1. init_settings - values passed to Config()
        2. env_settings - environment variables
        3. dotenv_settings - .env file
        4. yaml_settings - IMGSRC_CONFIG_FILE yaml
        5. file_secret_settings - secrets from files
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def load_config() -> Config:
    """Build Config from env, .env and YAML; invalid values raise ConfigurationError."""
    try:
        return Config()  # type: ignore[call-arg]
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise ConfigurationError(
            f"Invalid configuration: {fields}", code="invalid_configuration"
        ) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Invalid YAML in IMGSRC_CONFIG_FILE: {e}", code="invalid_configuration"
        ) from e
    except SettingsError as e:
        raise ConfigurationError(
            f"Invalid configuration: {e}", code="invalid_configuration"
        ) from e


def configure_logging(config: LoggingConfig) -> None:
    """Configure Python logging based on config.

    Called once by the CLI before the DI container is built.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(config.level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(config.format, datefmt=config.date_format)

    handler: logging.Handler
    if config.file:
        log_path = Path(config.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path)
    else:
        # stdout carries the resolved URL, keep logs on stderr
        handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(config.level)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("aiodocker").setLevel(logging.WARNING)

    logging.debug("Logging configured: level=%s, file=%s", config.level, config.file)
