"""Pydantic settings model for UniFi client configuration."""

from __future__ import annotations

import os
from typing import Any, Dict, Literal, Optional, Tuple, Type

import httpx
import yaml
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from unifi_client import __version__

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_LEVEL_ALIASES = {"WARN": "WARNING"}


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Settings source reading the YAML file named by ``CONFIG_PATH``.

    The file is read once per settings instantiation. Keys that are not
    settings fields are ignored, and a ``unifi:`` top-level section is
    accepted as an alternative to top-level keys.
    """

    def __init__(self, settings_cls: Type[BaseSettings]) -> None:
        super().__init__(settings_cls)
        self._values = self._read(os.environ.get("CONFIG_PATH"))

    @staticmethod
    def _read(config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}
        try:
            with open(config_path) as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError):
            # loader.load_yaml_config reports these with a proper message
            return {}
        if not isinstance(data, dict):
            return {}
        section = data.get("unifi")
        return section if isinstance(section, dict) else data

    def get_field_value(self, field: Any, field_name: str) -> Tuple[Any, str, bool]:
        return self._values.get(field_name), field_name, False

    def __call__(self) -> Dict[str, Any]:
        return {
            name: self._values[name]
            for name in self.settings_cls.model_fields
            if self._values.get(name) is not None
        }


class UnifiSettings(BaseSettings):
    """UniFi client configuration settings.

    Configuration is loaded in the following precedence (highest to lowest):
    1. Constructor arguments
    2. Environment variables (UNIFI_ prefix)
    3. .env file
    4. YAML configuration file (via CONFIG_PATH)
    5. Default values

    Username and password are validated for emptiness at login time rather
    than here, so that the login procedure reports them before any network
    traffic regardless of how the settings were built.
    """

    model_config = SettingsConfigDict(
        env_prefix="UNIFI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Connection
    controller_url: str = Field(
        ...,
        description="Controller base URL, e.g. https://192.168.1.1 or https://unifi:8443",
    )
    username: str = Field(
        default="",
        description="Local controller account name; cloud SSO accounts cannot log in",
    )
    password: SecretStr = Field(
        default=SecretStr(""),
        description="Password of the local controller account",
    )

    site: str = Field(
        default="default",
        description="Short name of the site to operate on",
    )
    verify_ssl: bool = Field(
        default=True,
        description="Check the controller TLS certificate; disable for self-signed certificates",
    )

    # Timeouts and retries
    timeout: float = Field(
        default=30.0,
        description="Per-request timeout in seconds",
        gt=0,
    )
    probe_timeout: float = Field(
        default=5.0,
        description="Timeout for the controller kind probe in seconds",
        gt=0,
    )
    max_retries: int = Field(
        default=3,
        description="Connection attempts when building the client (1 disables retrying)",
        ge=1,
    )
    user_agent: str = Field(
        default=f"unifi-client/{__version__}",
        description="User-Agent header sent with every request",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Minimum level of emitted log lines",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="json for one object per line, text for the console renderer",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """Put the YAML file below constructor, environment and .env values.

        Docker-style secret directories are not used; ``UNIFI_*_FILE``
        variables are resolved by :func:`unifi_client.config.load_config`.
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
        )

    @field_validator("controller_url")
    @classmethod
    def validate_controller_url(cls, v: str) -> str:
        """Require an absolute http(s) URL with a host and nothing after the path."""
        candidate = v.strip()
        try:
            url = httpx.URL(candidate)
        except (httpx.InvalidURL, TypeError) as e:
            raise ValueError(f"Invalid controller URL: {v} ({e})") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise ValueError(f"Invalid controller URL: {v}")
        if url.query or url.fragment:
            raise ValueError(f"Invalid controller URL: {v} (query and fragment are not allowed)")
        return candidate

    @field_validator("site")
    @classmethod
    def validate_site(cls, v: str) -> str:
        """Validate site is not empty."""
        if not v or not v.strip():
            raise ValueError("Site cannot be empty")
        return v.strip()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Upper-case the level name, accepting WARN as an alias of WARNING."""
        level = LOG_LEVEL_ALIASES.get(v.strip().upper(), v.strip().upper())
        if level not in LOG_LEVELS:
            raise ValueError(f"Invalid log level '{v}'. Expected one of: {', '.join(LOG_LEVELS)}")
        return level
