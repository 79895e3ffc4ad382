"""Configuration management for the UniFi client."""

from unifi_client.config.loader import (
    build_settings,
    format_validation_errors,
    load_config,
    load_yaml_config,
    resolve_file_secrets,
)
from unifi_client.config.settings import UnifiSettings
from unifi_client.exceptions import ConfigurationError

__all__ = [
    "ConfigurationError",
    "UnifiSettings",
    "build_settings",
    "format_validation_errors",
    "load_config",
    "load_yaml_config",
    "resolve_file_secrets",
]
