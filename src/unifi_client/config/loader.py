"""Turn YAML files, environment variables and Docker secrets into settings.

The pydantic-settings sources in :mod:`unifi_client.config.settings` do the
actual merging. This module adds the pieces around them: reading ``*_FILE``
secrets, failing early on unreadable YAML, and rewording validation errors
for humans.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import structlog
import yaml
from pydantic import ValidationError

from unifi_client.config.settings import UnifiSettings
from unifi_client.exceptions import ConfigurationError

logger = structlog.get_logger(__name__)

ENV_PREFIX = "UNIFI_"
SECRET_SUFFIX = "_FILE"
_VALUE_ERROR_PREFIX = "Value error, "


def _read_secret(env_var: str, location: str) -> Optional[str]:
    path = Path(location)
    if not path.exists():
        # Let validation report the field as missing
        logger.warning("secret_file_not_found", env_var=env_var, path=location)
        return None
    try:
        return path.read_text().strip()
    except PermissionError as e:
        raise ConfigurationError(
            f"Cannot read secret file '{location}' named by {env_var}: permission denied"
        ) from e
    except OSError as e:
        raise ConfigurationError(
            f"Error reading secret file '{location}' named by {env_var}: {e}"
        ) from e


def resolve_file_secrets() -> Dict[str, str]:
    """Read the files named by ``UNIFI_*_FILE`` variables.

    ``UNIFI_PASSWORD_FILE=/run/secrets/unifi_password`` yields
    ``{"PASSWORD": "<file contents>"}``. Files that do not exist are skipped
    with a warning.
    """
    resolved: Dict[str, str] = {}
    for env_var, location in os.environ.items():
        if not (env_var.startswith(ENV_PREFIX) and env_var.endswith(SECRET_SUFFIX)):
            continue
        value = _read_secret(env_var, location)
        if value is not None:
            resolved[env_var[len(ENV_PREFIX) : -len(SECRET_SUFFIX)]] = value
    return resolved


def load_yaml_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Parse the YAML config file, if there is one.

    Args:
        config_path: File to read. Falls back to the ``CONFIG_PATH`` variable.

    Returns:
        The top-level mapping, or an empty dict when no file is configured or
        the document is not a mapping.

    Raises:
        ConfigurationError: The file is missing, unreadable or not valid YAML.
    """
    location = config_path or os.environ.get("CONFIG_PATH")
    if not location:
        return {}

    try:
        text = Path(location).read_text()
    except FileNotFoundError as e:
        raise ConfigurationError(
            f"Configuration file not found: {location}",
            hint="Point CONFIG_PATH (or --config) at an existing YAML file, or unset it "
            "to configure through environment variables alone.",
        ) from e
    except PermissionError as e:
        raise ConfigurationError(
            f"Cannot read configuration file {location}: permission denied"
        ) from e

    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file {location}: {e}") from e
    return document if isinstance(document, dict) else {}


def _describe(error: Dict[str, Any]) -> str:
    field = ".".join(str(part) for part in error.get("loc", ()))
    if error.get("type") == "missing":
        return (
            f"Configuration error: '{field}' is required. "
            f"Set {ENV_PREFIX}{field.upper()} or add '{field}:' to the config file."
        )

    reason = error.get("msg", "Invalid value")
    if reason.startswith(_VALUE_ERROR_PREFIX):
        reason = reason[len(_VALUE_ERROR_PREFIX) :]
    bad_value = error.get("input")
    # Never echo the password back
    if field == "password" or bad_value is None or isinstance(bad_value, dict):
        return f"Configuration error: '{field}' {reason}"
    return f"Configuration error: '{field}' {reason}, got: {bad_value}"


def format_validation_errors(errors: List[Dict[str, Any]]) -> List[str]:
    """Reword pydantic validation errors as one line per problem."""
    return [_describe(error) for error in errors]


def build_settings(**overrides: Any) -> UnifiSettings:
    """Build settings from keyword arguments plus the usual sources.

    Args:
        **overrides: Field values that take precedence over env and YAML.

    Returns:
        Validated UnifiSettings instance.

    Raises:
        ConfigurationError: Validation failed. The message lists every problem.
    """
    try:
        return UnifiSettings(**overrides)
    except ValidationError as e:
        raise ConfigurationError("\n".join(format_validation_errors(e.errors()))) from e


def load_config(config_path: Optional[str] = None, **overrides: Any) -> UnifiSettings:
    """Load and validate configuration.

    Configuration is loaded with the following precedence:
    1. Keyword overrides
    2. Environment variables
    3. Docker secrets (_FILE pattern)
    4. YAML configuration file
    5. Default values

    Args:
        config_path: Optional path to YAML config file (sets CONFIG_PATH env).
        **overrides: Field values that take precedence over every other source.

    Returns:
        Validated UnifiSettings instance.

    Raises:
        ConfigurationError: Configuration file cannot be read or validation failed.
    """
    if config_path:
        os.environ["CONFIG_PATH"] = config_path

    # Parsed here only to surface file errors; the settings source merges it
    load_yaml_config()

    for name, value in resolve_file_secrets().items():
        os.environ.setdefault(f"{ENV_PREFIX}{name}", value)

    return build_settings(**overrides)
