"""Tests for configuration loading and validation."""

import pytest
from pydantic import SecretStr, ValidationError

from unifi_client.config import (
    ConfigurationError,
    UnifiSettings,
    build_settings,
    format_validation_errors,
    load_config,
    load_yaml_config,
)


class TestUnifiSettings:
    """Tests for UnifiSettings validation."""

    def test_defaults(self):
        """Test default values for optional settings."""
        settings = UnifiSettings(controller_url="https://192.168.1.1")

        assert settings.username == ""
        assert settings.password.get_secret_value() == ""
        assert settings.site == "default"
        assert settings.verify_ssl is True
        assert settings.timeout == 30.0
        assert settings.probe_timeout == 5.0
        assert settings.max_retries == 3
        assert settings.user_agent.startswith("unifi-client/")
        assert settings.log_level == "INFO"
        assert settings.log_format == "text"

    @pytest.mark.parametrize(
        "url",
        [
            "https://192.168.1.1",
            "https://unifi:8443",
            "http://controller.local/",
            "https://unifi.example.com/network/",
        ],
    )
    def test_valid_controller_urls(self, url):
        """Test absolute http(s) URLs are accepted."""
        assert UnifiSettings(controller_url=url).controller_url == url

    @pytest.mark.parametrize(
        "url",
        [
            "invalid-url",
            "ftp://unifi.example.com",
            "https://",
            "/relative/path",
            "https://unifi.example.com/?x=1",
            "https://unifi.example.com/#top",
        ],
    )
    def test_invalid_controller_urls(self, url):
        """Test URLs without scheme or host, or with a query or fragment, are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            UnifiSettings(controller_url=url)
        assert "Invalid controller URL" in str(exc_info.value)

    def test_password_is_secret(self):
        """Test the password is a SecretStr and masked in repr."""
        settings = UnifiSettings(controller_url="https://unifi", password="hunter2")

        assert isinstance(settings.password, SecretStr)
        assert settings.password.get_secret_value() == "hunter2"
        assert "hunter2" not in repr(settings)

    @pytest.mark.parametrize(
        "raw, expected",
        [("debug", "DEBUG"), ("Info", "INFO"), ("warn", "WARNING"), ("ERROR", "ERROR")],
    )
    def test_log_level_normalized(self, raw, expected):
        """Test log levels are case-insensitive and WARN maps to WARNING."""
        assert UnifiSettings(controller_url="https://unifi", log_level=raw).log_level == expected

    def test_invalid_log_level(self):
        """Test unknown log levels are rejected."""
        with pytest.raises(ValidationError):
            UnifiSettings(controller_url="https://unifi", log_level="LOUD")

    def test_blank_site_rejected(self):
        """Test an empty site is rejected."""
        with pytest.raises(ValidationError):
            UnifiSettings(controller_url="https://unifi", site="  ")

    def test_max_retries_lower_bound(self):
        """Test at least one connection attempt is required."""
        with pytest.raises(ValidationError):
            UnifiSettings(controller_url="https://unifi", max_retries=0)

    def test_environment_variables(self, monkeypatch):
        """Test UNIFI_ environment variables populate settings."""
        monkeypatch.setenv("UNIFI_CONTROLLER_URL", "https://10.0.0.1")
        monkeypatch.setenv("UNIFI_USERNAME", "admin")
        monkeypatch.setenv("UNIFI_PASSWORD", "from-env")
        monkeypatch.setenv("UNIFI_VERIFY_SSL", "false")
        monkeypatch.setenv("UNIFI_SITE", "branch")

        settings = UnifiSettings()

        assert settings.controller_url == "https://10.0.0.1"
        assert settings.username == "admin"
        assert settings.password.get_secret_value() == "from-env"
        assert settings.verify_ssl is False
        assert settings.site == "branch"

    def test_constructor_overrides_environment(self, monkeypatch):
        """Test constructor arguments win over environment variables."""
        monkeypatch.setenv("UNIFI_CONTROLLER_URL", "https://10.0.0.1")

        settings = UnifiSettings(controller_url="https://10.0.0.2")

        assert settings.controller_url == "https://10.0.0.2"


class TestLoadConfig:
    """Tests for load_config() and YAML handling."""

    def test_yaml_file(self, tmp_path):
        """Test settings are read from a YAML file."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "controller_url: https://yaml.example.com\n"
            "username: yaml-user\n"
            "password: yaml-pass\n"
            "site: lab\n"
            "log_format: json\n"
        )

        settings = load_config(str(config_file))

        assert settings.controller_url == "https://yaml.example.com"
        assert settings.username == "yaml-user"
        assert settings.password.get_secret_value() == "yaml-pass"
        assert settings.site == "lab"
        assert settings.log_format == "json"

    def test_yaml_unifi_section(self, tmp_path):
        """Test settings nested under a unifi: section are read, unknown keys ignored."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "unifi:\n"
            "  controller_url: https://section.example.com\n"
            "  verify_ssl: false\n"
            "  not_a_setting: 1\n"
        )

        settings = load_config(str(config_file))

        assert settings.controller_url == "https://section.example.com"
        assert settings.verify_ssl is False

    def test_environment_overrides_yaml(self, tmp_path, monkeypatch):
        """Test environment variables take precedence over YAML values."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("controller_url: https://yaml.example.com\nsite: lab\n")
        monkeypatch.setenv("UNIFI_SITE", "from-env")

        settings = load_config(str(config_file))

        assert settings.site == "from-env"
        assert settings.controller_url == "https://yaml.example.com"

    def test_keyword_overrides_win(self, tmp_path):
        """Test keyword overrides beat YAML values."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("controller_url: https://yaml.example.com\nsite: lab\n")

        settings = load_config(str(config_file), site="override")

        assert settings.site == "override"

    def test_password_file_secret(self, tmp_path, monkeypatch):
        """Test UNIFI_PASSWORD_FILE supplies the password."""
        secret = tmp_path / "unifi_password"
        secret.write_text("from-secret-file\n")
        monkeypatch.setenv("UNIFI_PASSWORD_FILE", str(secret))
        monkeypatch.setenv("UNIFI_CONTROLLER_URL", "https://unifi")

        settings = load_config()

        assert settings.password.get_secret_value() == "from-secret-file"

    def test_missing_yaml_file(self, tmp_path):
        """Test a missing config file is a ConfigurationError with a hint."""
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(str(tmp_path / "missing.yaml"))

        assert "Configuration file not found" in exc_info.value.message
        assert exc_info.value.hint is not None

    def test_invalid_yaml(self, tmp_path):
        """Test malformed YAML is reported."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("controller_url: [unclosed\n")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_yaml_config(str(config_file))

    def test_missing_controller_url(self):
        """Test a missing required field names the environment variable to set."""
        with pytest.raises(ConfigurationError) as exc_info:
            load_config()

        assert "'controller_url' is required" in exc_info.value.message
        assert "UNIFI_CONTROLLER_URL" in exc_info.value.message


class TestBuildSettings:
    """Tests for build_settings() and error formatting."""

    def test_invalid_url_message(self):
        """Test validator prefixes are stripped from messages."""
        with pytest.raises(ConfigurationError) as exc_info:
            build_settings(controller_url="invalid-url")

        message = exc_info.value.message
        assert "Invalid controller URL: invalid-url" in message
        assert "Value error, " not in message

    def test_password_not_echoed(self):
        """Test an invalid password value never appears in the error."""
        errors = [
            {
                "type": "string_type",
                "loc": ("password",),
                "msg": "Input should be a valid string",
                "input": "hunter2",
            }
        ]

        messages = format_validation_errors(errors)

        assert messages == ["Configuration error: 'password' Input should be a valid string"]

    def test_input_included_for_other_fields(self):
        """Test the offending value is shown for non-secret fields."""
        errors = [
            {
                "type": "int_parsing",
                "loc": ("timeout",),
                "msg": "Input should be a valid number",
                "input": "soon",
            }
        ]

        messages = format_validation_errors(errors)

        assert messages == [
            "Configuration error: 'timeout' Input should be a valid number, got: soon"
        ]
