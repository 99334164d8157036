"""Tests for settings and providers file loading."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from pydantic import ValidationError

from openauth.core.config import (
    OpenAuthSettings,
    clear_config,
    get_config,
    load_config_from_file,
    load_providers,
)

PROVIDERS_YAML = """\
providers:
  gitlab:
    client_id: "gl-id"
    client_secret: "gl-secret"
    instance: gitlab.mycompany.com
    scopes: [read_user]
  linkedin:
    client_id: "li-id"
    client_secret: "li-secret"
    pkce: true
  fediverse:
    type: mastodon
    client_id: "md-id"
    client_secret: "md-secret"
    audience: api
"""

PROVIDERS_TOML = """\
[providers.mastodon]
client_id = "md-id"
client_secret = "md-secret"
instance = "hachyderm.io"
query = { force_login = "true" }
"""


class TestOpenAuthSettings:
    """Test OpenAuthSettings."""

    def test_default_values(self) -> None:
        """Test default values."""
        config = OpenAuthSettings()
        assert config.providers_file is None
        assert config.log_level == "warning"
        assert config.http_timeout == 10.0

    def test_env_override_http_timeout(self) -> None:
        """Test OPENAUTH_HTTP_TIMEOUT env var."""
        with patch.dict(os.environ, {"OPENAUTH_HTTP_TIMEOUT": "30"}):
            config = OpenAuthSettings()
            assert config.http_timeout == 30.0

    def test_env_override_providers_file(self) -> None:
        """Test OPENAUTH_PROVIDERS_FILE env var."""
        with patch.dict(os.environ, {"OPENAUTH_PROVIDERS_FILE": "/etc/openauth/providers.yaml"}):
            config = OpenAuthSettings()
            assert config.providers_file == "/etc/openauth/providers.yaml"


class TestGetConfig:
    """Test the cached settings accessor."""

    def test_cached_instance(self) -> None:
        """Test get_config returns the same instance."""
        clear_config()
        assert get_config() is get_config()

    def test_clear_config_reloads_env(self) -> None:
        """Test clear_config picks up environment changes."""
        clear_config()
        with patch.dict(os.environ, {"OPENAUTH_LOG_LEVEL": "debug"}):
            clear_config()
            assert get_config().log_level == "debug"
        clear_config()
        assert get_config().log_level == "warning"


class TestLoadConfigFromFile:
    """Test raw file loading."""

    def test_missing_file(self, tmp_path) -> None:
        """Test a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config_from_file(tmp_path / "missing.yaml")

    def test_unsupported_format(self, tmp_path) -> None:
        """Test unsupported extensions are rejected."""
        path = tmp_path / "providers.json"
        path.write_text("{}")
        with pytest.raises(ValueError, match="Unsupported config format"):
            load_config_from_file(path)

    def test_invalid_yaml(self, tmp_path) -> None:
        """Test YAML syntax errors are reported as ValueError."""
        path = tmp_path / "providers.yaml"
        path.write_text("providers: [unclosed")
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_config_from_file(path)

    def test_empty_yaml(self, tmp_path) -> None:
        """Test an empty YAML file loads as an empty dict."""
        path = tmp_path / "providers.yaml"
        path.write_text("")
        assert load_config_from_file(path) == {}


class TestLoadProviders:
    """Test resolving providers from a file."""

    def test_yaml_providers(self, tmp_path) -> None:
        """Test every YAML entry is resolved."""
        path = tmp_path / "providers.yaml"
        path.write_text(PROVIDERS_YAML)

        providers = load_providers(path)

        assert list(providers) == ["gitlab", "linkedin", "fediverse"]
        gitlab = providers["gitlab"]
        assert gitlab.type == "gitlab"
        assert gitlab.endpoint.authorization == "https://gitlab.mycompany.com/oauth/authorize"
        assert gitlab.scopes == ["read_user"]

        linkedin = providers["linkedin"]
        assert linkedin.endpoint.token == "https://www.linkedin.com/oauth/v2/accessToken"
        assert linkedin.pkce is True

        fediverse = providers["fediverse"]
        assert fediverse.type == "mastodon"
        assert fediverse.endpoint.token == "https://mastodon.social/oauth/token"
        assert fediverse.extra == {"audience": "api"}

    def test_toml_providers(self, tmp_path) -> None:
        """Test TOML providers files."""
        path = tmp_path / "providers.toml"
        path.write_text(PROVIDERS_TOML)

        providers = load_providers(path)

        mastodon = providers["mastodon"]
        assert mastodon.endpoint.authorization == "https://hachyderm.io/oauth/authorize"
        assert mastodon.query == {"force_login": "true"}

    def test_missing_providers_table(self, tmp_path) -> None:
        """Test a file without a providers table is rejected."""
        path = tmp_path / "providers.yaml"
        path.write_text("other: 1\n")
        with pytest.raises(ValueError, match="No 'providers' table"):
            load_providers(path)

    def test_missing_client_secret(self, tmp_path) -> None:
        """Test schema errors name the entry."""
        path = tmp_path / "providers.yaml"
        path.write_text("providers:\n  gitlab:\n    client_id: abc\n")
        with pytest.raises(ValueError, match="Invalid provider 'gitlab'"):
            load_providers(path)

    def test_unknown_type(self, tmp_path) -> None:
        """Test entries of an unknown type are rejected."""
        path = tmp_path / "providers.yaml"
        path.write_text("providers:\n  github:\n    client_id: a\n    client_secret: b\n")
        with pytest.raises(ValueError, match="Unknown provider type: github"):
            load_providers(path)

    def test_entry_must_be_table(self, tmp_path) -> None:
        """Test scalar entries are rejected."""
        path = tmp_path / "providers.yaml"
        path.write_text("providers:\n  gitlab: yes\n")
        with pytest.raises(ValueError, match="must be a table"):
            load_providers(path)

    def test_list_root(self, tmp_path) -> None:
        """Test a YAML file whose root is a list is rejected as a ValueError."""
        path = tmp_path / "providers.yaml"
        path.write_text("- gitlab\n- mastodon\n")
        with pytest.raises(ValueError, match="No 'providers' table"):
            load_providers(path)

    def test_scalar_root(self, tmp_path) -> None:
        """Test a YAML file whose root is a scalar is rejected as a ValueError."""
        path = tmp_path / "providers.yaml"
        path.write_text("gitlab\n")
        with pytest.raises(ValueError, match="No 'providers' table"):
            load_providers(path)

    def test_numeric_client_id(self, tmp_path) -> None:
        """Test unquoted numeric client IDs are read as strings."""
        path = tmp_path / "providers.yaml"
        path.write_text("providers:\n  linkedin:\n    client_id: 1234567890\n    client_secret: abc\n")

        providers = load_providers(path)

        assert providers["linkedin"].client_id == "1234567890"


class TestLogLevelSetting:
    """Test OPENAUTH_LOG_LEVEL validation."""

    def test_invalid_log_level(self) -> None:
        """Test an unknown level is a settings validation error."""
        with patch.dict(os.environ, {"OPENAUTH_LOG_LEVEL": "verbose"}):
            with pytest.raises(ValidationError):
                OpenAuthSettings()

    def test_uppercase_log_level(self) -> None:
        """Test level names are case-insensitive."""
        with patch.dict(os.environ, {"OPENAUTH_LOG_LEVEL": "DEBUG"}):
            assert OpenAuthSettings().log_level == "debug"
