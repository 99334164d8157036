"""Configuration types with environment variable support.

All settings can be configured via environment variables with the OPENAUTH_ prefix.
Example: OPENAUTH_HTTP_TIMEOUT=30 sets the token request timeout to 30 seconds.

Providers are registered from a YAML or TOML file:

    providers:
      gitlab:
        client_id: "1234567890"
        client_secret: "0987654321"
        instance: gitlab.mycompany.com
      fediverse:
        type: mastodon
        client_id: "abc"
        client_secret: "def"
        instance: hachyderm.io
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from openauth.provider.config import ResolvedProvider


def load_config_from_file(path: str | Path) -> dict[str, Any]:
    """Load configuration from a YAML or TOML file.

    Args:
        path: Path to the configuration file (.yaml, .yml, or .toml)

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If the config file has encoding errors, invalid syntax, or unsupported format
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ValueError(f"Config file encoding error in {path}: {e}") from e

    try:
        if path.suffix in (".yaml", ".yml"):
            return yaml.safe_load(content) or {}
        elif path.suffix == ".toml":
            return tomllib.loads(content)
        else:
            raise ValueError(f"Unsupported config format: {path.suffix}")
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in {path}: {e}") from e


class ProviderEntry(BaseModel):
    """One provider registration in a providers file.

    Unknown keys are allowed and forwarded to the engine as extra options.
    """

    # Numeric client IDs are common in unquoted YAML
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    type: str | None = Field(
        default=None,
        description="Provider type. Defaults to the registration name.",
    )
    client_id: str
    client_secret: str = Field(repr=False)
    instance: str | None = Field(
        default=None,
        description="Hostname of a self-hosted GitLab or Mastodon instance.",
    )
    scopes: list[str] = Field(default_factory=list)
    pkce: bool = False
    query: dict[str, str] = Field(default_factory=dict)

    def to_values(self) -> dict[str, Any]:
        # Extra keys are included in the dump
        return self.model_dump(exclude={"type"})


def load_providers(path: str | Path) -> dict[str, ResolvedProvider]:
    """Load and resolve every provider registered in a YAML or TOML file.

    Args:
        path: Providers file with a top-level ``providers`` table

    Returns:
        Mapping of registration name to resolved provider

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file or one of its entries is invalid
    """
    from openauth.provider.registry import build_config, resolve

    raw = load_config_from_file(path)
    if not isinstance(raw, dict):
        raise ValueError(f"No 'providers' table in {path}")
    entries = raw.get("providers")
    if not isinstance(entries, dict):
        raise ValueError(f"No 'providers' table in {path}")

    resolved: dict[str, ResolvedProvider] = {}
    for name, body in entries.items():
        if not isinstance(body, dict):
            raise ValueError(f"Provider '{name}' in {path} must be a table")
        try:
            entry = ProviderEntry.model_validate(body)
        except ValidationError as e:
            raise ValueError(f"Invalid provider '{name}' in {path}: {e}") from e

        provider_type = entry.type or name
        try:
            config = build_config(provider_type, entry.to_values())
        except ValueError as e:
            raise ValueError(f"Invalid provider '{name}' in {path}: {e}") from e
        resolved[name] = resolve(provider_type, config)
    return resolved


class OpenAuthSettings(BaseSettings):
    """Process-wide settings.

    All settings can be overridden via environment variables:
    - OPENAUTH_PROVIDERS_FILE: Default providers file for the CLI
    - OPENAUTH_LOG_LEVEL: debug, info, warning or error
    - OPENAUTH_HTTP_TIMEOUT: Token request timeout (seconds)
    """

    model_config = SettingsConfigDict(
        env_prefix="OPENAUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    providers_file: str | None = Field(
        default=None,
        description="Path to a YAML or TOML providers file.",
    )
    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="warning",
        description="Log level: debug, info, warning or error.",
    )
    http_timeout: float = Field(
        default=10.0,
        description="Timeout for token endpoint requests (seconds).",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _lowercase_log_level(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value


_config: OpenAuthSettings | None = None


def get_config() -> OpenAuthSettings:
    """Get the global settings instance.

    The instance is created once and cached for the lifetime of the process.
    To reload settings (e.g., in tests), call clear_config() first.
    """
    global _config
    if _config is None:
        _config = OpenAuthSettings()
    return _config


def clear_config() -> None:
    """Clear the cached settings so the environment is re-read."""
    global _config
    _config = None
