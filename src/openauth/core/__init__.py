"""Core."""

from .config import (
    OpenAuthSettings,
    ProviderEntry,
    clear_config,
    get_config,
    load_config_from_file,
    load_providers,
)

__all__ = [
    "OpenAuthSettings",
    "ProviderEntry",
    "clear_config",
    "get_config",
    "load_config_from_file",
    "load_providers",
]
