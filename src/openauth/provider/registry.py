"""Provider table and the generic endpoint resolver.

Every supported provider type maps to a fixed pair of endpoint templates and,
for self-hostable providers, a default host. ``resolve`` combines a template
with a caller config into a ``ResolvedProvider``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any

from openauth.provider.config import (
    EndpointDescriptor,
    GitlabConfig,
    LinkedInConfig,
    MastodonConfig,
    Oauth2WrappedConfig,
    ResolvedProvider,
)

# Fields copied from a caller config into the resolved provider
_SHARED_FIELDS = tuple(f.name for f in fields(Oauth2WrappedConfig))


class UnknownProviderError(ValueError):
    """Raised when a provider type is not in the registry."""

    def __init__(self, provider_type: str):
        self.provider_type = provider_type
        super().__init__(
            f"Unknown provider type: {provider_type}. "
            f"Supported: {', '.join(repr(name) for name in PROVIDERS)}"
        )


@dataclass(frozen=True)
class ProviderTemplate:
    """Endpoint templates for one provider type.

    ``default_host`` is None for providers with fixed global endpoints; their
    templates contain no ``{host}`` placeholder.
    """

    type: str
    authorization: str
    token: str
    config_class: type[Oauth2WrappedConfig]
    default_host: str | None = None

    @property
    def self_hostable(self) -> bool:
        return self.default_host is not None

    def endpoint_for(self, host: str | None) -> EndpointDescriptor:
        if host is None:
            return EndpointDescriptor(authorization=self.authorization, token=self.token)
        return EndpointDescriptor(
            authorization=self.authorization.format(host=host),
            token=self.token.format(host=host),
        )


PROVIDERS: dict[str, ProviderTemplate] = {
    "gitlab": ProviderTemplate(
        type="gitlab",
        authorization="https://{host}/oauth/authorize",
        token="https://{host}/oauth/token",
        config_class=GitlabConfig,
        default_host="gitlab.com",
    ),
    "linkedin": ProviderTemplate(
        type="linkedin",
        authorization="https://www.linkedin.com/oauth/v2/authorization",
        token="https://www.linkedin.com/oauth/v2/accessToken",
        config_class=LinkedInConfig,
    ),
    "mastodon": ProviderTemplate(
        type="mastodon",
        authorization="https://{host}/oauth/authorize",
        token="https://{host}/oauth/token",
        config_class=MastodonConfig,
        default_host="mastodon.social",
    ),
}


def supported_providers() -> list[str]:
    return list(PROVIDERS)


def get_template(provider_type: str) -> ProviderTemplate:
    """Look up the template for a provider type (case-insensitive).

    Raises:
        UnknownProviderError: If the type is not registered
    """
    try:
        return PROVIDERS[provider_type.lower()]
    except KeyError:
        raise UnknownProviderError(provider_type) from None


def _resolve_host(template: ProviderTemplate, config: Oauth2WrappedConfig) -> str | None:
    if not template.self_hostable:
        return None
    # Presence check only: the hostname is used as given.
    instance = getattr(config, "instance", None)
    return instance if instance else template.default_host


def resolve_host(provider_type: str, config: Oauth2WrappedConfig) -> str | None:
    """Return the host a provider's endpoints will point at.

    Self-hostable providers use ``config.instance`` when it is non-empty and
    their default host otherwise. Providers with fixed endpoints return None.
    """
    return _resolve_host(get_template(provider_type), config)


def resolve(provider_type: str, config: Oauth2WrappedConfig) -> ResolvedProvider:
    """Resolve a caller config into a provider the OAuth2 engine can drive.

    The result carries the template's fixed ``type``, endpoints built from
    the resolved host, and every shared config field. ``instance`` is
    consumed here and not forwarded. Credentials are not inspected and the
    input config is never modified.

    Args:
        provider_type: One of the registered provider types
        config: Caller configuration

    Returns:
        A new ResolvedProvider

    Raises:
        UnknownProviderError: If provider_type is not registered
    """
    template = get_template(provider_type)
    host = _resolve_host(template, config)
    return ResolvedProvider(
        type=template.type,
        endpoint=template.endpoint_for(host),
        **{name: getattr(config, name) for name in _SHARED_FIELDS},
    )


def build_config(provider_type: str, values: Mapping[str, Any]) -> Oauth2WrappedConfig:
    """Build the typed config for a provider type from a plain mapping.

    Keys matching config fields are used directly, anything else is collected
    into ``extra``. ``instance`` is dropped for providers that are not
    self-hostable. A ``type`` key is ignored.

    Raises:
        UnknownProviderError: If provider_type is not registered
    """
    template = get_template(provider_type)
    known = {f.name for f in fields(template.config_class)}

    kwargs: dict[str, Any] = {}
    extra: dict[str, Any] = dict(values.get("extra") or {})
    for key, value in values.items():
        if key in ("type", "extra"):
            continue
        if key == "instance" and not template.self_hostable:
            continue
        if key in known:
            kwargs[key] = value
        else:
            extra[key] = value

    return template.config_class(**kwargs, extra=extra)
