"""Provider configuration types.

Caller-facing configs carry client credentials plus the options the shared
OAuth2 engine understands. Self-hostable providers (GitLab, Mastodon) add an
``instance`` hostname that is consumed during resolution and never forwarded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Oauth2WrappedConfig:
    """Options shared by every OAuth2-based provider.

    Everything except the credentials is passed through to the engine
    untouched. ``extra`` holds engine options that have no dedicated field.
    """

    client_id: str
    client_secret: str = field(repr=False)
    # Scopes to request
    scopes: list[str] = field(default_factory=list)
    # Send a PKCE (S256) challenge with the authorization request
    pkce: bool = False
    # Extra query parameters appended to the authorization URL
    query: dict[str, str] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class GitlabConfig(Oauth2WrappedConfig):
    """GitLab provider configuration.

    ``instance`` is the hostname of a self-hosted GitLab, e.g.
    ``gitlab.mycompany.com``. Defaults to ``gitlab.com``.
    """

    instance: str | None = None


@dataclass
class LinkedInConfig(Oauth2WrappedConfig):
    """LinkedIn provider configuration."""


@dataclass
class MastodonConfig(Oauth2WrappedConfig):
    """Mastodon provider configuration.

    ``instance`` is the hostname of the Mastodon server, e.g. ``hachyderm.io``.
    Defaults to ``mastodon.social``.
    """

    instance: str | None = None


@dataclass(frozen=True)
class EndpointDescriptor:
    """OAuth2 authorization and token endpoint URLs."""

    authorization: str
    token: str


@dataclass(frozen=True)
class ResolvedProvider:
    """A provider ready to be driven by the OAuth2 engine.

    Built by the resolver from a caller config: a fixed ``type``, the resolved
    ``endpoint`` and every shared config field. There is no ``instance``.
    """

    type: str
    endpoint: EndpointDescriptor
    client_id: str
    client_secret: str = field(repr=False)
    scopes: list[str] = field(default_factory=list)
    pkce: bool = False
    query: dict[str, str] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    def as_dict(self, include_secret: bool = False) -> dict[str, Any]:
        """Render as a plain dictionary for display or serialization."""
        return {
            "type": self.type,
            "endpoint": {
                "authorization": self.endpoint.authorization,
                "token": self.endpoint.token,
            },
            "client_id": self.client_id,
            "client_secret": self.client_secret if include_secret else "********",
            "scopes": list(self.scopes),
            "pkce": self.pkce,
            "query": dict(self.query),
            "extra": dict(self.extra),
        }
