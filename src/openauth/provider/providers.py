"""Pre-configured provider factories.

Each factory resolves a typed config against the provider table and hands
the result to the shared OAuth2 engine.

    from openauth.provider import GitlabConfig, gitlab_provider

    gitlab = gitlab_provider(
        GitlabConfig(
            client_id="1234567890",
            client_secret="0987654321",
            instance="gitlab.mycompany.com",
        )
    )
"""

from __future__ import annotations

from typing import Any

from openauth.provider.config import GitlabConfig, LinkedInConfig, MastodonConfig
from openauth.provider.oauth2 import Oauth2Provider
from openauth.provider.registry import build_config, resolve


def gitlab_provider(config: GitlabConfig) -> Oauth2Provider:
    """Create a GitLab OAuth2 provider (gitlab.com unless ``instance`` is set)."""
    return Oauth2Provider(resolve("gitlab", config))


def linkedin_provider(config: LinkedInConfig) -> Oauth2Provider:
    """Create a LinkedIn OAuth2 provider."""
    return Oauth2Provider(resolve("linkedin", config))


def mastodon_provider(config: MastodonConfig) -> Oauth2Provider:
    """Create a Mastodon OAuth2 provider (mastodon.social unless ``instance`` is set)."""
    return Oauth2Provider(resolve("mastodon", config))


def create_provider(
    provider_type: str,
    client_id: str,
    client_secret: str,
    instance: str | None = None,
    **options: Any,
) -> Oauth2Provider:
    """Factory to create a provider from its type name.

    Args:
        provider_type: One of "gitlab", "linkedin" or "mastodon"
        client_id: OAuth client ID
        client_secret: OAuth client secret
        instance: Hostname of a self-hosted instance (ignored for LinkedIn)
        **options: Engine options (scopes, pkce, query, ...)

    Returns:
        Oauth2Provider for the resolved endpoints

    Raises:
        UnknownProviderError: If provider_type is unknown
        ProviderConfigError: If the credentials are empty
    """
    values: dict[str, Any] = {
        "client_id": client_id,
        "client_secret": client_secret,
        "instance": instance,
        **options,
    }
    return Oauth2Provider(resolve(provider_type, build_config(provider_type, values)))
