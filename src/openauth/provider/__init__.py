"""Identity provider adapters for the OAuth2 issuer.

Each supported identity provider maps to a fixed pair of OAuth2 endpoints,
optionally pointed at a self-hosted instance. Resolution turns a provider
type and its config into a ``ResolvedProvider``; the factories hand that to
the shared ``Oauth2Provider`` engine.

Example usage:

    from openauth.provider import (
        MastodonConfig,
        create_provider,
        mastodon_provider,
        resolve,
    )

    # Resolve endpoints only
    resolved = resolve(
        "mastodon",
        MastodonConfig(client_id="...", client_secret="...", instance="hachyderm.io"),
    )
    resolved.endpoint.authorization  # https://hachyderm.io/oauth/authorize

    # Or build an engine handle directly
    gitlab = create_provider(
        "gitlab",
        client_id="...",
        client_secret="...",
        instance="gitlab.mycompany.com",
        scopes=["read_user"],
    )
    request = gitlab.authorize("https://auth.mycompany.com/gitlab/callback")
"""

from openauth.provider.config import (
    EndpointDescriptor,
    GitlabConfig,
    LinkedInConfig,
    MastodonConfig,
    Oauth2WrappedConfig,
    ResolvedProvider,
)
from openauth.provider.oauth2 import (
    AuthorizationRequest,
    Oauth2Error,
    Oauth2Provider,
    ProviderConfigError,
    TokenSet,
    generate_pkce,
)
from openauth.provider.providers import (
    create_provider,
    gitlab_provider,
    linkedin_provider,
    mastodon_provider,
)
from openauth.provider.registry import (
    PROVIDERS,
    ProviderTemplate,
    UnknownProviderError,
    build_config,
    get_template,
    resolve,
    resolve_host,
    supported_providers,
)

__all__ = [
    # Config
    "EndpointDescriptor",
    "GitlabConfig",
    "LinkedInConfig",
    "MastodonConfig",
    "Oauth2WrappedConfig",
    "ResolvedProvider",
    # Engine
    "AuthorizationRequest",
    "Oauth2Error",
    "Oauth2Provider",
    "ProviderConfigError",
    "TokenSet",
    "generate_pkce",
    # Factories
    "create_provider",
    "gitlab_provider",
    "linkedin_provider",
    "mastodon_provider",
    # Registry
    "PROVIDERS",
    "ProviderTemplate",
    "UnknownProviderError",
    "build_config",
    "get_template",
    "resolve",
    "resolve_host",
    "supported_providers",
]
