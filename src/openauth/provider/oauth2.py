"""Shared OAuth2 authorization-code engine handle.

An ``Oauth2Provider`` wraps a ``ResolvedProvider`` and drives the parts of
the authorization-code flow that need its endpoints:
- Building the authorization redirect URL (state, scopes, optional PKCE)
- Exchanging an authorization code for tokens
- Refreshing tokens

Token requests go through authlib's ``AsyncOAuth2Client``. Credentials are
validated here, when the provider is handed to the engine, not during
resolution.
"""

from __future__ import annotations

import base64
import hashlib
import secrets
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

import httpx
import structlog

from openauth.core.config import get_config
from openauth.provider.config import EndpointDescriptor, ResolvedProvider

if TYPE_CHECKING:
    from authlib.integrations.httpx_client import AsyncOAuth2Client

logger = structlog.get_logger()


class ProviderConfigError(ValueError):
    """Raised when a resolved provider cannot be used by the engine."""


class Oauth2Error(Exception):
    """Error returned by (or while talking to) a provider's token endpoint."""

    def __init__(self, error: str, description: str | None = None, status_code: int = 400):
        super().__init__(description or error)
        self.error = error
        self.description = description
        self.status_code = status_code


@dataclass
class AuthorizationRequest:
    """Where to send the user, plus what the callback needs to verify."""

    url: str
    state: str
    code_verifier: str | None = None


@dataclass
class TokenSet:
    """Tokens returned by the provider."""

    access: str
    refresh: str | None = None
    expires_in: float | None = None
    token_type: str = "Bearer"
    raw: dict[str, Any] = field(default_factory=dict)
    issued_at: float = field(default_factory=time.time)

    @property
    def expires_at(self) -> float | None:
        if self.expires_in is None:
            return None
        return self.issued_at + self.expires_in


def generate_pkce() -> tuple[str, str]:
    """Generate a PKCE (RFC 7636) verifier and its S256 challenge."""
    code_verifier = secrets.token_urlsafe(64)
    code_challenge = (
        base64.urlsafe_b64encode(hashlib.sha256(code_verifier.encode()).digest())
        .decode()
        .rstrip("=")
    )
    return code_verifier, code_challenge


class Oauth2Provider:
    """OAuth2 authorization-code flow for a single resolved provider."""

    def __init__(
        self,
        provider: ResolvedProvider,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Hand a resolved provider to the engine.

        Args:
            provider: Output of the provider resolver
            transport: Optional httpx transport for token requests (e.g. a
                proxy or mock transport). The default network transport otherwise.

        Raises:
            ProviderConfigError: If client_id or client_secret is empty
        """
        if not provider.client_id:
            raise ProviderConfigError(f"{provider.type} provider requires client_id")
        if not provider.client_secret:
            raise ProviderConfigError(f"{provider.type} provider requires client_secret")

        self._provider = provider
        self._transport = transport

        logger.debug(
            "OAuth2 provider created",
            provider=provider.type,
            authorization=provider.endpoint.authorization,
            token=provider.endpoint.token,
            pkce=provider.pkce,
        )

    @property
    def type(self) -> str:
        return self._provider.type

    @property
    def endpoint(self) -> EndpointDescriptor:
        return self._provider.endpoint

    @property
    def config(self) -> ResolvedProvider:
        return self._provider

    def authorize(self, redirect_uri: str, state: str | None = None) -> AuthorizationRequest:
        """Build the authorization URL to redirect the user to.

        Args:
            redirect_uri: Callback URL registered with the provider
            state: CSRF state; a random one is generated when omitted

        Returns:
            AuthorizationRequest with the URL, the state and, when PKCE is
            enabled, the code verifier to keep for the callback
        """
        provider = self._provider
        state = state or secrets.token_urlsafe(32)

        params: dict[str, str] = {
            "client_id": provider.client_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "state": state,
        }
        if provider.scopes:
            params["scope"] = " ".join(provider.scopes)

        code_verifier = None
        if provider.pkce:
            code_verifier, code_challenge = generate_pkce()
            params["code_challenge"] = code_challenge
            params["code_challenge_method"] = "S256"

        params.update(provider.query)

        return AuthorizationRequest(
            url=f"{provider.endpoint.authorization}?{urlencode(params)}",
            state=state,
            code_verifier=code_verifier,
        )

    async def exchange_code(
        self,
        code: str,
        redirect_uri: str,
        code_verifier: str | None = None,
    ) -> TokenSet:
        """Exchange an authorization code for tokens.

        Raises:
            Oauth2Error: If the token endpoint rejects the request
        """
        params = {"code": code}
        if code_verifier:
            params["code_verifier"] = code_verifier

        with self._token_errors("exchange_code"):
            async with self._oauth_client(redirect_uri=redirect_uri) as client:
                token = await client.fetch_token(url=self._provider.endpoint.token, **params)
        return self._token_set(token, context="exchange_code")

    async def refresh(self, refresh_token: str) -> TokenSet:
        """Exchange a refresh token for a new token set.

        The original refresh token is kept when the provider does not rotate it.

        Raises:
            Oauth2Error: If the token endpoint rejects the request
        """
        with self._token_errors("refresh"):
            async with self._oauth_client() as client:
                token = await client.refresh_token(
                    url=self._provider.endpoint.token,
                    refresh_token=refresh_token,
                )
        return self._token_set(token, context="refresh")

    def _oauth_client(self, redirect_uri: str | None = None) -> AsyncOAuth2Client:
        from authlib.integrations.httpx_client import AsyncOAuth2Client

        client_kwargs: dict[str, Any] = {"timeout": get_config().http_timeout}
        if self._transport is not None:
            client_kwargs["transport"] = self._transport

        return AsyncOAuth2Client(
            client_id=self._provider.client_id,
            client_secret=self._provider.client_secret,
            token_endpoint_auth_method="client_secret_post",
            redirect_uri=redirect_uri,
            token_endpoint=self._provider.endpoint.token,
            **client_kwargs,
        )

    @contextmanager
    def _token_errors(self, context: str) -> Iterator[None]:
        from authlib.integrations.base_client import OAuthError

        try:
            yield
        except OAuthError as e:
            logger.warning(
                "Token endpoint returned error",
                provider=self._provider.type,
                context=context,
                error=e.error,
            )
            raise Oauth2Error(e.error or "invalid_grant", e.description, 400) from e
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Token endpoint returned error status",
                provider=self._provider.type,
                context=context,
                status_code=e.response.status_code,
            )
            raise Oauth2Error(
                "server_error", "Token endpoint failed", e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            logger.warning(
                "Token request failed",
                provider=self._provider.type,
                context=context,
                error=str(e),
            )
            raise Oauth2Error("server_error", "Token endpoint unreachable", 502) from e
        except ValueError as e:
            logger.warning(
                "Token endpoint returned invalid JSON",
                provider=self._provider.type,
                context=context,
            )
            raise Oauth2Error("invalid_response", "Token response was not JSON", 502) from e

    def _token_set(self, token: Any, context: str) -> TokenSet:
        if not isinstance(token, dict):
            raise Oauth2Error("invalid_response", "Token response was invalid", 502)
        access_token = token.get("access_token")
        if not access_token:
            raise Oauth2Error("invalid_grant", "No access_token in response", 400)

        expires_in = token.get("expires_in")
        logger.info("Token issued", provider=self._provider.type, context=context)
        return TokenSet(
            access=access_token,
            refresh=token.get("refresh_token"),
            expires_in=float(expires_in) if expires_in is not None else None,
            token_type=token.get("token_type") or "Bearer",
            raw=dict(token),
        )
